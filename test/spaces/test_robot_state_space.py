import numpy as np
import pytest

from robospace.core.planning_context import PlanningContext
from robospace.core.planning_scene import PlanningScene
from robospace.models.planar_arm import load_models
from robospace.spaces.projection import RobotProjectionEvaluator
from robospace.spaces.robot_state_space import JointTopology, RobotStateSpace


# Use a fixed seed for random number generation in tests.
np.random.seed(1234)


def make_space():
    space = RobotStateSpace([1, 2, 3], [False, True, False])
    space.set_bounds([0.0, 0.0, -1.0], [1.0, 0.0, 1.0])
    return space


def test_create_space():
    space = make_space()
    assert space.get_indices() == [1, 2, 3]
    assert space.get_dimension() == 3
    assert np.all(space.is_continuous == [False, True, False])
    assert not space.is_linear
    assert RobotStateSpace([4, 5], [False, False]).is_linear


def test_create_space_mismatched_lengths():
    with pytest.raises(ValueError):
        RobotStateSpace([1, 2, 3], [False, True])


def test_create_space_bad_indices():
    with pytest.raises(ValueError):
        RobotStateSpace([], [])
    with pytest.raises(ValueError):
        RobotStateSpace([1, 1], [False, False])


def test_joint_topology():
    space = make_space()
    bounded, continuous, _ = space.topology

    assert continuous.is_continuous
    assert continuous.period == pytest.approx(2.0 * np.pi)
    assert continuous.extent == pytest.approx(2.0 * np.pi)

    assert not bounded.is_continuous
    assert bounded.period is None
    assert bounded.lower == 0.0
    assert bounded.upper == 1.0
    assert bounded.extent == pytest.approx(1.0)

    unbounded = JointTopology(7, False)
    assert not unbounded.has_bounds
    assert unbounded.extent is None
    assert str(unbounded) == "JointTopology(index=7, [None, None])"


def test_set_bounds():
    space = make_space()
    lower, upper = space.get_bounds()

    # Continuous joint bounds are ignored.
    assert lower == pytest.approx([0.0, -np.pi, -1.0])
    assert upper == pytest.approx([1.0, np.pi, 1.0])

    with pytest.raises(ValueError):
        lower[0] = -1.0


def test_set_bounds_errors():
    space = RobotStateSpace([1, 2], [False, False])
    with pytest.raises(ValueError):
        space.get_bounds()
    with pytest.raises(ValueError):
        space.sample_uniform()
    with pytest.raises(ValueError):
        space.set_bounds([0.0], [1.0])
    with pytest.raises(ValueError):
        space.set_bounds([0.0, 2.0], [1.0, 1.0])
    with pytest.raises(ValueError):
        space.set_bounds([0.0, -np.inf], [1.0, 1.0])

    space.set_bounds([0.0, 0.0], [1.0, 1.0])
    with pytest.raises(ValueError):
        space.set_bounds([0.0, 0.0], [2.0, 2.0])


def test_continuous_space_needs_no_bounds():
    space = RobotStateSpace([1], [True])
    assert not space.has_bounds()
    for _ in range(100):
        q = space.sample_uniform()
        assert -np.pi <= q[0] < np.pi


def test_distance():
    space = make_space()
    q1 = np.array([0.0, 3.0, 0.0])
    q2 = np.array([0.3, -3.0, 0.4])

    assert space.distance(q1, q1) == 0.0
    assert space.distance(q1, q2) == pytest.approx(
        np.sqrt(0.3**2 + (2.0 * np.pi - 6.0) ** 2 + 0.4**2)
    )
    assert space.distance(q1, q2) == pytest.approx(space.distance(q2, q1))


def test_distance_properties_random():
    space = make_space()
    for _ in range(100):
        q1 = space.sample_uniform()
        q2 = space.sample_uniform()
        assert space.distance(q1, q1) == 0.0
        assert space.distance(q1, q2) == pytest.approx(space.distance(q2, q1))
        assert space.distance(q1, q2) <= space.get_maximum_extent() + 1e-9


def test_distance_across_period():
    space = make_space()
    for value in [-3.0, -0.5, 0.0, 1.2, 3.1]:
        q1 = np.array([0.5, value, 0.0])
        q2 = np.array([0.5, value + 2.0 * np.pi, 0.0])
        assert space.distance(q1, q2) == pytest.approx(0.0, abs=1e-9)
        assert space.equal_states(q1, q1)


def test_interpolate_endpoints():
    space = make_space()
    q1 = np.array([0.1, 3.0, -0.5])
    q2 = np.array([0.9, 4.0, 0.5])

    q_start = space.interpolate(q1, q2, 0.0)
    q_end = space.interpolate(q1, q2, 1.0)
    assert np.all(q_start == q1)
    assert np.all(q_end == q2)

    # The result is a copy.
    q_start[0] = 0.0
    assert q1[0] == 0.1


def test_interpolate_shortest_arc():
    space = make_space()
    q1 = np.array([0.0, 3.0, -1.0])
    q2 = np.array([1.0, -3.0, 1.0])

    q_mid = space.interpolate(q1, q2, 0.5)
    assert q_mid[0] == pytest.approx(0.5)
    assert q_mid[2] == pytest.approx(0.0)
    # Halfway along the shortest arc from 3 to -3 is pi, not zero.
    assert abs(q_mid[1]) == pytest.approx(np.pi)
    assert space.distance(q1, q_mid) == pytest.approx(space.distance(q_mid, q2))


def test_sample_uniform_within_bounds():
    space = RobotStateSpace([1, 2], [False, True])
    space.set_bounds([-0.5, 0.0], [2.0, 0.0])

    samples = np.array([space.sample_uniform() for _ in range(10000)])
    assert np.all(samples[:, 0] >= -0.5)
    assert np.all(samples[:, 0] <= 2.0)
    assert np.all(samples[:, 1] >= -np.pi)
    assert np.all(samples[:, 1] < np.pi)

    # Continuous samples cover the full period evenly.
    counts, _ = np.histogram(samples[:, 1], bins=8, range=(-np.pi, np.pi))
    assert np.all(np.abs(counts - 1250) < 200)
    counts, _ = np.histogram(samples[:, 0], bins=5, range=(-0.5, 2.0))
    assert np.all(np.abs(counts - 2000) < 250)


def test_sample_uniform_near():
    space = make_space()
    q = np.array([0.95, 3.1, 0.0])
    for _ in range(100):
        sample = space.sample_uniform_near(q, 0.1)
        assert space.satisfies_bounds(sample)
        assert 0.85 <= sample[0] <= 1.0
        assert space.distance(q, sample) <= np.sqrt(3.0) * 0.1 + 1e-9

    with pytest.raises(ValueError):
        space.sample_uniform_near(q, -1.0)


def test_enforce_and_satisfy_bounds():
    space = make_space()
    q = np.array([1.5, 2.0 * np.pi + 0.5, -3.0])

    assert not space.satisfies_bounds(q)
    q_enforced = space.enforce_bounds(q)
    assert q_enforced == pytest.approx([1.0, 0.5, -1.0])
    assert space.satisfies_bounds(q_enforced)

    # Continuous coordinates never violate bounds, and the state must have the right size.
    assert space.satisfies_bounds(np.array([0.5, 100.0, 0.0]))
    assert not space.satisfies_bounds(np.array([0.5, 0.0]))


def test_maximum_extent():
    space = make_space()
    assert space.get_maximum_extent() == pytest.approx(np.sqrt(1.0 + np.pi**2 + 4.0))
    assert space.get_extents() == pytest.approx([1.0, 2.0 * np.pi, 2.0])


def test_to_joint_values():
    space = make_space()
    values = space.to_joint_values([0.5, 2.0 * np.pi + 0.25, 0.5])
    assert values == pytest.approx([0.5, 0.25, 0.5])

    with pytest.raises(ValueError):
        space.to_joint_values([0.5, 0.25])


def test_allocate_and_copy_state():
    space = make_space()
    state = space.allocate_state()
    assert state.shape == (3,)
    assert np.all(state == 0.0)

    copied = space.copy_state(state)
    copied[0] = 1.0
    assert state[0] == 0.0


def test_discretize():
    space = make_space()
    q1 = np.array([0.0, 3.0, 0.0])
    q2 = np.array([0.0, -3.0, 0.0])
    states = space.discretize(q1, q2, 0.1)

    assert len(states) == 4
    assert np.all(states[0] == q1)
    assert np.all(states[-1] == q2)
    for idx in range(1, len(states)):
        assert space.distance(states[idx - 1], states[idx]) <= 0.1 + 1e-9


def test_register_projections_is_idempotent():
    space = make_space()
    assert not space.has_default_projection()

    space.register_projections()
    evaluator = space.get_default_projection()
    assert isinstance(evaluator, RobotProjectionEvaluator)

    space.register_projections()
    space.setup()
    space.setup()
    assert space.get_default_projection() is evaluator
    assert len(space.get_registered_projections()) == 1
    assert evaluator.is_setup()


def test_register_named_projection():
    space = make_space()
    first = RobotProjectionEvaluator(space)
    second = RobotProjectionEvaluator(space)

    space.register_projection("custom", first)
    space.register_projection("custom", second)
    assert space.get_projection("custom") is second
    assert space.has_projection("custom")
    assert not space.has_default_projection()

    space.setup()
    assert len(space.get_registered_projections()) == 2
    assert second.is_setup()

    with pytest.raises(ValueError):
        space.get_projection("missing")


def test_space_from_robot():
    model, collision_model, visual_model = load_models(
        num_links=3, continuous_base=True
    )
    robot = PlanningContext(PlanningScene(model, collision_model, visual_model))
    space = RobotStateSpace.from_robot(robot, [1, 2, 3])

    assert space.get_indices() == [1, 2, 3]
    assert np.all(space.is_continuous == [True, False, False])
    lower, upper = space.get_bounds()
    assert lower == pytest.approx([-np.pi, -np.pi, -np.pi])
    assert upper == pytest.approx([np.pi, np.pi, np.pi])
