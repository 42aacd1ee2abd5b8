""" Configuration space for a robot's controllable joints. """

import numpy as np

from ..core.utils import (
    discretize_joint_space_path,
    joint_space_difference,
    wrap_angle,
)

JOINT_PERIOD = 2.0 * np.pi
DEFAULT_PROJECTION_NAME = ""


class JointTopology:
    """Describes the topology of a single joint in a configuration space."""

    def __init__(self, index, is_continuous, lower=None, upper=None):
        """
        Creates a joint topology instance.

        Parameters
        ----------
            index : int
                The index of the joint in the robot model.
            is_continuous : bool
                If True, the joint wraps around with a period of 2*pi and ignores bounds.
            lower : float, optional
                The lower bound of a bounded joint.
            upper : float, optional
                The upper bound of a bounded joint.
        """
        self.index = index
        self.is_continuous = bool(is_continuous)
        self.lower = lower
        self.upper = upper

    @property
    def period(self):
        """The period of a continuous joint, or None for a bounded joint."""
        return JOINT_PERIOD if self.is_continuous else None

    @property
    def has_bounds(self):
        return self.is_continuous or (self.lower is not None and self.upper is not None)

    @property
    def extent(self):
        """The width of the joint's value range, or None if a bounded joint has no bounds yet."""
        if self.is_continuous:
            return JOINT_PERIOD
        if not self.has_bounds:
            return None
        return self.upper - self.lower

    def __str__(self):
        kind = "continuous" if self.is_continuous else f"[{self.lower}, {self.upper}]"
        return f"JointTopology(index={self.index}, {kind})"


class RobotStateSpace:
    """
    A configuration space composed of one scalar coordinate per robot joint.

    Bounded joints are treated as real intervals with linear distance and interpolation.
    Continuous joints are treated as circles, using shortest-arc distance and interpolation.

    States are NumPy arrays with one value per joint, ordered as the joint indices of the space.
    """

    def __init__(self, dof_indices, is_continuous):
        """
        Creates a robot state space.

        Parameters
        ----------
            dof_indices : list[int]
                An ordered list of joint indices that the states of this space correspond to.
            is_continuous : list[bool]
                Flags marking which of the joints in `dof_indices` are continuous.
        """
        dof_indices = list(dof_indices)
        is_continuous = list(is_continuous)
        if len(dof_indices) != len(is_continuous):
            raise ValueError(
                f"Got {len(dof_indices)} joint indices but {len(is_continuous)} continuity flags."
            )
        if len(dof_indices) == 0:
            raise ValueError("A robot state space requires at least one joint index.")
        if len(set(dof_indices)) != len(dof_indices):
            raise ValueError(f"Joint indices must be unique, got {dof_indices}.")

        self._indices = tuple(int(index) for index in dof_indices)
        self.topology = tuple(
            JointTopology(index, continuous)
            for index, continuous in zip(self._indices, is_continuous)
        )
        self._is_continuous = np.array(
            [joint.is_continuous for joint in self.topology], dtype=bool
        )
        self._is_continuous.setflags(write=False)
        self._lower = None
        self._upper = None

        self._projections = {}

    @classmethod
    def from_robot(cls, robot, dof_indices):
        """
        Creates a bounded robot state space from the joints of a robot.

        Parameters
        ----------
            robot : `robospace.core.planning_context.PlanningContext`
                The robot whose joint types and limits define the space.
            dof_indices : list[int]
                An ordered list of joint indices.

        Returns
        -------
            `RobotStateSpace`
                The state space, with bounds set from the robot's joint limits.
        """
        is_continuous = [robot.is_continuous_joint(index) for index in dof_indices]
        space = cls(dof_indices, is_continuous)
        lower, upper = robot.get_joint_limits(dof_indices)
        space.set_bounds(lower, upper)
        return space

    def get_indices(self):
        """Returns the ordered list of joint indices this space corresponds to."""
        return list(self._indices)

    def get_dimension(self):
        return len(self._indices)

    @property
    def is_continuous(self):
        """Read-only array of flags marking the continuous coordinates."""
        return self._is_continuous

    @property
    def is_linear(self):
        """True if no coordinate of this space is continuous."""
        return not np.any(self._is_continuous)

    def has_bounds(self):
        return self._lower is not None

    def set_bounds(self, lower, upper):
        """
        Sets the bounds of the bounded coordinates.

        Bounds can only be set once. Entries for continuous coordinates are ignored.

        Parameters
        ----------
            lower : array-like
                The lower bound of each coordinate.
            upper : array-like
                The upper bound of each coordinate.
        """
        if self.has_bounds():
            raise ValueError("Bounds of a robot state space cannot be changed once set.")

        dim = self.get_dimension()
        lower = np.array(lower, dtype=np.float64)
        upper = np.array(upper, dtype=np.float64)
        if lower.shape != (dim,) or upper.shape != (dim,):
            raise ValueError(f"Bounds must have shape ({dim},).")

        bounded = ~self._is_continuous
        if not np.all(np.isfinite(lower[bounded])) or not np.all(
            np.isfinite(upper[bounded])
        ):
            raise ValueError("Bounds of bounded joints must be finite.")
        if np.any(lower[bounded] > upper[bounded]):
            raise ValueError("Lower bounds must not exceed upper bounds.")

        lower[self._is_continuous] = -np.pi
        upper[self._is_continuous] = np.pi
        lower.setflags(write=False)
        upper.setflags(write=False)
        self._lower = lower
        self._upper = upper

        for joint, lo, hi in zip(self.topology, lower, upper):
            if not joint.is_continuous:
                joint.lower = float(lo)
                joint.upper = float(hi)

    def get_bounds(self):
        """
        Returns the bounds of the space.

        Continuous coordinates report bounds of [-pi, pi].

        Returns
        -------
            tuple(array-like, array-like)
                The read-only lower and upper bound arrays.
        """
        if self.has_bounds():
            return self._lower, self._upper
        # A space of only continuous joints needs no explicit bounds.
        if not np.all(self._is_continuous):
            raise ValueError("Bounds must be set on the robot state space first.")
        dim = self.get_dimension()
        return np.full(dim, -np.pi), np.full(dim, np.pi)

    def get_extents(self):
        """Returns the width of each coordinate's range, using the full period for continuous ones."""
        lower, upper = self.get_bounds()
        return np.where(self._is_continuous, JOINT_PERIOD, upper - lower)

    def get_maximum_extent(self):
        """
        Returns the maximum distance between any two states of the space.

        Returns
        -------
            float
                The maximum extent of the space.
        """
        extents = np.where(self._is_continuous, np.pi, self.get_extents())
        return np.linalg.norm(extents)

    def allocate_state(self):
        """Returns a new state with all coordinates set to zero."""
        return np.zeros(self.get_dimension())

    def copy_state(self, state):
        return np.array(state, dtype=np.float64)

    def to_joint_values(self, state):
        """
        Flattens a state into the ordered joint values, wrapping continuous coordinates into [-pi, pi).

        Parameters
        ----------
            state : array-like
                The state to convert.

        Returns
        -------
            array-like
                The joint values, ordered as the joint indices of the space.
        """
        values = np.array(state, dtype=np.float64)
        if values.shape != (self.get_dimension(),):
            raise ValueError(
                f"State has shape {values.shape} but the space has dimension {self.get_dimension()}."
            )
        values[self._is_continuous] = wrap_angle(values[self._is_continuous])
        return values

    def distance(self, state1, state2):
        """
        Returns the distance between two states.

        Continuous coordinates contribute their shortest-arc difference.

        Parameters
        ----------
            state1 : array-like
                The first state.
            state2 : array-like
                The second state.

        Returns
        -------
            float
                The distance between the two states.
        """
        return np.linalg.norm(joint_space_difference(state1, state2, self._is_continuous))

    def equal_states(self, state1, state2):
        """Checks whether two states represent the same configuration."""
        return bool(
            np.all(joint_space_difference(state1, state2, self._is_continuous) == 0.0)
        )

    def interpolate(self, state_from, state_to, t):
        """
        Interpolates between two states.

        Parameters
        ----------
            state_from : array-like
                The state at `t = 0`.
            state_to : array-like
                The state at `t = 1`.
            t : float
                The interpolation parameter, between 0 and 1.

        Returns
        -------
            array-like
                The interpolated state.
        """
        if t == 0.0:
            return self.copy_state(state_from)
        if t == 1.0:
            return self.copy_state(state_to)

        state_from = np.asarray(state_from, dtype=np.float64)
        state = state_from + t * joint_space_difference(
            state_from, state_to, self._is_continuous
        )
        state[self._is_continuous] = wrap_angle(state[self._is_continuous])
        return state

    def discretize(self, state_from, state_to, max_step):
        """
        Returns states along the motion between two states, no further apart than `max_step`.

        Parameters
        ----------
            state_from : array-like
                The start state.
            state_to : array-like
                The end state.
            max_step : float
                The maximum distance between consecutive states.

        Returns
        -------
            list[array-like]
                The states along the motion, including both endpoints.
        """
        return discretize_joint_space_path(
            [state_from, state_to], max_step, self._is_continuous
        )

    def sample_uniform(self):
        """
        Samples a state uniformly from the space.

        Bounded coordinates are sampled within their bounds, and continuous coordinates over their full period.

        Returns
        -------
            array-like
                The sampled state.
        """
        lower, upper = self.get_bounds()
        return np.random.uniform(lower, upper)

    def sample_uniform_near(self, state, distance):
        """
        Samples a state uniformly within `distance` of each coordinate of a given state.

        Parameters
        ----------
            state : array-like
                The state to sample near.
            distance : float
                The maximum per-coordinate distance from `state`.

        Returns
        -------
            array-like
                The sampled state, inside the bounds of the space.
        """
        if distance < 0.0:
            raise ValueError("Sampling distance must be nonnegative.")
        state = np.asarray(state, dtype=np.float64)
        sample = np.random.uniform(state - distance, state + distance)
        return self.enforce_bounds(sample)

    def enforce_bounds(self, state):
        """
        Returns a copy of a state with bounded coordinates clipped and continuous coordinates wrapped.

        Parameters
        ----------
            state : array-like
                The state to bring inside the space.

        Returns
        -------
            array-like
                The state inside the bounds of the space.
        """
        lower, upper = self.get_bounds()
        state = np.asarray(state, dtype=np.float64)
        return np.where(self._is_continuous, wrap_angle(state), np.clip(state, lower, upper))

    def satisfies_bounds(self, state):
        """
        Checks whether a state is within the bounds of the space.

        Continuous coordinates always satisfy the bounds.

        Parameters
        ----------
            state : array-like
                The state to check.

        Returns
        -------
            bool
                True if every bounded coordinate is within its bounds, otherwise False.
        """
        lower, upper = self.get_bounds()
        state = np.asarray(state, dtype=np.float64)
        if state.shape != (self.get_dimension(),):
            return False
        bounded = ~self._is_continuous
        return bool(
            np.all(state[bounded] >= lower[bounded])
            and np.all(state[bounded] <= upper[bounded])
        )

    def register_projections(self):
        """
        Registers the default projection of this space.

        This is safe to call multiple times, and never registers more than one default projection.
        """
        if self.has_default_projection():
            return
        # Imported here since the projection module depends on this one.
        from .projection import RobotProjectionEvaluator

        self.register_default_projection(RobotProjectionEvaluator(self))

    def register_projection(self, name, evaluator):
        """
        Registers a projection evaluator under a name, replacing any existing one with that name.

        Parameters
        ----------
            name : str
                The name of the projection.
            evaluator : `robospace.spaces.projection.RobotProjectionEvaluator`
                The projection evaluator.
        """
        self._projections[name] = evaluator

    def register_default_projection(self, evaluator):
        self.register_projection(DEFAULT_PROJECTION_NAME, evaluator)

    def has_projection(self, name):
        return name in self._projections

    def has_default_projection(self):
        return self.has_projection(DEFAULT_PROJECTION_NAME)

    def get_projection(self, name):
        if name not in self._projections:
            raise ValueError(f"No projection named '{name}' is registered.")
        return self._projections[name]

    def get_default_projection(self):
        return self.get_projection(DEFAULT_PROJECTION_NAME)

    def get_registered_projections(self):
        """Returns a dictionary of all the registered projection evaluators, keyed by name."""
        return dict(self._projections)

    def setup(self):
        """Registers the projections of this space and sets each of them up."""
        self.register_projections()
        for evaluator in self._projections.values():
            evaluator.setup()
