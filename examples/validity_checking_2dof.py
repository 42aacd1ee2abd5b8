"""
This example shows robospace capabilities for checking the validity of sampled states
of a 2-DOF manipulator whose base joint is continuous.
"""

import numpy as np

from robospace.core.planning_context import PlanningContext
from robospace.core.planning_scene import PlanningScene
from robospace.models.planar_arm import load_models, add_object_collisions
from robospace.spaces.robot_state_space import RobotStateSpace
from robospace.validity.state_validity_checker import StateValidityChecker

if __name__ == "__main__":
    # Create models and the robot handle
    model, collision_model, visual_model = load_models(continuous_base=True)
    add_object_collisions(
        collision_model, visual_model, position=[0.6, 0.6, 0.0], radius=0.2
    )
    scene = PlanningScene(model, collision_model, visual_model, distance_padding=0.02)
    robot = PlanningContext(scene)

    # Set up the state space and its projection
    space = RobotStateSpace.from_robot(robot, [1, 2])
    space.setup()
    projection = space.get_default_projection()
    checker = StateValidityChecker(space, robot, space.get_indices())

    # Sample states and check their validity
    num_samples = 1000
    occupied_cells = set()
    for _ in range(num_samples):
        q = space.sample_uniform()
        if checker.is_valid(q):
            occupied_cells.add(tuple(projection.compute_coordinates(q)))

    num_checks = checker.get_num_collision_checks()
    total_time = checker.get_total_collision_time()
    print(f"Checked {num_checks} states in {total_time:.4f} seconds.")
    print(f"Valid states cover {len(occupied_cells)} projection cells.")

    # Check a motion that sweeps the arm through the obstacle
    q_start = np.array([0.0, 0.0])
    q_end = np.array([np.pi / 2.0, 0.0])
    result = "valid" if checker.check_motion(q_start, q_end, 0.05) else "invalid"
    print(f"Motion from {q_start} to {q_end} is {result}.")
