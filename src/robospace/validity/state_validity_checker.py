""" State validity checking against robot forward kinematics and collisions. """

import numpy as np
import time
import warnings

from ..core.planning_context import CheckLimitsAction


class StateValidityCheckerOptions:
    """Options for state validity checking."""

    def __init__(
        self,
        check_limits=CheckLimitsAction.NOTHING,
        require_linear=False,
    ):
        """
        Initializes a set of state validity checker options.

        Parameters
        ----------
            check_limits : `robospace.core.planning_context.CheckLimitsAction`
                The joint limit mode forwarded to the robot when checking state validity.
            require_linear : bool
                If True, the state space must not contain any continuous joints.
                States are then read as flat joint value arrays with no per-coordinate wrapping.
        """
        self.check_limits = check_limits
        self.require_linear = require_linear


class StateValidityChecker:
    """
    Checks whether robot states are valid by computing forward kinematics and querying collisions.

    Checking a state writes its joint values to the robot and recomputes its forward kinematics,
    so the robot pose is not preserved across calls. The checker and its robot are meant to be used
    from a single thread; the collision statistics are not synchronized.
    """

    def __init__(
        self, state_space, robot, indices, options=StateValidityCheckerOptions()
    ):
        """
        Creates a state validity checker.

        Parameters
        ----------
            state_space : `robospace.spaces.robot_state_space.RobotStateSpace`
                The state space of the states to check.
            robot : `robospace.core.planning_context.PlanningContext`
                The robot to set states on. This is mutated by every check.
            indices : list[int]
                The ordered joint indices that state coordinates are written to.
            options : `StateValidityCheckerOptions`, optional
                The options to use for validity checking. If not specified, default options are used.
        """
        indices = [int(index) for index in indices]
        if indices != state_space.get_indices():
            raise ValueError(
                f"Joint indices {indices} do not match the state space indices {state_space.get_indices()}."
            )
        if options.require_linear and not state_space.is_linear:
            continuous = [
                joint.index for joint in state_space.topology if joint.is_continuous
            ]
            raise ValueError(
                f"Linear state validity checking does not support continuous joints {continuous}."
            )

        self.state_space = state_space
        self.robot = robot
        self.options = options
        self._indices = tuple(indices)
        self._num_dof = len(indices)
        self.is_linear = state_space.is_linear
        self.reset_statistics()

    def get_indices(self):
        return list(self._indices)

    def reset_statistics(self):
        """Resets the number of collision checks and the total collision checking time."""
        self._num_collision_checks = 0
        self._total_collision_time = 0.0

    def get_num_collision_checks(self):
        return self._num_collision_checks

    def get_total_collision_time(self):
        """Returns the total time, in seconds, spent checking state validity since the last reset."""
        return self._total_collision_time

    def _get_joint_values(self, state):
        if self.is_linear:
            try:
                values = np.asarray(state, dtype=np.float64)
            except (TypeError, ValueError):
                return None
            if values.shape != (self._num_dof,):
                return None
            return values

        try:
            return self.state_space.to_joint_values(state)
        except ValueError:
            return None

    def compute_fk(self, state, check_limits):
        """
        Writes a state to the robot and recomputes its forward kinematics.

        Parameters
        ----------
            state : array-like
                The state to set on the robot.
            check_limits : `robospace.core.planning_context.CheckLimitsAction`
                The joint limit mode, forwarded to the robot as is.

        Returns
        -------
            bool
                True if the state was written and forward kinematics was computed, otherwise False.
        """
        values = self._get_joint_values(state)
        if values is None:
            warnings.warn(
                f"Rejecting state that does not hold {self._num_dof} joint values."
            )
            return False

        try:
            self.robot.set_joint_values(values, self._indices, check_limits)
            self.robot.compute_forward_kinematics()
        except ValueError:
            return False
        return True

    def is_valid(self, state):
        """
        Checks whether a state is valid, meaning that it can be set on the robot and is collision-free.

        Every call counts towards the collision checking statistics, whatever the result.
        A failed collision check is reported as an invalid state.

        Parameters
        ----------
            state : array-like
                The state to check.

        Returns
        -------
            bool
                True if the state is valid, otherwise False.
        """
        t_start = time.perf_counter()
        try:
            if not self.compute_fk(state, self.options.check_limits):
                return False
            try:
                in_collision = self.robot.check_collisions()
            except (RuntimeError, ValueError) as err:
                warnings.warn(f"Treating state as invalid after failed collision check: {err}")
                return False
            return not in_collision
        finally:
            self._num_collision_checks += 1
            self._total_collision_time += time.perf_counter() - t_start

    def check_motion(self, state_from, state_to, max_step):
        """
        Checks whether the motion between two states is valid at a given resolution.

        Parameters
        ----------
            state_from : array-like
                The start state.
            state_to : array-like
                The end state.
            max_step : float
                The maximum distance between checked states along the motion.

        Returns
        -------
            bool
                True if every checked state along the motion is valid, otherwise False.
        """
        for state in self.state_space.discretize(state_from, state_to, max_step):
            if not self.is_valid(state):
                return False
        return True
