import copy
import enum
import numpy as np
import pinocchio
import warnings


class CheckLimitsAction(enum.IntEnum):
    """Joint limit enforcement modes used when writing joint values to a robot."""

    NOTHING = 0
    """Write the values as given, without checking joint limits."""

    CHECK_LIMITS = 1
    """Clamp out-of-range values to the joint limits and issue a warning."""

    CHECK_LIMITS_SILENT = 2
    """Clamp out-of-range values to the joint limits silently."""

    CHECK_LIMITS_THROW = 3
    """Raise a `ValueError` on out-of-range values."""


class PlanningContext:
    """
    Defines a planning context, which holds the mutable kinematic state of a robot inside a planning scene.

    Writing joint values and computing forward kinematics mutate this context.
    A context is not synchronized, so each planning thread must own its own instance
    or serialize access externally.
    """

    def __init__(self, scene):
        """
        Creates a planning context instance given a planning scene.

        Parameters
        ----------
            scene : `robospace.core.planning_scene.PlanningScene`
                The scene containing the robot models and its environment.
        """
        self._scene = scene
        self.model = scene.model
        self.data = self.model.createData()
        self.q = pinocchio.neutral(self.model)

        self._lower_limits = np.array(self.model.lowerPositionLimit, dtype=np.float64)
        self._upper_limits = np.array(self.model.upperPositionLimit, dtype=np.float64)

        # Joint index -> (configuration index, whether the joint is continuous)
        self._joint_info = {}
        for index in range(1, self.model.njoints):
            joint = self.model.joints[index]
            if joint.nv != 1:
                continue
            self._joint_info[index] = (joint.idx_q, joint.nq == 2)

        self._fk_up_to_date = False

    @property
    def scene(self):
        """The planning scene that owns this robot's environment."""
        return self._scene

    def _get_joint_info(self, index):
        if index not in self._joint_info:
            raise ValueError(
                f"Joint index {index} does not refer to a single-DOF joint of the model."
            )
        return self._joint_info[index]

    def is_continuous_joint(self, index):
        """
        Checks whether a joint is continuous, meaning it wraps around with no travel limits.

        Parameters
        ----------
            index : int
                The joint index in the model.

        Returns
        -------
            bool
                True if the joint is continuous, otherwise False.
        """
        return self._get_joint_info(index)[1]

    def get_joint_limits(self, indices):
        """
        Gets the position limits of a set of joints.

        Continuous joints report limits of [-pi, pi].

        Parameters
        ----------
            indices : list[int]
                The joint indices in the model.

        Returns
        -------
            tuple(array-like, array-like)
                The lower and upper limits, ordered as `indices`.
        """
        lower = np.zeros(len(indices))
        upper = np.zeros(len(indices))
        for i, index in enumerate(indices):
            idx_q, continuous = self._get_joint_info(index)
            if continuous:
                lower[i], upper[i] = -np.pi, np.pi
            else:
                lower[i] = self._lower_limits[idx_q]
                upper[i] = self._upper_limits[idx_q]
        return lower, upper

    def set_joint_values(self, values, indices, check_limits=CheckLimitsAction.NOTHING):
        """
        Writes values to a set of joints.

        Forward kinematics is not recomputed; call `compute_forward_kinematics` afterwards.

        Parameters
        ----------
            values : array-like
                The joint values, ordered as `indices`.
            indices : list[int]
                The joint indices in the model.
            check_limits : `CheckLimitsAction`, optional
                How to treat values outside the joint limits.
        """
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (len(indices),):
            raise ValueError(
                f"Got {values.size} joint values for {len(indices)} joint indices."
            )
        if not np.all(np.isfinite(values)):
            raise ValueError("Joint values must be finite.")

        q = self.q.copy()
        for value, index in zip(values, indices):
            idx_q, continuous = self._get_joint_info(index)
            if continuous:
                q[idx_q] = np.cos(value)
                q[idx_q + 1] = np.sin(value)
                continue

            lower = self._lower_limits[idx_q]
            upper = self._upper_limits[idx_q]
            if check_limits != CheckLimitsAction.NOTHING and not (
                lower <= value <= upper
            ):
                if check_limits == CheckLimitsAction.CHECK_LIMITS_THROW:
                    raise ValueError(
                        f"Joint {index} value {value} is outside its limits [{lower}, {upper}]."
                    )
                if check_limits == CheckLimitsAction.CHECK_LIMITS:
                    warnings.warn(
                        f"Clamping joint {index} value {value} to its limits [{lower}, {upper}]."
                    )
                value = min(max(value, lower), upper)
            q[idx_q] = value

        self.q = q
        self._fk_up_to_date = False

    def get_joint_values(self, indices):
        """
        Reads the current values of a set of joints.

        Parameters
        ----------
            indices : list[int]
                The joint indices in the model.

        Returns
        -------
            array-like
                The joint values, ordered as `indices`.
        """
        values = np.zeros(len(indices))
        for i, index in enumerate(indices):
            idx_q, continuous = self._get_joint_info(index)
            if continuous:
                values[i] = np.arctan2(self.q[idx_q + 1], self.q[idx_q])
            else:
                values[i] = self.q[idx_q]
        return values

    def compute_forward_kinematics(self):
        """Recomputes forward kinematics for the current joint configuration."""
        pinocchio.forwardKinematics(self.model, self.data, self.q)
        self._fk_up_to_date = True

    def check_collisions(self):
        """
        Checks whether the current pose of the robot is in collision with its scene.

        Returns
        -------
            bool
                True is there are any collisions or minimum distance violations, otherwise False.
        """
        if not self._fk_up_to_date:
            self.compute_forward_kinematics()
        return self.scene.check_collisions(self.data)

    def get_minimum_distance(self):
        """
        Gets the minimum distance to collision at the current pose of the robot.

        Returns
        -------
            float
                The minimum distance to collision, in meters.
        """
        if not self._fk_up_to_date:
            self.compute_forward_kinematics()
        return self.scene.get_minimum_distance(self.data)

    def get_frame_pose(self, target_frame):
        """
        Extracts the Cartesian pose of a model frame at the current pose of the robot.

        Parameters
        ----------
            target_frame : str
                The name of the target frame.

        Returns
        -------
            `pinocchio.SE3`
                The transform describing the Cartesian pose of the specified frame.
        """
        if not self._fk_up_to_date:
            self.compute_forward_kinematics()
        if not self.model.existFrame(target_frame):
            raise ValueError(f"Frame '{target_frame}' does not exist in the model.")
        target_frame_id = self.model.getFrameId(target_frame)
        pinocchio.updateFramePlacements(self.model, self.data)
        return copy.deepcopy(self.data.oMf[target_frame_id])
