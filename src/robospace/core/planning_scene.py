import numpy as np
import pinocchio


class PlanningScene:
    """
    Defines the environment a robot is checked against, which owns the collision geometry and its data.
    """

    def __init__(self, model, collision_model, visual_model=None, distance_padding=0.0):
        """
        Creates a planning scene instance given a set of Pinocchio models.

        Parameters
        ----------
            model : `pinocchio.Model`
                The kinematic model of the robot.
            collision_model : `pinocchio.GeometryModel`
                The collision model, including any obstacles and the active collision pairs.
            visual_model : `pinocchio.GeometryModel`, optional
                The visual model, kept for visualization only.
            distance_padding : float, optional
                The padding, in meters, to use for distance to nearest collision.
        """
        if distance_padding < 0.0:
            raise ValueError("Distance padding must be nonnegative.")

        self.model = model
        self.collision_model = collision_model
        self.visual_model = visual_model
        self.distance_padding = distance_padding
        self.refresh_collision_data()

    def refresh_collision_data(self):
        """
        Recreates the collision data.

        This must be called after adding geometry objects or collision pairs to the collision model.
        """
        self.collision_data = self.collision_model.createData()

    def update_geometry_placements(self, data):
        """
        Updates the placements of all collision geometries from the joint placements in `data`.

        Parameters
        ----------
            data : `pinocchio.Data`
                The model data, on which forward kinematics has already been computed.
        """
        pinocchio.updateGeometryPlacements(
            self.model, data, self.collision_model, self.collision_data
        )

    def check_collisions(self, data):
        """
        Checks whether the robot pose stored in `data` is in collision.

        Parameters
        ----------
            data : `pinocchio.Data`
                The model data, on which forward kinematics has already been computed.

        Returns
        -------
            bool
                True is there are any collisions or minimum distance violations, otherwise False.
        """
        self.update_geometry_placements(data)
        stop_at_first_collision = True  # For faster computation
        if pinocchio.computeCollisions(
            self.collision_model, self.collision_data, stop_at_first_collision
        ):
            return True

        if self.distance_padding > 0:
            pinocchio.computeDistances(self.collision_model, self.collision_data)
            if np.any(
                [
                    dr.min_distance < self.distance_padding
                    for dr in self.collision_data.distanceResults
                ]
            ):
                return True

        return False

    def get_minimum_distance(self, data):
        """
        Gets the minimum distance to collision for the robot pose stored in `data`.

        Parameters
        ----------
            data : `pinocchio.Data`
                The model data, on which forward kinematics has already been computed.

        Returns
        -------
            float
                The minimum distance to collision, in meters.
        """
        if len(self.collision_model.collisionPairs) == 0:
            return np.inf

        self.update_geometry_placements(data)
        pinocchio.computeDistances(self.collision_model, self.collision_data)
        return np.min([dr.min_distance for dr in self.collision_data.distanceResults])
