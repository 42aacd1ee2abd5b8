""" Utilities to build an example planar manipulator. """

import coal
import numpy as np
import pinocchio


def load_models(num_links=2, link_length=0.5, tip_radius=0.05, continuous_base=False):
    """
    Builds the models of a planar manipulator whose joints all rotate about the z-axis.

    Each link carries a sphere collision geometry at its tip.
    Bounded joints have limits of [-pi, pi].

    Parameters
    ----------
        num_links : int, optional
            The number of links, and therefore joints, of the arm.
        link_length : float, optional
            The length of each link, in meters.
        tip_radius : float, optional
            The radius of the sphere at the tip of each link, in meters.
        continuous_base : bool, optional
            If True, the first joint is continuous instead of bounded.

    Returns
    -------
        tuple[`pinocchio.Model`]
            A 3-tuple containing the model, collision geometry model, and visual geometry model.
    """
    if num_links < 1:
        raise ValueError("The arm must have at least one link.")

    model = pinocchio.Model()
    model.name = "planar_arm"
    collision_model = pinocchio.GeometryModel()
    visual_model = pinocchio.GeometryModel()

    tip_placement = pinocchio.SE3(np.eye(3), np.array([link_length, 0.0, 0.0]))
    joint_placement = pinocchio.SE3.Identity()
    parent_id = 0
    for idx in range(num_links):
        if idx == 0 and continuous_base:
            joint_model = pinocchio.JointModelRUBZ()
        else:
            joint_model = pinocchio.JointModelRZ()
        joint_id = model.addJoint(parent_id, joint_model, joint_placement, f"joint{idx + 1}")
        model.appendBodyToJoint(
            joint_id,
            pinocchio.Inertia.FromSphere(1.0, tip_radius),
            tip_placement,
        )
        model.addBodyFrame(f"link{idx + 1}", joint_id, pinocchio.SE3.Identity(), -1)

        tip = pinocchio.GeometryObject(
            f"link{idx + 1}_tip", joint_id, tip_placement, coal.Sphere(tip_radius)
        )
        tip.meshColor = np.array([0.2, 0.2, 0.8, 1.0])
        collision_model.addGeometryObject(tip)
        visual_model.addGeometryObject(tip)

        parent_id = joint_id
        joint_placement = tip_placement

    model.addBodyFrame("tool", parent_id, tip_placement, -1)

    # Bounded joints are limited to a single turn.
    lower = np.array(model.lowerPositionLimit)
    upper = np.array(model.upperPositionLimit)
    for joint_id in range(1, model.njoints):
        joint = model.joints[joint_id]
        if joint.nq == 1:
            lower[joint.idx_q] = -np.pi
            upper[joint.idx_q] = np.pi
    model.lowerPositionLimit = lower
    model.upperPositionLimit = upper

    return model, collision_model, visual_model


def add_object_collisions(
    collision_model, visual_model, position, radius=0.1, name="obstacle"
):
    """
    Adds a sphere obstacle and its collisions with all arm links to the planar manipulator collision model.

    Parameters
    ----------
        collision_model : `pinocchio.GeometryModel`
            The collision geometry model.
        visual_model : `pinocchio.GeometryModel`
            The visual geometry model.
        position : array-like
            The position of the obstacle center, in meters.
        radius : float, optional
            The radius of the obstacle, in meters.
        name : str, optional
            The name of the obstacle geometry.
    """
    obstacle = pinocchio.GeometryObject(
        name,
        0,
        pinocchio.SE3(np.eye(3), np.array(position, dtype=np.float64)),
        coal.Sphere(radius),
    )
    obstacle.meshColor = np.array([1.0, 0.0, 0.0, 0.5])
    visual_model.addGeometryObject(obstacle)
    obstacle_id = collision_model.addGeometryObject(obstacle)

    # Define the active collision pairs between the arm links and the obstacle.
    for link_id, cobj in enumerate(collision_model.geometryObjects):
        if cobj.name.startswith("link"):
            collision_model.addCollisionPair(
                pinocchio.CollisionPair(link_id, obstacle_id)
            )
