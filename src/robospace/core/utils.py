""" Core utilities for joint space math. """

import numpy as np


def wrap_angle(value):
    """
    Wraps an angle, or an array of angles, into the range [-pi, pi).

    Parameters
    ----------
        value : float or array-like
            The angle(s), in radians.

    Returns
    -------
        float or array-like
            The wrapped angle(s), in radians.
    """
    return np.mod(np.asarray(value, dtype=np.float64) + np.pi, 2.0 * np.pi) - np.pi


def angular_difference(q_start, q_end):
    """
    Returns the signed shortest-arc difference from one angle to another.

    Parameters
    ----------
        q_start : float or array-like
            The start angle(s), in radians.
        q_end : float or array-like
            The end angle(s), in radians.

    Returns
    -------
        float or array-like
            The difference, in radians, in the range [-pi, pi).
    """
    return wrap_angle(np.asarray(q_end, dtype=np.float64) - q_start)


def joint_space_difference(q_start, q_end, is_continuous=None):
    """
    Returns the per-joint difference between two joint configurations.

    Continuous (wrap-around) joints take the shortest arc, while all other joints take the linear difference.

    Parameters
    ----------
        q_start : array-like
            The start joint configuration.
        q_end : array-like
            The end joint configuration.
        is_continuous : array-like, optional
            Boolean flags marking which joints are continuous.
            If not specified, all joints are treated as bounded.

    Returns
    -------
        array-like
            The difference vector from `q_start` to `q_end`.
    """
    q_diff = np.asarray(q_end, dtype=np.float64) - np.asarray(q_start, dtype=np.float64)
    if is_continuous is not None and np.any(is_continuous):
        q_diff = np.where(is_continuous, wrap_angle(q_diff), q_diff)
    return q_diff


def configuration_distance(q_start, q_end, is_continuous=None):
    """
    Returns the distance between two joint configurations.

    Parameters
    ----------
        q_start : array-like
            The start joint configuration.
        q_end : array-like
            The end joint configuration.
        is_continuous : array-like, optional
            Boolean flags marking which joints are continuous.

    Returns
    -------
        float
            The distance between the two joint configurations.
    """
    return np.linalg.norm(joint_space_difference(q_start, q_end, is_continuous))


def get_path_length(q_path, is_continuous=None):
    """
    Returns the configuration distance of a path.

    Parameters
    ----------
        q_path : list[array-like]
            A list of joint configurations describing a path.
        is_continuous : array-like, optional
            Boolean flags marking which joints are continuous.

    Returns
    -------
        float
            The total configuration distance of the entire path.
    """
    total_distance = 0.0
    for idx in range(1, len(q_path)):
        total_distance += configuration_distance(
            q_path[idx - 1], q_path[idx], is_continuous
        )
    return total_distance


def discretize_joint_space_path(q_path, max_angle_distance, is_continuous=None):
    """
    Discretizes a joint space path given a maximum angle distance between samples.

    This is used primarily for producing paths for collision checking.

    Parameters
    ----------
        q_path : list[array-like]
            A list of the joint configurations describing a path.
        max_angle_distance : float
            The maximum angular displacement, in radians, between samples.
        is_continuous : array-like, optional
            Boolean flags marking which joints are continuous.
            Continuous joints follow the shortest arc and are wrapped into [-pi, pi).

    Returns
    -------
        list[array-like]
            A list of joint configuration arrays between the start and end points, inclusive.
    """
    if max_angle_distance <= 0.0:
        raise ValueError("Maximum angle distance must be positive.")

    q_discretized = []
    for idx in range(1, len(q_path)):
        q_start = np.asarray(q_path[idx - 1], dtype=np.float64)
        q_end = np.asarray(q_path[idx], dtype=np.float64)
        q_diff = joint_space_difference(q_start, q_end, is_continuous)
        num_steps = int(np.ceil(np.linalg.norm(q_diff) / max_angle_distance)) + 1
        step_vec = np.linspace(0.0, 1.0, num_steps)

        # Skip the segment start after the first segment, since it duplicates the previous end.
        if idx > 1:
            step_vec = step_vec[1:]
        for step in step_vec:
            if step == 0.0:
                q_discretized.append(q_start.copy())
                continue
            if step == 1.0:
                q_discretized.append(q_end.copy())
                continue
            q = q_start + step * q_diff
            if is_continuous is not None:
                q = np.where(is_continuous, wrap_angle(q), q)
            q_discretized.append(q)
    return q_discretized
