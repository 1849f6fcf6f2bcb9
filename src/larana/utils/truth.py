"""Helpers to extract quantities from Geant4 particle trajectories."""

import numpy as np

__all__ = ["inside_box", "last_point_inside", "first_point_beyond",
           "angle_between"]


def inside_box(points, bounds):
    """Checks which points lie inside an axis-aligned box.

    Parameters
    ----------
    points : np.ndarray
        (N, 3) Point coordinates
    bounds : np.ndarray
        (3, 2) Lower and upper bounds along each axis

    Returns
    -------
    np.ndarray
        (N) Boolean mask, `True` where the point is in the box (inclusive)
    """
    points = np.asarray(points).reshape(-1, 3)
    bounds = np.asarray(bounds, dtype=np.float64)

    return np.all((points >= bounds[:, 0]) & (points <= bounds[:, 1]), axis=1)


def last_point_inside(positions, bounds):
    """Index of the last trajectory point inside a box.

    Parameters
    ----------
    positions : np.ndarray
        (N, 3+) Trajectory points
    bounds : np.ndarray
        (3, 2) Lower and upper bounds along each axis

    Returns
    -------
    int
        Index of the last point in the box, -1 if none is
    """
    index = np.where(inside_box(positions[:, :3], bounds))[0]

    return int(index[-1]) if len(index) else -1


def first_point_beyond(positions, z):
    """Index of the first trajectory point at or beyond a plane of constant z.

    Parameters
    ----------
    positions : np.ndarray
        (N, 3+) Trajectory points
    z : float
        Position of the plane along the z axis

    Returns
    -------
    int
        Index of the first point with z >= `z`, -1 if none is
    """
    index = np.where(positions[:, 2] >= z)[0]

    return int(index[0]) if len(index) else -1


def angle_between(v1, v2):
    """Angle between two vectors.

    Parameters
    ----------
    v1 : np.ndarray
        (3) First vector
    v2 : np.ndarray
        (3) Second vector

    Returns
    -------
    float
        Angle in radians, -inf if either vector is null
    """
    norm = np.linalg.norm(v1) * np.linalg.norm(v2)
    if norm == 0.0:
        return -np.inf

    return float(np.arccos(np.clip(np.dot(v1, v2) / norm, -1.0, 1.0)))
