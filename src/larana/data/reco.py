"""Module with data classes which represent reconstructed tracks and showers.

Tracks and showers are built by dedicated producers from the Pandora
particles and tied back to them through association tables.
"""

from dataclasses import dataclass

import numpy as np

from .base import PosDataBase

__all__ = ["Track", "Shower"]


@dataclass(eq=False)
class Track(PosDataBase):
    """Reconstructed track.

    Attributes
    ----------
    id : int
        Index of the track in its collection
    start_point : np.ndarray
        (3) Start point of the track
    end_point : np.ndarray
        (3) End point of the track
    start_dir : np.ndarray
        (3) Unit direction vector at the start of the track
    length : float
        Length of the track trajectory
    num_points : int
        Number of trajectory points
    units : str
        Units in which the position coordinates are expressed
    """

    id: int = -1
    start_point: np.ndarray = None
    end_point: np.ndarray = None
    start_dir: np.ndarray = None
    length: float = -1.0
    num_points: int = 0
    units: str = "cm"

    # Fixed-length attributes
    _fixed_length_attrs = (("start_point", 3), ("end_point", 3), ("start_dir", 3))

    # Attributes specifying coordinates
    _pos_attrs = ("start_point", "end_point")

    # Attributes specifying vector components
    _vec_attrs = ("start_dir",)


@dataclass(eq=False)
class Shower(PosDataBase):
    """Reconstructed electromagnetic shower.

    Attributes
    ----------
    id : int
        Index of the shower in its collection
    start_point : np.ndarray
        (3) Start point of the shower
    direction : np.ndarray
        (3) Unit direction vector of the shower
    energy : float
        Reconstructed energy in MeV (on the best plane)
    length : float
        Length of the shower cone
    open_angle : float
        Opening angle of the shower cone in radians
    best_plane : int
        Index of the wire plane used to estimate the energy
    units : str
        Units in which the position coordinates are expressed
    """

    id: int = -1
    start_point: np.ndarray = None
    direction: np.ndarray = None
    energy: float = -1.0
    length: float = -1.0
    open_angle: float = -1.0
    best_plane: int = -1
    units: str = "cm"

    # Fixed-length attributes
    _fixed_length_attrs = (("start_point", 3), ("direction", 3))

    # Attributes specifying coordinates
    _pos_attrs = ("start_point",)

    # Attributes specifying vector components
    _vec_attrs = ("direction",)
