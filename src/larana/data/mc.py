"""Module with data classes which represent Monte Carlo truth information.

:class:`MCParticle` mirrors the Geant4 particle list (one object per tracked
particle, with its full trajectory) and :class:`Neutrino` the generator-level
neutrino interaction (e.g. from GENIE).
"""

from dataclasses import dataclass

import numpy as np

from larana.utils.globals import PRIMARY_MOTHER_ID

from .base import PosDataBase

__all__ = ["MCParticle", "Neutrino"]


@dataclass(eq=False)
class MCParticle(PosDataBase):
    """Geant4 particle truth information.

    Attributes
    ----------
    track_id : int
        Geant4 track ID
    pdg_code : int
        Particle PDG code
    mother_id : int
        Geant4 track ID of the mother particle (0 for primaries)
    process : str
        Creation process
    mass : float
        Particle mass in GeV/c^2
    positions : np.ndarray
        (N, 4) Trajectory points as (x, y, z, t)
    momenta : np.ndarray
        (N, 4) Four-momentum at each trajectory point as (px, py, pz, E) in GeV
    units : str
        Units in which the position coordinates are expressed
    """

    track_id: int = -1
    pdg_code: int = 0
    mother_id: int = PRIMARY_MOTHER_ID
    process: str = "primary"
    mass: float = -1.0
    positions: np.ndarray = None
    momenta: np.ndarray = None
    units: str = "cm"

    # Variable-length attributes
    _var_length_attrs = (
        ("positions", (4, np.float64)),
        ("momenta", (4, np.float64)),
    )

    # String attributes
    _str_attrs = ("process", "units")

    def __post_init__(self):
        """Check that the trajectory arrays are consistent."""
        super().__post_init__()
        assert len(self.positions) == len(self.momenta), (
            "The number of trajectory positions and momenta must match."
        )

    @property
    def is_primary(self):
        """Whether the particle was produced by the generator.

        Returns
        -------
        bool
            `True` if the particle has no mother
        """
        return self.mother_id == PRIMARY_MOTHER_ID

    @property
    def num_points(self):
        """Number of trajectory points.

        Returns
        -------
        int
            Number of points
        """
        return len(self.positions)

    @property
    def start_position(self):
        """(3) Initial position of the particle."""
        return self.positions[0, :3]

    @property
    def start_momentum(self):
        """(3) Initial momentum of the particle."""
        return self.momenta[0, :3]

    @property
    def end_position(self):
        """(3) Final position of the particle."""
        return self.positions[-1, :3]

    @property
    def end_momentum(self):
        """(3) Final momentum of the particle."""
        return self.momenta[-1, :3]

    @property
    def energy_init(self):
        """Initial energy of the particle in GeV."""
        return self.momenta[0, 3]


@dataclass(eq=False)
class Neutrino(PosDataBase):
    """Generator-level neutrino information.

    Attributes
    ----------
    id : int
        Index of the neutrino in the list
    pdg_code : int
        PDG code of the neutrino
    current_type : int
        Current type of the interaction (0: CC, 1: NC)
    interaction_mode : int
        Interaction mode (0: QE, 1: RES, 2: DIS, 3: COH)
    energy_init : float
        Energy of the neutrino in GeV
    position : np.ndarray
        (3) Location of the neutrino interaction
    momentum : np.ndarray
        (3) Momentum of the neutrino in GeV/c
    units : str
        Units in which the position coordinates are expressed
    """

    id: int = -1
    pdg_code: int = -1
    current_type: int = -1
    interaction_mode: int = -1
    energy_init: float = -1.0
    position: np.ndarray = None
    momentum: np.ndarray = None
    units: str = "cm"

    # Fixed-length attributes
    _fixed_length_attrs = (("position", 3), ("momentum", 3))

    # Attributes specifying coordinates
    _pos_attrs = ("position",)

    # Attributes specifying vector components
    _vec_attrs = ("momentum",)
