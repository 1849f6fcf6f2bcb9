"""Module with a data class object which represents a simulated photon.

Each object corresponds to one photon which reached the face of a
photomultiplier tube (PMT). The collection of all photons in an event, grouped
by PMT, forms the PMT hit collection.
"""

from dataclasses import dataclass

import numpy as np

from larana.utils.globals import TWO_PI_HBARC

from .base import PosDataBase

__all__ = ["OpticalPhoton"]


@dataclass(eq=False)
class OpticalPhoton(PosDataBase):
    """Photon detected on the face of a PMT.

    Attributes
    ----------
    pmt_id : int
        Index of the PMT the photon reached
    position : np.ndarray
        (3) Position where the photon hit the PMT face
    time : float
        Arrival time of the photon in ns
    energy : float
        Energy of the photon in MeV
    units : str
        Units in which the position coordinates are expressed
    """

    pmt_id: int = -1
    position: np.ndarray = None
    time: float = -1.0
    energy: float = -1.0
    units: str = "cm"

    # Fixed-length attributes
    _fixed_length_attrs = (("position", 3),)

    # Attributes specifying coordinates
    _pos_attrs = ("position",)

    @property
    def wavelength(self):
        """Wavelength of the photon in nm.

        Returns
        -------
        float
            Photon wavelength
        """
        return TWO_PI_HBARC / self.energy
