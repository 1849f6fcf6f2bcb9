"""Optical simulation helpers: photon wavelengths and PMT detection."""

import numpy as np

from .globals import TWO_PI_HBARC

__all__ = ["photon_wavelength", "sample_detection", "group_by_pmt"]


def photon_wavelength(energy):
    """Converts photon energies to wavelengths.

    Parameters
    ----------
    energy : Union[float, np.ndarray]
        Photon energy (or energies) in MeV

    Returns
    -------
    Union[float, np.ndarray]
        Photon wavelength(s) in nm
    """
    return TWO_PI_HBARC / np.asarray(energy, dtype=np.float64)


def sample_detection(wavelength, rng, quantum_efficiency, cut_low, cut_high):
    """Decides which photons are detected by a PMT.

    One uniform random number is drawn per photon, whether or not the photon
    falls in the sensitive range, so that the random sequence only depends on
    the number of photons. A photon is detected if its random number does not
    exceed the quantum efficiency and its wavelength is strictly inside the
    sensitive range.

    Parameters
    ----------
    wavelength : np.ndarray
        (N) Photon wavelengths in nm
    rng : np.random.Generator
        Random number generator
    quantum_efficiency : float
        Probability that a photon in the sensitive range is detected
    cut_low : float
        Lower bound of the sensitive wavelength range in nm
    cut_high : float
        Upper bound of the sensitive wavelength range in nm

    Returns
    -------
    np.ndarray
        (N) Boolean detection mask
    """
    wavelength = np.asarray(wavelength, dtype=np.float64)
    draw = rng.random(len(wavelength))

    return (
        (draw <= quantum_efficiency)
        & (wavelength > cut_low)
        & (wavelength < cut_high)
    )


def group_by_pmt(photons):
    """Groups a list of photons by the PMT they reached.

    Parameters
    ----------
    photons : List[OpticalPhoton]
        Photons in the event

    Returns
    -------
    Dict[int, List[OpticalPhoton]]
        Photons reaching each PMT, with PMTs in increasing ID order
    """
    hits = {}
    for photon in photons:
        hits.setdefault(int(photon.pmt_id), []).append(photon)

    return dict(sorted(hits.items()))
