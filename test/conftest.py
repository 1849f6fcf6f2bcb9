"""Sets up fixtures general to the entire test suite of this package.

This file is read during the collection phase of pytest when running anything
inside this directory. It provides small synthetic events which cover the
Pandora hierarchy, optical photons and Geant4 truth products.
"""

import csv
import os

import numpy as np
import pytest

from larana.data import (
    MCParticle,
    Neutrino,
    ObjectList,
    OpticalPhoton,
    PFParticle,
    PFParticleMetadata,
    RunInfo,
    Shower,
    Track,
)
from larana.io.write import HDF5Writer
from larana.utils.globals import TWO_PI_HBARC


def read_csv(path):
    """Reads the rows of an output CSV table.

    Parameters
    ----------
    path : str
        Path to the CSV file

    Returns
    -------
    List[dict]
        One dictionary of (column, string value) pairs per row
    """
    with open(path, "r", encoding="utf-8") as in_file:
        return list(csv.DictReader(in_file))


def make_pfparticle_event():
    """Builds the Pandora products of a typical neutrino event.

    The hierarchy contains one neutrino (ID 0) with three daughters (IDs 1,
    2 and 3) and one cosmic ray (ID 4). Daughter 1 is a track, daughter 2 is a
    shower and daughter 3 has neither. The cosmic ray has a track.

    Returns
    -------
    dict
        Dictionary of data products
    """
    pfparticles = ObjectList([
        PFParticle(id=0, pdg_code=14, daughter_ids=np.array([1, 2, 3])),
        PFParticle(id=1, pdg_code=13, parent_id=0),
        PFParticle(id=2, pdg_code=11, parent_id=0),
        PFParticle(id=3, pdg_code=13, parent_id=0),
        PFParticle(id=4, pdg_code=13),
    ], PFParticle())

    metadata = ObjectList([
        PFParticleMetadata.from_properties(
            {"IsNeutrino": 1.0, "NuScore": 0.9}, id=0),
        PFParticleMetadata.from_properties({"TrackScore": 0.8}, id=1),
        PFParticleMetadata.from_properties({"TrackScore": 0.1}, id=2),
        PFParticleMetadata.from_properties({}, id=3),
        PFParticleMetadata.from_properties({"IsClearCosmic": 1.0}, id=4),
    ], PFParticleMetadata())

    tracks = ObjectList([
        Track(id=0, start_point=np.array([1., 2., 3.], dtype=np.float32),
              end_point=np.array([11., 2., 3.], dtype=np.float32),
              start_dir=np.array([1., 0., 0.], dtype=np.float32),
              length=10., num_points=20),
        Track(id=1, start_point=np.array([0., 50., 0.], dtype=np.float32),
              end_point=np.array([0., -50., 0.], dtype=np.float32),
              start_dir=np.array([0., -1., 0.], dtype=np.float32),
              length=100., num_points=200),
    ], Track())

    showers = ObjectList([
        Shower(id=0, start_point=np.array([1., 2., 3.], dtype=np.float32),
               direction=np.array([0., 0., 1.], dtype=np.float32),
               energy=150., length=30., open_angle=0.2, best_plane=2),
    ], Shower())

    return {
        "pandora_pfparticles": pfparticles,
        "pandora_metadata": metadata,
        "pandora_pfparticles_metadata_assn": np.array(
            [[0, 0], [1, 1], [2, 2], [3, 3], [4, 4]], dtype=np.int64),
        "pandoraTrack_tracks": tracks,
        "pandoraTrack_pfparticles_tracks_assn": np.array(
            [[1, 0], [4, 1]], dtype=np.int64),
        "pandoraShower_showers": showers,
        "pandoraShower_pfparticles_showers_assn": np.array(
            [[2, 0]], dtype=np.int64),
    }


def make_empty_pfparticle_event():
    """Builds the Pandora products of an event without any particle.

    Returns
    -------
    dict
        Dictionary of data products
    """
    empty_assn = np.empty((0, 2), dtype=np.int64)
    return {
        "pandora_pfparticles": ObjectList([], PFParticle()),
        "pandora_metadata": ObjectList([], PFParticleMetadata()),
        "pandora_pfparticles_metadata_assn": empty_assn,
        "pandoraTrack_tracks": ObjectList([], Track()),
        "pandoraTrack_pfparticles_tracks_assn": empty_assn,
        "pandoraShower_showers": ObjectList([], Shower()),
        "pandoraShower_pfparticles_showers_assn": empty_assn,
    }


def make_photon(pmt_id, wavelength, time=0.):
    """Builds a photon of a given wavelength.

    Parameters
    ----------
    pmt_id : int
        PMT the photon reaches
    wavelength : float
        Photon wavelength in nm
    time : float, default 0.
        Arrival time in ns

    Returns
    -------
    OpticalPhoton
        Photon object
    """
    return OpticalPhoton(
        pmt_id=pmt_id, position=np.zeros(3, dtype=np.float32), time=time,
        energy=TWO_PI_HBARC / wavelength
    )


def make_photon_event():
    """Builds a list of photons reaching two PMTs.

    PMT 3 sees three photons in the sensitive range (100-200 nm) and PMT 1
    sees one photon in range and one out of range.

    Returns
    -------
    dict
        Dictionary of data products
    """
    photons = ObjectList([
        make_photon(3, 128., 10.),
        make_photon(1, 128., 11.),
        make_photon(3, 150., 12.),
        make_photon(1, 400., 13.),
        make_photon(3, 180., 14.),
    ], OpticalPhoton())

    return {"largeant_photons": photons}


def make_truth_event():
    """Builds the Geant4 and generator truth of a muon neutrino interaction.

    The primary muon travels along z through the TPC (z in [0, 90] cm) into
    MINOS (z >= 140 cm). A secondary electron and a primary proton which
    never leaves its starting point are also present.

    Returns
    -------
    dict
        Dictionary of data products
    """
    z = np.array([10., 50., 85., 100., 145., 200.])
    positions = np.column_stack([np.zeros(6), np.zeros(6), z, z / 30.])
    energy = np.array([2.0, 1.9, 1.8, 1.7, 1.6, 1.5])
    momenta = np.column_stack([np.zeros(6), np.full(6, 0.1), energy - 0.11,
                               energy])
    muon = MCParticle(track_id=1, pdg_code=13, mass=0.10566,
                      positions=positions, momenta=momenta)

    electron = MCParticle(
        track_id=2, pdg_code=11, mother_id=1, process="muIoni", mass=0.000511,
        positions=np.array([[0., 0., 50., 1.]]),
        momenta=np.array([[0., 0., 0.01, 0.0101]])
    )

    proton = MCParticle(
        track_id=3, pdg_code=2212, mass=0.938,
        positions=np.array([[0., 0., 10., 0.]]),
        momenta=np.array([[0., 0.2, 0.1, 0.97]])
    )

    neutrino = Neutrino(
        id=0, pdg_code=14, current_type=0, interaction_mode=0,
        energy_init=2.5, position=np.array([0., 0., 10.], dtype=np.float32),
        momentum=np.array([0., 0., 2.5], dtype=np.float32)
    )

    return {
        "largeant_particles": ObjectList([muon, electron, proton], MCParticle()),
        "generator_neutrinos": ObjectList([neutrino], Neutrino()),
    }


def make_event(index, empty=False):
    """Builds a complete synthetic event.

    Parameters
    ----------
    index : int
        Entry index
    empty : bool, default False
        If `True`, the Pandora collections are empty

    Returns
    -------
    dict
        Dictionary of data products
    """
    data = {"index": index,
            "run_info": RunInfo(run=1, subrun=0, event=10 + index)}
    if not empty:
        data.update(make_pfparticle_event())
    else:
        data.update(make_empty_pfparticle_event())
    data.update(make_photon_event())
    data.update(make_truth_event())

    return data


@pytest.fixture(name="event")
def fixture_event():
    """Single synthetic event, as returned by a reader."""
    data = make_event(0)
    data["file_index"] = 0
    data["file_entry_index"] = 0

    return data


@pytest.fixture(name="event_file")
def fixture_event_file(tmp_path):
    """Writes a small HDF5 event file with three entries.

    The second entry has empty Pandora collections.

    Parameters
    ----------
    tmp_path : str
       Generic pytest fixture used to handle temporary test files

    Returns
    -------
    str
        Path to the event file
    """
    file_path = os.path.join(tmp_path, "events.h5")
    writer = HDF5Writer(file_path)
    for i in range(3):
        writer(make_event(i, empty=i == 1), cfg={"base": {"seed": 0}})

    return file_path
