"""Navigation of the Pandora particle flow hierarchy.

Pandora reconstructs every event under two hypotheses. Top-level (primary)
particles flagged as the target of the reconstruction (the neutrino, or the
beam particle in test beam mode) have the final-state particles as daughters.
Every other primary particle is a cosmic ray.
"""

from .assn import find_many, find_many_index
from .errors import HierarchyError
from .globals import NEUTRINO_PROPERTY, TEST_BEAM_PROPERTY
from .logger import logger

__all__ = [
    "get_pfparticle_id_map",
    "get_pfparticle_metadata_map",
    "is_target",
    "get_final_state_pfparticles",
    "collect_tracks_and_showers",
]


def get_pfparticle_id_map(pfparticles):
    """Maps each particle ID onto the index of the particle in its collection.

    Parameters
    ----------
    pfparticles : List[PFParticle]
        Particle collection

    Returns
    -------
    Dict[int, int]
        Map from particle ID to particle index, sorted by ID
    """
    id_map = {}
    for i, pfp in enumerate(pfparticles):
        if pfp.id in id_map:
            raise HierarchyError(
                "Unable to get PFParticle ID map, the input PFParticle "
                "collection has repeat IDs!"
            )
        id_map[pfp.id] = i

    return dict(sorted(id_map.items()))


def get_pfparticle_metadata_map(pfparticles, metadata, assn):
    """Maps each particle index onto the list of its associated metadata.

    Particles without any associated metadata are left out of the map.

    Parameters
    ----------
    pfparticles : List[PFParticle]
        Particle collection
    metadata : List[PFParticleMetadata]
        Metadata collection
    assn : np.ndarray
        (N, 2) Particle to metadata association table

    Returns
    -------
    Dict[int, List[PFParticleMetadata]]
        Map from particle index to associated metadata
    """
    metadata_map = {}
    for i, meta_list in enumerate(find_many(assn, len(pfparticles), metadata)):
        if not meta_list:
            continue
        if i in metadata_map:
            raise HierarchyError(
                "Unable to get PFParticle Metadata map, the input "
                "PFParticle appears twice!"
            )
        metadata_map[i] = meta_list

    return metadata_map


def is_target(metadata, test_beam_mode=False):
    """Checks whether a particle is the target of the reconstruction.

    A particle is the target if any of its metadata objects carries the
    `IsTestBeam` (test beam mode) or `IsNeutrino` property, whatever its value.

    Parameters
    ----------
    metadata : List[PFParticleMetadata]
        Metadata associated with the particle
    test_beam_mode : bool, default False
        Whether to look for a test beam particle rather than a neutrino

    Returns
    -------
    bool
        `True` if the particle is the neutrino (or test beam particle)
    """
    prop = TEST_BEAM_PROPERTY if test_beam_mode else NEUTRINO_PROPERTY

    return any(meta.has_property(prop) for meta in metadata)


def get_final_state_pfparticles(pfparticles, id_map, metadata_map,
                                test_beam_mode=False):
    """Splits the primary particles into cosmic rays and final states.

    Primary particles are visited in increasing ID order. Each one which is
    not the target goes to the cosmic list; the daughters of the target go to
    the final-state list.

    Parameters
    ----------
    pfparticles : List[PFParticle]
        Particle collection
    id_map : Dict[int, int]
        Map from particle ID to particle index
    metadata_map : Dict[int, List[PFParticleMetadata]]
        Map from particle index to associated metadata
    test_beam_mode : bool, default False
        If `True`, the target is the test beam particle and more than one of
        them is allowed in an event

    Returns
    -------
    cosmic_index : List[int]
        Indexes of primary particles reconstructed as cosmic rays
    final_state_index : List[int]
        Indexes of the daughters of the target particle(s)
    """
    cosmic_index, final_state_index = [], []
    for pfp_id, idx in id_map.items():
        pfp = pfparticles[idx]
        if not pfp.is_primary:
            continue

        if idx not in metadata_map:
            raise HierarchyError(
                f"Primary PFParticle {pfp_id} has no associated metadata."
            )

        if not is_target(metadata_map[idx], test_beam_mode):
            cosmic_index.append(idx)
            continue

        # Only one reconstructed neutrino is expected per event
        if final_state_index and not test_beam_mode:
            raise HierarchyError(
                "This event contains multiple reconstructed neutrinos!"
            )

        for daughter_id in pfp.daughter_ids:
            if daughter_id not in id_map:
                raise HierarchyError("Invalid PFParticle collection!")
            final_state_index.append(id_map[daughter_id])

    return cosmic_index, final_state_index


def collect_tracks_and_showers(pfparticles, index, track_assn, tracks,
                               shower_assn, showers):
    """Fetches the track or shower built from each of a set of particles.

    Each particle must be associated with at most one object: either a track
    or a shower. Particles associated with neither are skipped.

    Parameters
    ----------
    pfparticles : List[PFParticle]
        Particle collection
    index : List[int]
        Indexes of the particles to collect the objects for
    track_assn : np.ndarray
        (N, 2) Particle to track association table
    tracks : List[Track]
        Track collection
    shower_assn : np.ndarray
        (M, 2) Particle to shower association table
    showers : List[Shower]
        Shower collection

    Returns
    -------
    track_list : List[Tuple[int, Track]]
        (particle index, track) pairs
    shower_list : List[Tuple[int, Shower]]
        (particle index, shower) pairs
    """
    track_index = find_many_index(track_assn, len(pfparticles), len(tracks))
    shower_index = find_many_index(shower_assn, len(pfparticles), len(showers))

    track_list, shower_list = [], []
    for idx in index:
        num_tracks, num_showers = len(track_index[idx]), len(shower_index[idx])
        if num_tracks == 0 and num_showers == 0:
            logger.debug(
                "No tracks or showers were associated to PFParticle %d",
                pfparticles[idx].id,
            )
            continue

        if num_tracks == 1 and num_showers == 0:
            track_list.append((idx, tracks[track_index[idx][0]]))
            continue

        if num_tracks == 0 and num_showers == 1:
            shower_list.append((idx, showers[shower_index[idx][0]]))
            continue

        raise HierarchyError(
            f"There were {num_tracks} tracks and {num_showers} showers "
            f"associated with PFParticle {pfparticles[idx].id}"
        )

    return track_list, shower_list
