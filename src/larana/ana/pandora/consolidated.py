"""Analysis script which consolidates the Pandora particle flow output.

Pandora reconstructs each event under both the cosmic-ray and the neutrino
(or test beam) hypothesis. This script splits the top-level particles into
cosmic rays and target final states, then fetches the track or shower built
from each final-state particle.
"""

from larana.ana.base import AnaBase
from larana.data import ObjectList, PFParticle, Shower, Track
from larana.utils.assn import assn_key, product_key
from larana.utils.errors import MissingProductError
from larana.utils.globals import INVAL
from larana.utils.logger import logger
from larana.utils.pandora import (
    collect_tracks_and_showers,
    get_final_state_pfparticles,
    get_pfparticle_id_map,
    get_pfparticle_metadata_map,
)

__all__ = ["ConsolidatedPFParticleAna"]


class ConsolidatedPFParticleAna(AnaBase):
    """Summarizes the consolidated Pandora output of each event.

    Produces up to three tables:
    - `scores`: one row per metadata property of each particle
    - `summary`: one row per event with the particle, track and shower counts
    - `final_state`: one row per final-state particle

    Typical configuration should look like:

    .. code-block:: yaml

        ana:
          pfparticle_summary:
            pandora_label: pandora
            track_label: pandoraTrack
            shower_label: pandoraShower
    """

    # Name of the analysis script (as specified in the configuration)
    name = "pfparticle_summary"

    # Alternative allowed names of the analysis script
    aliases = ("consolidated_pfparticle",)

    def __init__(self, pandora_label, track_label, shower_label,
                 print_out_scores=True, test_beam_mode=False, **kwargs):
        """Initialize the analysis script.

        Parameters
        ----------
        pandora_label : str
            Label of the Pandora producer (particles and metadata)
        track_label : str
            Label of the producer which builds tracks from particles
        shower_label : str
            Label of the producer which builds showers from particles
        print_out_scores : bool, default True
            If `True`, log and store the metadata scores of each particle
        test_beam_mode : bool, default False
            If `True`, look for test beam particles rather than a neutrino
        **kwargs : dict, optional
            Additional arguments to pass to :class:`AnaBase`
        """
        super().__init__(**kwargs)

        self.print_out_scores = print_out_scores
        self.test_beam_mode = test_beam_mode
        self.target = "test beam" if test_beam_mode else "neutrino"

        # Names of the data products to fetch
        self.pfp_key = product_key(pandora_label, "pfparticles")
        self.meta_key = product_key(pandora_label, "metadata")
        self.meta_assn_key = assn_key(pandora_label, "pfparticles", "metadata")
        self.track_key = product_key(track_label, "tracks")
        self.track_assn_key = assn_key(track_label, "pfparticles", "tracks")
        self.shower_key = product_key(shower_label, "showers")
        self.shower_assn_key = assn_key(shower_label, "pfparticles", "showers")

        # The particle collection may be absent from some events
        self.update_keys({
            self.pfp_key: False, self.meta_key: False,
            self.meta_assn_key: False, self.track_key: False,
            self.track_assn_key: False, self.shower_key: False,
            self.shower_assn_key: False
        })

        if self.print_out_scores:
            self.initialize_writer("scores")
        self.initialize_writer("summary")
        self.initialize_writer("final_state")

    def process(self, data):
        """Consolidate the particle flow output of one entry.

        Parameters
        ----------
        data : dict
            Dictionary of data products

        Returns
        -------
        dict
            Cosmic particles, final-state particles and their tracks/showers
        """
        result = {
            "cosmic_pfparticles": ObjectList([], PFParticle()),
            "final_state_pfparticles": ObjectList([], PFParticle()),
            "final_state_tracks": ObjectList([], Track()),
            "final_state_showers": ObjectList([], Shower()),
        }

        if self.pfp_key not in data:
            logger.debug("Failed to find the PFParticles.")
            return result

        pfparticles = data[self.pfp_key]
        id_map = get_pfparticle_id_map(pfparticles)
        metadata_map = get_pfparticle_metadata_map(
            pfparticles, self.fetch(data, self.meta_key),
            self.fetch(data, self.meta_assn_key)
        )

        if self.print_out_scores:
            self.store_scores(pfparticles, metadata_map)

        cosmic_index, final_index = get_final_state_pfparticles(
            pfparticles, id_map, metadata_map, self.test_beam_mode
        )

        track_list, shower_list = collect_tracks_and_showers(
            pfparticles, final_index,
            self.fetch(data, self.track_assn_key),
            self.fetch(data, self.track_key),
            self.fetch(data, self.shower_assn_key),
            self.fetch(data, self.shower_key),
        )

        # Log and store the event summary
        logger.info(
            "Consolidated event summary:\n"
            "  - Number of primary cosmic-ray PFParticles   : %d\n"
            "  - Number of %s final-state PFParticles : %d\n"
            "    ... of which are track-like   : %d\n"
            "    ... of which are showers-like : %d",
            len(cosmic_index), self.target, len(final_index),
            len(track_list), len(shower_list)
        )

        self.append(
            "summary", num_cosmic=len(cosmic_index),
            num_final_state=len(final_index), num_tracks=len(track_list),
            num_showers=len(shower_list), target=self.target
        )

        tracks, showers = dict(track_list), dict(shower_list)
        for idx in final_index:
            pfp = pfparticles[idx]
            track, shower = tracks.get(idx, None), showers.get(idx, None)
            self.append(
                "final_state", pfp_id=pfp.id, pdg_code=pfp.pdg_code,
                is_track=track is not None, is_shower=shower is not None,
                track_length=track.length if track is not None else INVAL,
                shower_energy=shower.energy if shower is not None else INVAL
            )

        result["cosmic_pfparticles"].extend(pfparticles[i] for i in cosmic_index)
        result["final_state_pfparticles"].extend(
            pfparticles[i] for i in final_index
        )
        result["final_state_tracks"].extend(t for _, t in track_list)
        result["final_state_showers"].extend(s for _, s in shower_list)

        return result

    def store_scores(self, pfparticles, metadata_map):
        """Log and store the metadata properties of each particle.

        Parameters
        ----------
        pfparticles : List[PFParticle]
            Particle collection
        metadata_map : Dict[int, List[PFParticleMetadata]]
            Map from particle index to associated metadata
        """
        for idx, metadata in metadata_map.items():
            pfp_id = pfparticles[idx].id
            for meta in metadata:
                properties = meta.properties
                if not properties:
                    continue

                logger.info("Found PFParticle %d with:", pfp_id)
                for prop, value in properties.items():
                    logger.info("  - %s = %g", prop, value)
                    self.append("scores", pfp_id=pfp_id, property=prop,
                                value=value)

    def fetch(self, data, key):
        """Fetches a data product tied to the particle collection.

        Parameters
        ----------
        data : dict
            Dictionary of data products
        key : str
            Name of the data product

        Returns
        -------
        object
            Data product
        """
        if key not in data:
            raise MissingProductError(
                f"The `{key}` data product is needed to navigate "
                f"`{self.pfp_key}` but it is not in the event."
            )

        return data[key]
