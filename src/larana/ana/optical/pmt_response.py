"""Analysis script which counts the photons detected by each PMT."""

import numpy as np

from larana.ana.base import AnaBase
from larana.utils.assn import product_key
from larana.utils.logger import logger
from larana.utils.optical import group_by_pmt, photon_wavelength, sample_detection

__all__ = ["PMTResponseAna"]


class PMTResponseAna(AnaBase):
    """Determines how many photons are detected at each PMT.

    Every photon which reaches a PMT face is converted to a wavelength. It is
    detected if it lies in the sensitive wavelength range of the PMT and
    passes a random sampling of the quantum efficiency.

    Produces up to four tables:
    - `all_photons`: one row per photon reaching a PMT face
    - `detected_photons`: one row per detected photon
    - `pmts`: one row per PMT hit in the event
    - `pmt_events`: one row per event

    Typical configuration should look like:

    .. code-block:: yaml

        ana:
          pmt_response:
            input_label: largeant
            quantum_efficiency: 0.2
            wavelength_cut_low: 100
            wavelength_cut_high: 200
    """

    # Name of the analysis script (as specified in the configuration)
    name = "pmt_response"

    def __init__(self, input_label, quantum_efficiency=1.0,
                 wavelength_cut_low=0.0, wavelength_cut_high=np.inf,
                 verbosity=0, make_all_photons_tree=True,
                 make_detected_photons_tree=True, make_pmt_hits_tree=True,
                 make_events_tree=True, seed=None, **kwargs):
        """Initialize the analysis script.

        Parameters
        ----------
        input_label : str
            Label of the producer of the photon collection
        quantum_efficiency : float, default 1.0
            Probability that a photon in the sensitive range is detected
        wavelength_cut_low : float, default 0.0
            Lower bound of the sensitive wavelength range in nm
        wavelength_cut_high : float, default np.inf
            Upper bound of the sensitive wavelength range in nm
        verbosity : int, default 0
            Level of detail of the logged output (0 to 4)
        make_all_photons_tree : bool, default True
            Whether to store the `all_photons` table
        make_detected_photons_tree : bool, default True
            Whether to store the `detected_photons` table
        make_pmt_hits_tree : bool, default True
            Whether to store the `pmts` table
        make_events_tree : bool, default True
            Whether to store the `pmt_events` table
        seed : int, optional
            Seed of the quantum efficiency sampling. If not specified, the
            sampling is not reproducible
        **kwargs : dict, optional
            Additional arguments to pass to :class:`AnaBase`
        """
        super().__init__(**kwargs)

        assert 0.0 <= quantum_efficiency <= 1.0, (
            "The quantum efficiency must be between 0 and 1, "
            f"got {quantum_efficiency}."
        )
        assert wavelength_cut_low <= wavelength_cut_high, (
            "The lower wavelength cut must not exceed the upper cut."
        )

        self.verbosity = verbosity
        self.quantum_efficiency = quantum_efficiency
        self.cut_low = wavelength_cut_low
        self.cut_high = wavelength_cut_high
        self.rng = np.random.default_rng(seed)

        self.photon_key = product_key(input_label, "photons")
        self.update_keys({self.photon_key: True})

        # Only initialize the requested tables
        self.trees = {
            "all_photons": make_all_photons_tree,
            "detected_photons": make_detected_photons_tree,
            "pmts": make_pmt_hits_tree,
            "pmt_events": make_events_tree,
        }
        for tree, make in self.trees.items():
            if make:
                self.initialize_writer(tree)

    def process(self, data):
        """Count the photons reaching and detected by each PMT in one entry.

        Parameters
        ----------
        data : dict
            Dictionary of data products

        Returns
        -------
        dict
            Number of photons reaching and detected by all the PMTs
        """
        event_id = self.get_event_id(data)
        hits = group_by_pmt(data[self.photon_key])

        if self.verbosity > 0:
            logger.info("Found PMT hit collection of size %d", len(hits))

        count_all, count_detected = 0, 0
        for pmt_id, photons in hits.items():
            wavelength = photon_wavelength([p.energy for p in photons])
            detected = sample_detection(
                wavelength, self.rng, self.quantum_efficiency,
                self.cut_low, self.cut_high
            )

            for photon, wl, det in zip(photons, wavelength, detected):
                row = {"event_id": event_id, "wavelength": wl,
                       "pmt_id": pmt_id, "time": photon.time}
                if self.trees["all_photons"]:
                    self.append("all_photons", **row)
                if det and self.trees["detected_photons"]:
                    self.append("detected_photons", **row)
                if self.verbosity > 3:
                    logger.info(
                        "PMTResponse PerPhoton : Event %d PMTID %d "
                        "Wavelength %g Detected %d",
                        event_id, pmt_id, wl, int(det)
                    )

            pmt_all, pmt_detected = len(photons), int(np.sum(detected))
            if self.trees["pmts"]:
                self.append("pmts", event_id=event_id, pmt_id=pmt_id,
                            count_all=pmt_all, count_detected=pmt_detected)
            if self.verbosity > 2:
                logger.info(
                    "PMTResponse PerPMT : Event %d PMT %d All %d Det %d",
                    event_id, pmt_id, pmt_all, pmt_detected
                )

            count_all += pmt_all
            count_detected += pmt_detected

        if self.trees["pmt_events"]:
            self.append("pmt_events", event_id=event_id, count_all=count_all,
                        count_detected=count_detected)
        if self.verbosity > 1:
            logger.info(
                "PMTResponse PerEvent : Event %d All %d Det %d",
                event_id, count_all, count_detected
            )

        return {"pmt_count_all": count_all,
                "pmt_count_detected": count_detected}
