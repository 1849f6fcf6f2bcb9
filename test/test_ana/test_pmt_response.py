"""Test the PMT photon counting analysis script."""

import logging
import os

import numpy as np
import pytest

from conftest import make_photon, read_csv
from larana.ana.optical import PMTResponseAna
from larana.data import ObjectList, OpticalPhoton


def make_ana(log_dir, **kwargs):
    """Builds a PMT response script which stores its tables in `log_dir`."""
    cfg = {"input_label": "largeant", "wavelength_cut_low": 100.,
           "wavelength_cut_high": 200., "seed": 0}
    cfg.update(kwargs)

    return PMTResponseAna(log_dir=str(log_dir), **cfg)


class TestPMTResponse:
    """Test the photon counting at each PMT."""

    def test_counts(self, event, tmp_path):
        """Test the counts with a perfect quantum efficiency."""
        ana = make_ana(tmp_path)
        result = ana(event)
        assert result == {"pmt_count_all": 5, "pmt_count_detected": 4}

        pmts = read_csv(os.path.join(tmp_path, "pmt_response_pmts.csv"))
        assert [int(r["pmt_id"]) for r in pmts] == [1, 3]
        assert [int(r["count_all"]) for r in pmts] == [2, 3]
        assert [int(r["count_detected"]) for r in pmts] == [1, 3]
        assert all(int(r["event_id"]) == 10 for r in pmts)
        assert all(int(r["run"]) == 1 for r in pmts)

        events = read_csv(os.path.join(tmp_path, "pmt_response_pmt_events.csv"))
        assert len(events) == 1
        assert int(events[0]["count_all"]) == 5
        assert int(events[0]["count_detected"]) == 4

    def test_photon_tables(self, event, tmp_path):
        """Test the per-photon tables."""
        make_ana(tmp_path)(event)

        photons = read_csv(os.path.join(tmp_path, "pmt_response_all_photons.csv"))
        assert len(photons) == 5
        assert [int(r["pmt_id"]) for r in photons] == [1, 1, 3, 3, 3]
        np.testing.assert_allclose(
            [float(r["wavelength"]) for r in photons],
            [128., 400., 128., 150., 180.], rtol=1e-5)
        assert [float(r["time"]) for r in photons] == [11., 13., 10., 12., 14.]

        detected = read_csv(
            os.path.join(tmp_path, "pmt_response_detected_photons.csv"))
        assert len(detected) == 4
        assert all(float(r["wavelength"]) < 200. for r in detected)

    def test_quantum_efficiency(self, event, tmp_path):
        """Test that a null quantum efficiency detects nothing."""
        result = make_ana(tmp_path, quantum_efficiency=0.0)(event)
        assert result == {"pmt_count_all": 5, "pmt_count_detected": 0}

    def test_seed(self, event, tmp_path):
        """Test that the sampling is reproducible for a given seed."""
        photons = [make_photon(0, 150.) for _ in range(200)]
        event["largeant_photons"] = ObjectList(photons, OpticalPhoton())

        results = []
        for i in range(2):
            ana = make_ana(os.path.join(tmp_path, f"{i}"), seed=42,
                           quantum_efficiency=0.5)
            os.makedirs(ana.log_dir)
            results.append(ana(event)["pmt_count_detected"])

        assert results[0] == results[1]
        assert 0 < results[0] < 200

    def test_empty(self, event, tmp_path):
        """Test that an empty collection still fills the event table."""
        event["largeant_photons"] = ObjectList([], OpticalPhoton())
        result = make_ana(tmp_path)(event)
        assert result == {"pmt_count_all": 0, "pmt_count_detected": 0}

        events = read_csv(os.path.join(tmp_path, "pmt_response_pmt_events.csv"))
        assert len(events) == 1 and int(events[0]["count_all"]) == 0
        assert not os.path.exists(os.path.join(tmp_path, "pmt_response_pmts.csv"))

    def test_disabled_tables(self, event, tmp_path):
        """Test that disabled tables are never written."""
        event["largeant_photons"] = ObjectList([], OpticalPhoton())
        ana = make_ana(tmp_path, make_all_photons_tree=False,
                       make_events_tree=False)
        assert set(ana.writers) == {"detected_photons", "pmts"}

        ana(event)
        assert not os.listdir(tmp_path)

    def test_verbosity(self, event, tmp_path, caplog):
        """Test the levels of detail of the logged output."""
        caplog.set_level(logging.INFO, logger="larana")
        make_ana(tmp_path, verbosity=2)(event)
        assert "PMTResponse PerEvent : Event 10 All 5 Det 4" in caplog.text
        assert "PerPMT" not in caplog.text

        caplog.clear()
        make_ana(tmp_path, verbosity=4, overwrite=True)(event)
        assert "PMTResponse PerPMT : Event 10 PMT 3 All 3 Det 3" in caplog.text
        assert caplog.text.count("PMTResponse PerPhoton") == 5

    def test_missing_photons(self, event, tmp_path):
        """Test that the photon collection is required."""
        del event["largeant_photons"]
        with pytest.raises(AssertionError):
            make_ana(tmp_path)(event)

    def test_invalid(self, tmp_path):
        """Test the parameter checks."""
        with pytest.raises(AssertionError):
            make_ana(tmp_path, quantum_efficiency=1.5)
        with pytest.raises(AssertionError):
            make_ana(tmp_path, wavelength_cut_low=300.)
