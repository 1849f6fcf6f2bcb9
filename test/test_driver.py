"""Test the central driver."""

import os

import h5py
import numpy as np
import pytest

from conftest import read_csv
from larana import Driver
from larana.io.read import HDF5Reader
from larana.utils.config import load_config


def make_cfg(event_file, log_dir, writer=None, ana=True):
    """Builds a complete driver configuration."""
    cfg = {
        "base": {"seed": 0, "log_dir": str(log_dir), "overwrite_log": True},
        "io": {"reader": {"name": "hdf5", "file_keys": event_file,
                          "create_run_map": True}},
    }
    if writer is not None:
        cfg["io"]["writer"] = writer
    if ana:
        cfg["ana"] = {
            "pfparticle_summary": {
                "pandora_label": "pandora", "track_label": "pandoraTrack",
                "shower_label": "pandoraShower"
            },
            "pmt_response": {"input_label": "largeant", "seed": 1},
            "g4_truth": {"g4_label": "largeant", "minos_z": 140.},
        }

    return cfg


class TestDriver:
    """Test the processing loop of the driver."""

    def test_run(self, event_file, tmp_path):
        """Test a full pass over the input file."""
        log_dir = os.path.join(tmp_path, "logs")
        driver = Driver(make_cfg(event_file, log_dir))
        driver.run()

        log = read_csv(os.path.join(log_dir, "larana_log.csv"))
        assert [int(r["entry"]) for r in log] == [0, 1, 2]
        assert [int(r["pmt_count_all"]) for r in log] == [5, 5, 5]
        assert "ana_pmt_response_time" in log[0]
        assert "read_time_sum" in log[0]
        assert float(log[0]["cpu_mem"]) > 0.

        summary = read_csv(
            os.path.join(log_dir, "pfparticle_summary_summary.csv"))
        assert [int(r["num_final_state"]) for r in summary] == [3, 0, 3]
        assert [int(r["event"]) for r in summary] == [10, 11, 12]

        particles = read_csv(os.path.join(log_dir, "g4_truth_particles.csv"))
        assert len(particles) == 6

    def test_iterations(self, event_file, tmp_path):
        """Test the restriction of the number of iterations."""
        cfg = make_cfg(event_file, tmp_path)
        cfg["base"]["iterations"] = 2
        Driver(cfg).run()
        assert len(read_csv(os.path.join(tmp_path, "larana_log.csv"))) == 2

        cfg = make_cfg(event_file, os.path.join(tmp_path, "all"))
        cfg["base"]["iterations"] = -1
        cfg["ana"]["overwrite"] = True
        driver = Driver(cfg)
        assert driver.iterations == 3

        cfg["base"]["iterations"] = 5
        driver = Driver(cfg)
        with pytest.raises(AssertionError):
            driver.run()

    def test_iterate(self, event_file, tmp_path):
        """Test the driver used as an iterator."""
        driver = Driver(make_cfg(event_file, tmp_path, ana=False))
        assert len(driver) == 3
        events = [data["run_info"].event for data in driver]
        assert events == [10, 11, 12]

    def test_process_run_event(self, event_file, tmp_path):
        """Test the processing of an entry picked by its event number."""
        driver = Driver(make_cfg(event_file, tmp_path))
        data = driver.process(run=1, subrun=0, event=12)
        assert data["index"] == 2
        assert len(data["final_state_tracks"]) == 1

        with pytest.raises(AssertionError):
            driver.process()

    def test_apply_filter(self, event_file, tmp_path):
        """Test the restriction of the entries after initialization."""
        driver = Driver(make_cfg(event_file, tmp_path, ana=False))
        driver.apply_filter(entry_list=[2, 0])
        assert len(driver) == 2
        assert driver.process(0)["run_info"].event == 12

        driver.apply_filter(skip_run_event_list=[(1, 0, 10)])
        assert [d["run_info"].event for d in driver] == [11, 12]

    def test_writer(self, event_file, tmp_path):
        """Test that the input and analysis products are written out."""
        out_path = os.path.join(tmp_path, "output.h5")
        writer = {"name": "hdf5", "file_name": out_path,
                  "skip_keys": ["pandora_metadata"]}
        Driver(make_cfg(event_file, tmp_path, writer=writer)).run()

        with h5py.File(out_path, "r") as out_file:
            assert len(out_file["events"]) == 3
            names = out_file["events"].dtype.names
            assert "final_state_pfparticles" in names
            assert "pmt_count_detected" in names
            assert "pandora_metadata" not in names

        reader = HDF5Reader(out_path)
        data = reader[0]
        assert [p.id for p in data["cosmic_pfparticles"]] == [4]
        assert data["pmt_count_all"] == 5
        assert len(reader[1]["final_state_tracks"]) == 0
        assert reader.cfg["ana"]["pmt_response"]["seed"] == 1

    def test_chained_output(self, event_file, tmp_path):
        """Test that the output of the full chain can be analyzed again."""
        cfg_path = os.path.join(
            os.path.dirname(__file__), "..", "config", "full.yaml")

        paths = [event_file]
        for i in range(2):
            cfg = load_config(cfg_path)
            log_dir = os.path.join(tmp_path, f"pass_{i}")
            paths.append(os.path.join(tmp_path, f"output_{i}.h5"))
            cfg["base"]["log_dir"] = log_dir
            cfg["io"]["reader"]["file_keys"] = paths[-2]
            cfg["io"]["writer"]["file_name"] = paths[-1]
            Driver(cfg).run()

            summary = read_csv(
                os.path.join(log_dir, "pfparticle_summary_summary.csv"))
            assert [int(r["num_final_state"]) for r in summary] == [3, 0, 3]

        with h5py.File(paths[1], "r") as out_file:
            assert "pandora_metadata" in out_file["events"].dtype.names
        assert len(HDF5Reader(paths[-1])) == 3

    def test_writer_prefix(self, event_file, tmp_path, monkeypatch):
        """Test that the output name defaults to the input prefix."""
        monkeypatch.chdir(tmp_path)
        driver = Driver(make_cfg(event_file, "logs", writer={"name": "hdf5"},
                                 ana=False))
        assert driver.writer.file_name == "events_larana.h5"

    def test_log_prefix(self, event_file, tmp_path):
        """Test that the log name can be prefixed with the input name."""
        cfg = make_cfg(event_file, tmp_path, ana=False)
        cfg["base"]["prefix_log"] = True
        Driver(cfg).run()
        assert os.path.isfile(os.path.join(tmp_path, "events_larana_log.csv"))

    def test_seed(self, event_file, tmp_path):
        """Test that a missing seed is drawn and recorded."""
        cfg = make_cfg(event_file, tmp_path, ana=False)
        del cfg["base"]["seed"]
        driver = Driver(cfg)
        assert driver.seed > 0
        assert driver.cfg["base"]["seed"] == driver.seed

        cfg["base"]["seed"] = 1.5
        with pytest.raises(AssertionError):
            Driver(cfg)


class TestPrefix:
    """Test the output prefix built from the input file names."""

    def test_single(self):
        """Test a single input file."""
        assert Driver.get_prefix(["/data/events_001.h5"]) == "events_001"

    def test_multiple(self):
        """Test several input files which share a prefix."""
        paths = [f"/data/events_{i:03d}.h5" for i in range(1, 5)]
        assert Driver.get_prefix(paths) == "events_00--1--2--4"

    def test_two(self):
        """Test two input files."""
        paths = ["/data/run_a_reco.h5", "/data/run_b_reco.h5"]
        assert Driver.get_prefix(paths) == "run_--a--b--_reco"

    def test_truncate(self):
        """Test that long prefixes are truncated."""
        paths = ["a" * 200 + "x.h5", "a" * 200 + "y.h5"]
        prefix = Driver.get_prefix(paths)
        assert len(prefix) == 150
        assert prefix.endswith("---")
        assert np.all([c == "a" for c in prefix[:147]])
