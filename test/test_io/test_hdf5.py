"""Test that the HDF5 writer and reader work as intended."""

import os

import h5py
import numpy as np
import pytest
import yaml

from larana.data import MCParticle, ObjectList, PFParticle, RunInfo, Track
from larana.io import reader_factory, writer_factory
from larana.io.read import HDF5Reader
from larana.io.write import HDF5Writer
from larana.version import __version__


@pytest.fixture(name="hdf5_output")
def fixture_hdf5_output(tmp_path):
    """Create a dummy output path for an HDF5 file.

    Parameters
    ----------
    tmp_path : str
       Generic pytest fixture used to handle temporary test files
    """
    return os.path.join(tmp_path, "dummy.h5")


class TestHDF5Writer:
    """Test the structure of the files written by :class:`HDF5Writer`."""

    def test_layout(self, event_file):
        """Test the event dataset and the product datasets."""
        with h5py.File(event_file, "r") as in_file:
            assert len(in_file["events"]) == 3
            assert "pandora_pfparticles" in in_file["events"].dtype.names
            assert in_file["pandora_pfparticles"].attrs["class_name"] == "PFParticle"
            assert not in_file["pandora_pfparticles"].attrs["scalar"]
            assert in_file["run_info"].attrs["scalar"]
            assert in_file["index"].attrs["scalar"]
            assert in_file["pandora_pfparticles_metadata_assn"].shape[1] == 2
            assert len(in_file["pandora_pfparticles"]) == 10

    def test_info(self, event_file):
        """Test that the version and the configuration are stored."""
        with h5py.File(event_file, "r") as in_file:
            attrs = in_file["info"].attrs
            assert attrs["version"] == __version__
            assert yaml.safe_load(attrs["cfg"]) == {"base": {"seed": 0}}

    def test_file_exists(self, event_file):
        """Test that existing files are protected unless requested."""
        with pytest.raises(FileExistsError):
            HDF5Writer(event_file)
        HDF5Writer(event_file, overwrite=True)

    def test_prefix(self):
        """Test that the output name is derived from the input prefix."""
        assert HDF5Writer(prefix="events").file_name == "events_larana.h5"
        with pytest.raises(AssertionError):
            HDF5Writer()

    def test_keys(self, hdf5_output):
        """Test the restriction of the stored keys."""
        data = {"index": 0, "run_info": RunInfo(run=1),
                "tracks": ObjectList([Track()], Track())}
        writer = HDF5Writer(hdf5_output, keys=["tracks"])
        writer(data)
        with h5py.File(hdf5_output, "r") as in_file:
            assert set(in_file["events"].dtype.names) == {"index", "tracks"}

    def test_skip_keys(self, hdf5_output):
        """Test the exclusion of some keys."""
        data = {"index": 0, "run_info": RunInfo(run=1), "value": 3.}
        writer = HDF5Writer(hdf5_output, skip_keys=["run_info"])
        writer(data)
        with h5py.File(hdf5_output, "r") as in_file:
            assert set(in_file["events"].dtype.names) == {"index", "value"}

        with pytest.raises(KeyError):
            HDF5Writer(hdf5_output, overwrite=True, skip_keys=["missing"])(data)

    def test_empty_list_needs_default(self, hdf5_output):
        """Test that empty plain lists cannot be typed."""
        with pytest.raises(AssertionError):
            HDF5Writer(hdf5_output)({"index": 0, "tracks": []})

    def test_append(self, event_file):
        """Test that entries can be added to an existing file."""
        writer = HDF5Writer(event_file, append=True)
        writer({"index": 3, **HDF5Reader(event_file).get(0)})
        with h5py.File(event_file, "r") as in_file:
            assert len(in_file["events"]) == 4

    def test_batch(self, hdf5_output):
        """Test that several entries can be stored at once."""
        batch = [{"index": i, "run_info": RunInfo(run=1, event=i)}
                 for i in range(4)]
        HDF5Writer(hdf5_output)(batch)

        reader = HDF5Reader(hdf5_output)
        assert len(reader) == 4
        assert reader[3]["run_info"].event == 3

    def test_factory(self):
        """Test that the writer can be built from its configuration."""
        writer = writer_factory({"name": "hdf5"}, prefix="run")
        assert isinstance(writer, HDF5Writer)
        with pytest.raises(ValueError):
            writer_factory({"name": "csv"})


class TestHDF5Reader:
    """Test that :class:`HDF5Reader` rebuilds the stored products."""

    def test_length(self, event_file):
        """Test the number of entries."""
        reader = HDF5Reader(event_file)
        assert len(reader) == 3
        assert reader.num_entries == 3

    def test_objects(self, event_file):
        """Test that objects are rebuilt into their data classes."""
        data = HDF5Reader(event_file)[0]

        pfps = data["pandora_pfparticles"]
        assert isinstance(pfps, ObjectList) and len(pfps) == 5
        assert isinstance(pfps[0], PFParticle)
        np.testing.assert_equal(pfps[0].daughter_ids, [1, 2, 3])
        assert pfps[1].parent_id == 0

        meta = data["pandora_metadata"]
        assert meta[0].properties == {"IsNeutrino": 1.0, "NuScore": 0.9}
        assert meta[3].properties == {}

        assert isinstance(data["run_info"], RunInfo)
        assert data["run_info"].event == 10
        assert data["index"] == 0

    def test_trajectories(self, event_file):
        """Test that two-dimensional attributes recover their shape."""
        particles = HDF5Reader(event_file)[0]["largeant_particles"]
        assert isinstance(particles[0], MCParticle)
        assert particles[0].positions.shape == (6, 4)
        assert particles[1].process == "muIoni"
        assert particles[0].units == "cm"

    def test_association(self, event_file):
        """Test that association tables recover their shape."""
        data = HDF5Reader(event_file)[0]
        np.testing.assert_equal(
            data["pandoraTrack_pfparticles_tracks_assn"], [[1, 0], [4, 1]])

    def test_empty_entry(self, event_file):
        """Test an entry with empty collections."""
        data = HDF5Reader(event_file)[1]
        assert len(data["pandora_pfparticles"]) == 0
        assert isinstance(data["pandora_pfparticles"].default, PFParticle)
        assert data["pandora_pfparticles_metadata_assn"].shape == (0, 2)

    def test_dictionaries(self, event_file):
        """Test that objects can be loaded as plain dictionaries."""
        data = HDF5Reader(event_file, build_classes=False)[0]
        assert isinstance(data["pandora_pfparticles"][0], dict)

    def test_info(self, event_file):
        """Test that the production information is loaded."""
        reader = HDF5Reader(event_file)
        assert reader.version == __version__
        assert reader.cfg == {"base": {"seed": 0}}

    def test_n_entry(self, event_file):
        """Test the selection of a range of entries."""
        reader = HDF5Reader(event_file, n_entry=2, n_skip=1)
        assert len(reader) == 2
        assert reader[0]["run_info"].event == 11
        assert reader.get_file_entry_index(0) == 1

    def test_entry_list(self, event_file):
        """Test the selection of specific entries."""
        reader = HDF5Reader(event_file, entry_list=[2])
        assert len(reader) == 1
        assert reader[0]["run_info"].event == 12

        reader = HDF5Reader(event_file, skip_entry_list=[0, 1])
        assert len(reader) == 1

    def test_run_event(self, event_file):
        """Test the access to entries by (run, subrun, event)."""
        reader = HDF5Reader(event_file, create_run_map=True)
        assert reader.get_run_event(1, 0, 11)["index"] == 1

        reader = HDF5Reader(event_file, run_event_list=[(1, 0, 12)])
        assert len(reader) == 1
        with pytest.raises(AssertionError):
            HDF5Reader(event_file, run_event_list=[(1, 0, 99)])
        reader = HDF5Reader(event_file, run_event_list=[(1, 0, 99), (1, 0, 10)],
                            allow_missing=True)
        assert len(reader) == 1

    def test_exclusive_selections(self, event_file):
        """Test that selection families cannot be combined."""
        with pytest.raises(AssertionError):
            HDF5Reader(event_file, n_entry=1, entry_list=[0])

    def test_multiple_files(self, event_file, tmp_path):
        """Test that entries are indexed across files."""
        other = os.path.join(tmp_path, "events_other.h5")
        HDF5Writer(other)(HDF5Reader(event_file)[2])

        reader = HDF5Reader(os.path.join(tmp_path, "events*.h5"))
        assert len(reader.file_paths) == 2
        assert len(reader) == 4
        assert reader.get_file_index(3) == 1
        assert reader.get_file_path(3) == other

    def test_file_list(self, event_file, tmp_path):
        """Test that the input files can be provided as a text file."""
        list_path = os.path.join(tmp_path, "files.txt")
        with open(list_path, "w", encoding="utf-8") as list_file:
            list_file.write(event_file + "\n")

        assert HDF5Reader(list_path).file_paths == [event_file]

    def test_missing_file(self, tmp_path):
        """Test that missing inputs are reported."""
        with pytest.raises(AssertionError):
            HDF5Reader(os.path.join(tmp_path, "missing_*.h5"))

    def test_factory(self, event_file):
        """Test that the reader can be built from its configuration."""
        reader = reader_factory({"name": "hdf5", "file_keys": event_file})
        assert isinstance(reader, HDF5Reader)
