"""Contains a reader class dedicated to loading data from HDF5 files."""

from dataclasses import fields

import h5py
import numpy as np
import yaml

import larana.data
from larana.utils.logger import logger

from .base import ReaderBase

__all__ = ["HDF5Reader"]


class HDF5Reader(ReaderBase):
    """Class which reads event data products stored in HDF5 files.

    The files must be structured as follows (see :class:`HDF5Writer`):
      - An `events` dataset with one region reference per data product
      - One dataset per data product, the region references of the `events`
        dataset point to the rows which belong to each event
      - An `info` dataset whose attributes hold the producing release
        `version` and, optionally, the configuration `cfg`

    Object datasets are compound datasets with a `class_name` attribute which
    names the :mod:`larana.data` class to rebuild each row into.
    """

    name = "hdf5"

    def __init__(self, file_keys, limit_num_files=None, max_print_files=10,
                 n_entry=None, n_skip=None, entry_list=None,
                 skip_entry_list=None, run_event_list=None,
                 skip_run_event_list=None, create_run_map=False,
                 build_classes=True, skip_unknown_attrs=False,
                 run_info_key="run_info", allow_missing=False):
        """Initalize the HDF5 file reader.

        Parameters
        ----------
        file_keys : Union[str, List[str]]
            Path(s) or glob pattern(s) to the HDF5 files, or a text file list
        limit_num_files : int, optional
            Maximum number of files to load
        max_print_files : int, default 10
            Maximum number of loaded file names to be printed
        n_entry : int, optional
            Maximum number of entries to load
        n_skip : int, optional
            Number of entries to skip at the beginning
        entry_list : list, optional
            List of integer entry IDs to add to the index
        skip_entry_list : list, optional
            List of integer entry IDs to skip from the index
        run_event_list: list((int, int, int)), optional
            List of (run, subrun, event) triplets to add to the index
        skip_run_event_list: list((int, int, int)), optional
            List of (run, subrun, event) triplets to skip from the index
        create_run_map : bool, default False
            Build a map between (run, subrun, event) triplets and entries
        build_classes : bool, default True
            If the stored object is a class, build it back
        skip_unknown_attrs : bool, default False
            If `True`, drop stored attributes the data class does not know
        run_info_key : str, default 'run_info'
            Name of the data product which contains the run info of the event
        allow_missing : bool, default False
            If `True`, allows missing entries in the run/event list
        """
        self.process_file_paths(file_keys, limit_num_files, max_print_files)

        if run_event_list is not None or skip_run_event_list is not None:
            create_run_map = True

        # Loop over the input files, build a map from index to file ID
        self.num_entries = 0
        file_index, run_info = [], []
        self.file_offsets = np.empty(len(self.file_paths), dtype=np.int64)
        for i, path in enumerate(self.file_paths):
            with h5py.File(path, "r") as in_file:
                assert "events" in in_file, (
                    f"File {path} does not contain an event tree."
                )
                num_entries = len(in_file["events"])

                if create_run_map:
                    assert run_info_key in in_file, (
                        f"Must provide `{run_info_key}` to create a run map."
                    )
                    for event in in_file["events"]:
                        info = in_file[run_info_key][event[run_info_key]][0]
                        run_info.append(
                            (info["run"], info["subrun"], info["event"])
                        )

            file_index.append(np.full(num_entries, i, dtype=np.int64))
            self.file_offsets[i] = self.num_entries
            self.num_entries += num_entries

        logger.info("Total number of entries in the file(s): %d\n",
                    self.num_entries)

        self.file_index = np.concatenate(file_index)
        self.run_info = None
        if create_run_map:
            self.run_info = np.array(run_info, dtype=np.int64).reshape(-1, 3)

        self.process_run_info()
        self.process_entry_list(
            n_entry, n_skip, entry_list, skip_entry_list, run_event_list,
            skip_run_event_list, allow_missing
        )

        self.build_classes = build_classes
        self.skip_unknown_attrs = skip_unknown_attrs

        # Fetch the information about how the first file was produced
        self.cfg, self.version = self.process_info()

    def process_info(self):
        """Fetches the configuration and the release used to produce a file.

        Returns
        -------
        cfg : dict
            Configuration dictionary, `None` if it was not stored
        version : str
            Release tag, `None` if it was not stored
        """
        with h5py.File(self.file_paths[0], "r") as in_file:
            if "info" not in in_file:
                return None, None

            attrs = in_file["info"].attrs
            version = attrs.get("version", None)
            cfg = attrs.get("cfg", None)

        if cfg is not None:
            cfg = yaml.safe_load(cfg)

        return cfg, version

    def get(self, idx):
        """Returns a specific entry in the file.

        Parameters
        ----------
        idx : int
            Index of the entry in the selection

        Returns
        -------
        dict
            Dictionary of data products corresponding to one event
        """
        assert idx < len(self.entry_index), (
            f"Entry {idx} is out of range ({len(self.entry_index)} entries)."
        )
        file_idx = self.get_file_index(idx)
        entry_idx = self.get_file_entry_index(idx)

        data = {}
        with h5py.File(self.file_paths[file_idx], "r") as in_file:
            event = in_file["events"][entry_idx]
            for key in event.dtype.names:
                data[key] = self.load_key(in_file, event, key)

        # Use the location in the current dataset, not the one read from file
        data["index"] = np.int64(idx)
        data["file_index"] = np.int64(file_idx)
        data["file_entry_index"] = np.int64(entry_idx)

        return data

    def load_key(self, in_file, event, key):
        """Fetches one data product of one event.

        Parameters
        ----------
        in_file : h5py.File
            HDF5 file instance
        event : np.void
            Row of the `events` dataset
        key : str
            Name of the data product

        Returns
        -------
        object
            Array, scalar, object or list of objects
        """
        dataset = in_file[key]
        array = dataset[event[key]]
        scalar = dataset.attrs.get("scalar", False)

        if not array.dtype.names:
            # Simple array of values, restore its width
            if len(dataset.shape) > 1:
                array = array.reshape(-1, dataset.shape[1])
            if scalar:
                value = array[0]
                return value.decode() if isinstance(value, bytes) else value

            return array

        # Compound dataset, rebuild one object per row
        obj_class = getattr(larana.data, dataset.attrs["class_name"])
        names = array.dtype.names
        if self.skip_unknown_attrs:
            known = {f.name for f in fields(obj_class)}
            names = [n for n in names if n in known]

        objects = []
        for row in array:
            obj_dict = {n: row[n] for n in names}
            if self.build_classes:
                objects.append(obj_class(**obj_dict))
            else:
                objects.append(obj_dict)

        if scalar:
            return objects[0]

        return larana.data.ObjectList(objects, obj_class())
