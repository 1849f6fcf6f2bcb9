"""Contains the data reader base class.

Data readers are used to extract specific entries from files and store their
data products into dictionaries to be used downstream.
"""

import glob
import os

import numpy as np

from larana.utils.logger import logger

__all__ = ["ReaderBase"]


class ReaderBase:
    """Parent reader class which provides common functions between all readers.

    It takes care of:
    1. Resolving the requested files (glob patterns or a text file list)
    2. Selecting the entries to read (by count, by entry number or by
       (run, subrun, event) triplet)
    3. Mapping a global entry index onto a file and an entry in that file

    Daughter classes must fill `num_entries`, `file_index`, `file_offsets`
    (and `run_info`, if available) and define the `get` method.

    Attributes
    ----------
    name : str
        Name of the reader, as requested in the configuration
    num_entries : int
        Total number of entries in the files provided
    entry_index : np.ndarray
        List of global indexes to cycle through
    file_paths : List[str]
        List of files to read data from
    file_offsets : np.ndarray
        Global index of the first entry of each file
    file_index : np.ndarray
        Index of the file each global entry lives in
    run_info : np.ndarray
        (run, subrun, event) triplets associated with each entry
    run_map : Dict[Tuple[int], int]
        Maps each selected (run, subrun, event) triplet onto an entry
    """

    name = ""
    num_entries = None
    entry_index = None
    file_paths = None
    file_offsets = None
    file_index = None
    run_info = None
    run_map = None

    def __len__(self):
        """Number of selected entries."""
        return len(self.entry_index)

    def __getitem__(self, idx):
        """Returns one selected entry."""
        return self.get(idx)

    def get(self, idx):
        """Placeholder to be defined by the daughter class."""
        raise NotImplementedError

    def process_file_paths(self, file_keys, limit_num_files=None,
                           max_print_files=10):
        """Resolves the list of files to read from.

        Parameters
        ----------
        file_keys : Union[str, List[str]]
            Path or glob pattern (or list of them) to the input files, or a
            path to a `.txt` file which lists one input file per line
        limit_num_files : int, optional
            Maximum number of files to load
        max_print_files : int, default 10
            Maximum number of loaded file names to be printed
        """
        assert file_keys is not None, "No input `file_keys` provided, abort."
        assert limit_num_files is None or limit_num_files > 0, (
            "If `limit_num_files` is provided, it must be larger than 0."
        )

        # A text file is a file list
        if isinstance(file_keys, str) and os.path.splitext(file_keys)[-1] == ".txt":
            assert os.path.isfile(file_keys), (
                f"File list not found at path: {file_keys}"
            )
            with open(file_keys, "r", encoding="utf-8") as list_file:
                file_keys = [l for l in list_file.read().splitlines() if l.strip()]

        if isinstance(file_keys, str):
            file_keys = [file_keys]

        self.file_paths = []
        for file_key in file_keys:
            paths = sorted(glob.glob(file_key))
            assert paths, f"File key {file_key} yielded no compatible path."
            self.file_paths.extend(paths)

        self.file_paths = sorted(self.file_paths)[:limit_num_files]

        num_files = len(self.file_paths)
        file_list = " - " + "\n - ".join(self.file_paths[:max_print_files])
        file_list += "\n ... \n" if num_files > max_print_files else "\n"
        logger.info("Will load %d file(s):\n%s", num_files, file_list)

    def process_run_info(self):
        """Builds a map from (run, subrun, event) triplets to entries.

        The triplets must be unique across the whole dataset.
        """
        self.run_map = None
        if self.run_info is None:
            return

        assert len(self.run_info) == self.num_entries, (
            "There must be one (run, subrun, event) triplet per entry."
        )
        assert len(np.unique(self.run_info, axis=0)) == len(self.run_info), (
            "Cannot create a run map if (run, subrun, event) triplets "
            "are not unique in the dataset. Abort."
        )
        self.run_map = {tuple(v): i for i, v in enumerate(self.run_info)}

    def process_entry_list(self, n_entry=None, n_skip=None, entry_list=None,
                           skip_entry_list=None, run_event_list=None,
                           skip_run_event_list=None, allow_missing=False):
        """Selects the list of entries that can be accessed by :meth:`get`.

        Only one family of selection parameters may be used at a time:
        (`n_entry`, `n_skip`), (`entry_list`, `skip_entry_list`) or
        (`run_event_list`, `skip_run_event_list`).

        Parameters
        ----------
        n_entry : int, optional
            Maximum number of entries to load
        n_skip : int, optional
            Number of entries to skip at the beginning
        entry_list : Union[list, str], optional
            Entry IDs to load (list or path to a text file)
        skip_entry_list : Union[list, str], optional
            Entry IDs to skip (list or path to a text file)
        run_event_list: Union[list, str], optional
            (run, subrun, event) triplets to load
        skip_run_event_list: Union[list, str], optional
            (run, subrun, event) triplets to skip
        allow_missing : bool, default False
            If `True`, silently ignore triplets which are not in the dataset
        """
        families = (
            n_entry is not None or n_skip is not None,
            entry_list is not None or skip_entry_list is not None,
            run_event_list is not None or skip_run_event_list is not None,
        )
        assert sum(families) < 2, (
            "Cannot combine `n_entry`/`n_skip`, `entry_list`/`skip_entry_list` "
            "and `run_event_list`/`skip_run_event_list`."
        )
        assert entry_list is None or skip_entry_list is None, (
            "Cannot specify both `entry_list` and `skip_entry_list`."
        )
        assert run_event_list is None or skip_run_event_list is None, (
            "Cannot specify both `run_event_list` and `skip_run_event_list`."
        )

        entries = np.arange(self.num_entries, dtype=np.int64)
        if families[0]:
            n_skip = n_skip or 0
            n_entry = n_entry if n_entry else self.num_entries - n_skip
            assert n_skip + n_entry <= self.num_entries, (
                f"Mismatch between `n_entry` ({n_entry}), `n_skip` ({n_skip}) "
                f"and the number of entries in the files ({self.num_entries})."
            )
            entries = entries[n_skip:n_skip + n_entry]

        elif families[1]:
            selected = self.parse_entry_list(
                entry_list if entry_list is not None else skip_entry_list
            )
            assert np.all(selected < self.num_entries), (
                "Values in the entry list outside of bounds."
            )
            if entry_list is not None:
                entries = entries[selected]
            else:
                entries = np.setdiff1d(entries, selected)

        elif families[2]:
            self.process_run_info()
            assert self.run_map is not None, (
                "Must build a run map to select entries by (run, subrun, event)."
            )
            triplets = self.parse_run_event_list(
                run_event_list if run_event_list is not None
                else skip_run_event_list
            )
            selected = []
            for triplet in triplets:
                if allow_missing and triplet not in self.run_map:
                    continue
                selected.append(self.get_run_event_index(*triplet))

            if run_event_list is not None:
                entries = np.unique(np.asarray(selected, dtype=np.int64))
            else:
                entries = np.setdiff1d(entries, selected)

        assert len(entries), "Must at least have one entry to load."

        # Restrict the run map to the selected entries
        if self.run_info is not None:
            self.run_map = {
                tuple(self.run_info[e]): i for i, e in enumerate(entries)
            }

        logger.info("Total number of entries selected: %d\n", len(entries))

        self.entry_index = entries

    def get_run_event(self, run, subrun, event):
        """Returns the entry corresponding to a (run, subrun, event) triplet.

        Parameters
        ----------
        run : int
            Run number
        subrun : int
            Subrun number
        event : int
            Event number

        Returns
        -------
        dict
            Dictionary of data products corresponding to one event
        """
        return self.get(self.get_run_event_index(run, subrun, event))

    def get_run_event_index(self, run, subrun, event):
        """Returns the entry index of a (run, subrun, event) triplet.

        Parameters
        ----------
        run : int
            Run number
        subrun : int
            Subrun number
        event : int
            Event number

        Returns
        -------
        int
            Index of the entry
        """
        assert self.run_map is not None, (
            "Must build a run map to get entries by (run, subrun, event)."
        )
        assert (run, subrun, event) in self.run_map, (
            f"Could not find (run={run}, subrun={subrun}, event={event})."
        )

        return self.run_map[(run, subrun, event)]

    def get_file_index(self, idx):
        """Index of the file which contains a selected entry.

        Parameters
        ----------
        idx : int
            Index of the entry in the selection

        Returns
        -------
        int
            Index of the file in the file list
        """
        return int(self.file_index[self.entry_index[idx]])

    def get_file_path(self, idx):
        """Path to the file which contains a selected entry.

        Parameters
        ----------
        idx : int
            Index of the entry in the selection

        Returns
        -------
        str
            Path to the file
        """
        return self.file_paths[self.get_file_index(idx)]

    def get_file_entry_index(self, idx):
        """Index of a selected entry within the file it lives in.

        Parameters
        ----------
        idx : int
            Index of the entry in the selection

        Returns
        -------
        int
            Index of the entry in its file
        """
        offset = self.file_offsets[self.get_file_index(idx)]

        return int(self.entry_index[idx] - offset)

    @staticmethod
    def read_list_file(path):
        """Reads a text file of space or comma separated integers.

        Parameters
        ----------
        path : str
            Path to the text file

        Returns
        -------
        List[List[int]]
            One list of integers per non-empty line
        """
        assert os.path.isfile(path), f"The list source file does not exist: {path}"
        with open(path, "r", encoding="utf-8") as list_file:
            lines = list_file.read().splitlines()

        return [[int(w) for w in l.replace(",", " ").split()] for l in lines
                if l.strip()]

    @classmethod
    def parse_entry_list(cls, list_source):
        """Parses a list of entry indexes.

        Parameters
        ----------
        list_source : Union[list, str]
            List of entries or path to a text file containing them

        Returns
        -------
        np.ndarray
            Entry indexes
        """
        if list_source is None:
            return np.empty(0, dtype=np.int64)

        if isinstance(list_source, str):
            lines = cls.read_list_file(list_source)
            return np.array([v for l in lines for v in l], dtype=np.int64)

        return np.asarray(list_source, dtype=np.int64)

    @classmethod
    def parse_run_event_list(cls, list_source):
        """Parses a list of (run, subrun, event) triplets.

        Parameters
        ----------
        list_source : Union[list, str]
            List of triplets or path to a text file with one triplet per line

        Returns
        -------
        Tuple[Tuple[int]]
            Tuple of (run, subrun, event) triplets
        """
        if list_source is None:
            return ()

        if isinstance(list_source, str):
            list_source = cls.read_list_file(list_source)

        return tuple(tuple(int(v) for v in triplet) for triplet in list_source)
