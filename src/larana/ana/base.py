"""Base class of all analysis scripts."""

from abc import ABC, abstractmethod
from warnings import warn

from larana.io.write import CSVWriter


class AnaBase(ABC):
    """Parent class of all analysis scripts.

    This base class performs the following functions:
    - Ensures that the necessary methods exist
    - Checks that the script is provided the necessary data products
    - Writes the tables (trees) produced by the analysis to CSV files

    Attributes
    ----------
    name : str
        Name of the analysis script (to call it from a configuration file)
    keys : Dict[str, bool]
        Data products used by the script and whether they are required
    writers : Dict[str, CSVWriter]
        One CSV writer per output table
    """

    # Name of the analysis script (as specified in the configuration)
    name = None

    # Alternative allowed names of the analysis script
    aliases = ()

    # Set of data keys needed for this analysis script to operate
    _keys = ()

    def __init__(self, append=False, overwrite=False, log_dir=None,
                 prefix=None):
        """Initialize default analysis script object properties.

        Parameters
        ----------
        append : bool, default False
            If `True`, appends existing CSV files instead of creating new ones
        overwrite : bool, default False
            If `True` and an output CSV file exists, overwrite it
        log_dir : str, optional
            Output CSV file directory (shared with driver log)
        prefix : str, optional
            Name to prefix every output CSV file with
        """
        self.update_keys({
            "index": True, "file_index": False,
            "file_entry_index": False, "run_info": False
        })

        self.append_file = append
        self.overwrite_file = overwrite

        # Writer dictionary to be filled by the children classes
        self.log_dir = log_dir
        self.output_prefix = prefix
        self.writers = {}
        self.base_dict = {}

    def initialize_writer(self, name):
        """Adds a CSV writer to the list of writers for this script.

        The output file is named `{prefix_}{script name}_{name}.csv` and
        lives under the log directory.

        Parameters
        ----------
        name : str
            Name of the output table
        """
        assert len(name) > 0, "Must provide a non-empty name."
        file_name = f"{self.name}_{name}.csv"
        if self.output_prefix:
            file_name = f"{self.output_prefix}_{file_name}"
        if self.log_dir:
            file_name = f"{self.log_dir}/{file_name}"

        self.writers[name] = CSVWriter(
            file_name, append=self.append_file, overwrite=self.overwrite_file
        )

    @property
    def keys(self):
        """Dictionary of (key, necessity) pairs which determine which data keys
        are needed/optional for the analysis script to run.

        Returns
        -------
        Dict[str, bool]
            Dictionary of (key, necessity) pairs to be used
        """
        return dict(self._keys)

    @keys.setter
    def keys(self, keys):
        """Converts a dictionary of keys to an immutable tuple.

        Parameters
        ----------
        Dict[str, bool]
            Dictionary of (key, necessity) pairs to be used
        """
        self._keys = tuple(keys.items())

    def update_keys(self, update_dict):
        """Update the underlying set of keys and their necessity in place.

        Parameters
        ----------
        update_dict : Dict[str, bool]
            Dictionary of (key, necessity) pairs to update the keys with
        """
        if len(update_dict) > 0:
            keys = self.keys
            keys.update(update_dict)
            self._keys = tuple(keys.items())

    def get_base_dict(self, data):
        """Builds the entry information stored at the start of every row.

        Parameters
        ----------
        data : dict
            Dictionary of data products

        Returns
        -------
        dict
            Dictionary of information for this entry
        """
        base_dict = {"index": data["index"]}
        for key in ("file_index", "file_entry_index"):
            if key in data:
                base_dict[key] = data[key]

        if "run_info" in data:
            base_dict.update(**data["run_info"].scalar_dict())
        else:
            warn("`run_info` is missing; will not be included in CSV file.")

        return base_dict

    def append(self, name, **kwargs):
        """Append one row to an output table.

        Parameters
        ----------
        name : str
            Name of the output table
        **kwargs : dict
            Dictionary of column values to save to the table
        """
        self.writers[name].append({**self.base_dict, **kwargs})

    def get_event_id(self, data):
        """Event number, if the run information is available, entry otherwise.

        Parameters
        ----------
        data : dict
            Dictionary of data products

        Returns
        -------
        int
            Event identifier
        """
        if "run_info" in data:
            return int(data["run_info"].event)

        return int(data["index"])

    def __call__(self, data):
        """Runs the analysis script on one entry.

        Parameters
        ----------
        data : dict
            Data dictionary for one entry

        Returns
        -------
        dict
            Update to the input dictionary
        """
        data_filter = {}
        for key, req in self.keys.items():
            assert not req or key in data, (
                f"Analysis script `{self.name}` is missing an essential "
                f"input to be used: `{key}`."
            )

            if key in data:
                data_filter[key] = data[key]

        self.base_dict = self.get_base_dict(data_filter)

        return self.process(data_filter)

    @abstractmethod
    def process(self, data):
        """Place-holder method to be defined in each analysis script.

        Parameters
        ----------
        data : dict
            Filtered data dictionary for one entry
        """
        raise NotImplementedError("Must define the `process` function")
