"""Module to write event data products to HDF5 files."""

import os
from dataclasses import dataclass

import h5py
import numpy as np
import yaml

from larana.data.base import DataBase
from larana.version import __version__

__all__ = ["HDF5Writer"]


class HDF5Writer:
    """Writes data dictionaries to an HDF5 file.

    Each data product gets its own dataset. An `events` dataset holds, for
    each entry, one region reference per product which points to the rows
    of that product belonging to the entry. This is the layout expected by
    :class:`HDF5Reader`, so the output of an analysis (input products and
    analyzer products alike) can be read back by the same tools.

    Typical configuration should look like:

    .. code-block:: yaml

        io:
          ...
          writer:
            name: hdf5
            file_name: output.h5
            keys:
              - pandora_pfparticles
              - final_state_pfparticles
    """

    name = "hdf5"

    def __init__(self, file_name=None, keys=None, skip_keys=None,
                 overwrite=False, append=False, prefix=None):
        """Initializes the basics of the output file.

        Parameters
        ----------
        file_name : str, optional
            Name of the output HDF5 file
        keys : List[str], optional
            List of data product keys to store. If not specified, store
            everything
        skip_keys: List[str], optional
            List of data product keys to skip
        overwrite : bool, default False
            If `True`, overwrite the output file if it already exists
        append : bool, default False
            If `True`, add new entries to the end of an existing file
        prefix : str, optional
            Input file prefix. It is used to form the output file name,
            provided that no `file_name` is explicitely provided
        """
        if not file_name:
            assert prefix is not None, (
                "If the output `file_name` is not provided, must provide "
                "the input file `prefix` to build it from."
            )
            file_name = f"{prefix}_larana.h5"

        if not overwrite and not append and os.path.isfile(file_name):
            raise FileExistsError(f"File with name {file_name} already exists.")

        assert keys is None or skip_keys is None, (
            "Must not specify both `keys` and `skip_keys`."
        )

        self.file_name = file_name
        self.append = append
        self.keys = keys
        self.skip_keys = skip_keys
        self.ready = False

        self.type_dict = None
        self.event_dtype = None

    @dataclass
    class DataFormat:
        """Data structure to hold writing parameters.

        Attributes
        ----------
        dtype : type, optional
            Data type
        class_name : str, optional
            Name of the class the information comes from
        width : int, default 0
            Width of the array to store, if it is two-dimensional
        scalar : bool, default False
            Whether the data product is a single value or object
        """

        dtype: object = None
        class_name: str = None
        width: int = 0
        scalar: bool = False

        @property
        def is_object(self):
            """Whether the data product is made of data class objects."""
            return self.class_name is not None

    def create(self, data, cfg=None):
        """Create the output file structure based on one data dictionary.

        Parameters
        ----------
        data : dict
            Dictionary of data products
        cfg : dict, optional
            Complete configuration, stored alongside the data
        """
        self.keys = self.get_stored_keys(data)
        self.type_dict = {key: self.get_format(key, data[key])
                          for key in self.keys}

        with h5py.File(self.file_name, "w") as out_file:
            # Environment information
            out_file.create_dataset("info", (0,), maxshape=(None,), dtype=None)
            out_file["info"].attrs["version"] = __version__
            if cfg is not None:
                out_file["info"].attrs["cfg"] = yaml.dump(cfg)

            self.initialize_datasets(out_file)

        self.ready = True

    def load(self):
        """Fetches the structure of an existing file to append to it."""
        self.type_dict = {}
        with h5py.File(self.file_name, "r") as out_file:
            self.event_dtype = out_file["events"].dtype
            self.keys = list(self.event_dtype.names)
            for key in self.keys:
                dataset = out_file[key]
                fmt = self.DataFormat(
                    dtype=dataset.dtype,
                    class_name=dataset.attrs.get("class_name", None),
                    scalar=bool(dataset.attrs.get("scalar", False)),
                )
                if len(dataset.shape) > 1:
                    fmt.width = dataset.shape[1]
                self.type_dict[key] = fmt

        self.ready = True

    def get_stored_keys(self, data):
        """Get the list of data product keys to store.

        Parameters
        ----------
        data : dict
            Dictionary of data products

        Returns
        -------
        List[str]
            List of data keys to store to file
        """
        if self.keys is None:
            keys = list(data.keys())
            for key in self.skip_keys or []:
                if key not in data:
                    raise KeyError(
                        f"Key {key} appears in `skip_keys` but does not "
                        "appear in the dictionary of data products."
                    )
                keys.remove(key)

        else:
            keys = ["index"] + [k for k in self.keys if k != "index"]
            for key in keys:
                assert key in data, (
                    f"Cannot store {key} as it does not appear "
                    "in the dictionary of data products."
                )

        return keys

    def get_format(self, key, value):
        """Identify how to store one data product.

        Parameters
        ----------
        key : str
            Data product name
        value : object
            Data product value for one entry

        Returns
        -------
        DataFormat
            Storage parameters of the data product
        """
        fmt = self.DataFormat()
        if np.isscalar(value):
            # Single scalar for the entry (e.g. index, counts)
            if isinstance(value, str):
                fmt.dtype = h5py.string_dtype()
            else:
                fmt.dtype = np.asarray(value).dtype
            fmt.scalar = True

        elif isinstance(value, DataBase):
            # Single data class object for the entry (e.g. run info)
            fmt.dtype = self.get_object_dtype(value)
            fmt.class_name = value.__class__.__name__
            fmt.scalar = True

        elif isinstance(value, list):
            # List of data class objects, use the default if empty
            if len(value):
                ref_obj = value[0]
            else:
                assert hasattr(value, "default"), (
                    f"Failed to find type of {key}. Lists that can be empty "
                    "should be initialized as an ObjectList with a default "
                    "object type."
                )
                ref_obj = value.default

            assert isinstance(ref_obj, DataBase), (
                f"Cannot store a list of {type(ref_obj)} in key {key}."
            )
            fmt.dtype = self.get_object_dtype(ref_obj)
            fmt.class_name = ref_obj.__class__.__name__

        elif isinstance(value, np.ndarray) and value.dtype != object:
            # Array of scalars (e.g. association table)
            assert value.ndim < 3, (
                f"Cannot store arrays with more than two dimensions ({key})."
            )
            fmt.dtype = value.dtype
            if value.ndim == 2:
                fmt.width = value.shape[1]

        else:
            raise TypeError(
                f"Cannot store output of type {type(value)} in key {key}."
            )

        return fmt

    @staticmethod
    def get_object_dtype(obj):
        """Loop over the attributes of a data class to figure out what to store.

        Parameters
        ----------
        obj : DataBase
            Instance of a data class used to identify attribute types

        Returns
        -------
        list
            List of (key, dtype) or (key, dtype, length) tuples
        """
        object_dtype = []
        for key, val in obj.as_dict().items():
            if isinstance(val, str):
                object_dtype.append((key, h5py.string_dtype()))

            elif np.isscalar(val):
                # Force bool onto shorts
                dtype = type(val) if not isinstance(val, bool) else np.uint8
                object_dtype.append((key, dtype))

            elif key in obj.fixed_length_attrs:
                object_dtype.append((key, val.dtype, len(val)))

            elif isinstance(val, np.ndarray):
                # Variable-length arrays are flattened
                object_dtype.append((key, h5py.vlen_dtype(val.dtype)))

            else:
                raise ValueError(
                    f"Attribute {key} of {obj} has an unrecognized "
                    f"type: {type(val)}"
                )

        return object_dtype

    def initialize_datasets(self, out_file):
        """Create empty extensible datasets for all the products.

        Parameters
        ----------
        out_file : h5py.File
            HDF5 file instance
        """
        self.event_dtype = []
        ref_dtype = h5py.special_dtype(ref=h5py.RegionReference)
        for key, fmt in self.type_dict.items():
            self.event_dtype.append((key, ref_dtype))

            shape = (0, fmt.width) if fmt.width else (0,)
            maxshape = (None, fmt.width) if fmt.width else (None,)
            out_file.create_dataset(key, shape, maxshape=maxshape, dtype=fmt.dtype)

            if fmt.is_object:
                out_file[key].attrs["class_name"] = fmt.class_name
            out_file[key].attrs["scalar"] = fmt.scalar

        out_file.create_dataset(
            "events", (0,), maxshape=(None,), dtype=self.event_dtype
        )

    def __call__(self, data, cfg=None):
        """Append the HDF5 file with the content of one or more entries.

        Parameters
        ----------
        data : Union[dict, List[dict]]
            Dictionary of data products for one entry, or list of them
        cfg : dict, optional
            Complete configuration, stored alongside the data
        """
        entries = data if isinstance(data, list) else [data]
        if not self.ready:
            if self.append and os.path.isfile(self.file_name):
                self.load()
            else:
                self.create(entries[0], cfg)

        with h5py.File(self.file_name, "a") as out_file:
            for entry in entries:
                self.append_entry(out_file, entry)

    def append_entry(self, out_file, data):
        """Stores one entry.

        Parameters
        ----------
        out_file : h5py.File
            HDF5 file instance
        data : dict
            Dictionary of data products for one entry
        """
        event = np.empty(1, self.event_dtype)
        for key in self.keys:
            fmt = self.type_dict[key]
            array = [data[key]] if fmt.scalar else data[key]
            if fmt.is_object:
                self.store_objects(out_file, event, key, array, fmt.dtype)
            else:
                self.store(out_file, event, key, array)

        event_id = len(out_file["events"])
        event_ds = out_file["events"]
        event_ds.resize(event_id + 1, axis=0)
        event_ds[event_id] = event

    @staticmethod
    def store(out_file, event, key, array):
        """Stores an array in the file and its mapping in the event dataset.

        Parameters
        ----------
        out_file : h5py.File
            HDF5 file instance
        event : np.ndarray
            Event row which holds one region reference per product
        key: str
            Name of the dataset in the file
        array : np.ndarray
            Array to be stored
        """
        dataset = out_file[key]
        current_id = len(dataset)
        dataset.resize(current_id + len(array), axis=0)
        dataset[current_id:current_id + len(array)] = array

        region_ref = dataset.regionref[current_id:current_id + len(array)]
        event[key] = region_ref

    @staticmethod
    def store_objects(out_file, event, key, array, obj_dtype):
        """Stores a list of data class objects in the file and its mapping in
        the event dataset.

        Parameters
        ----------
        out_file : h5py.File
            HDF5 file instance
        event : np.ndarray
            Event row which holds one region reference per product
        key: str
            Name of the dataset in the file
        array : List[DataBase]
            List of objects to be stored
        obj_dtype : list
            List of (key, dtype) pairs which specify what's to store
        """
        objects = np.empty(len(array), obj_dtype)
        for i, obj in enumerate(array):
            values = []
            for value in obj.as_dict().values():
                if isinstance(value, np.ndarray) and value.ndim > 1:
                    value = value.ravel()
                values.append(value)
            objects[i] = tuple(values)

        dataset = out_file[key]
        current_id = len(dataset)
        dataset.resize(current_id + len(array), axis=0)
        dataset[current_id:current_id + len(array)] = objects

        region_ref = dataset.regionref[current_id:current_id + len(array)]
        event[key] = region_ref
