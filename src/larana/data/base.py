"""Module with a parent class of all data structures."""

from dataclasses import asdict, dataclass

import numpy as np


@dataclass(eq=False)
class DataBase:
    """Base class of all data structures.

    Defines basic methods shared by all data structures: default array
    values, element-wise comparison and conversion to (scalar) dictionaries.
    """

    # Fixed-length attributes as (key, size) or (key, (size, dtype)) pairs
    _fixed_length_attrs = ()

    # Variable-length attributes as (key, dtype) or (key, (width, dtype)) pairs
    _var_length_attrs = ()

    # Attributes specifying coordinates
    _pos_attrs = ()

    # Attributes specifying vector components
    _vec_attrs = ()

    # String attributes
    _str_attrs = ()

    # Boolean attributes
    _bool_attrs = ()

    # Attributes that must never be stored to file
    _skip_attrs = ()

    # Euclidean axis labels
    _axes = ("x", "y", "z")

    def __post_init__(self):
        """Immediately called after building the class attributes.

        Gives independent default values to array attributes and casts back
        the binary strings and 8-bit booleans one gets from HDF5 files.
        """
        for attr, dtype in self._var_length_attrs:
            value = getattr(self, attr)
            if isinstance(dtype, tuple):
                # Two-dimensional arrays are stored flattened in HDF5 files
                width, dtype = dtype
                if value is None:
                    setattr(self, attr, np.empty((0, width), dtype=dtype))
                elif np.ndim(value) == 1:
                    setattr(self, attr, np.asarray(value).reshape(-1, width))
            elif value is None:
                setattr(self, attr, np.empty(0, dtype=dtype))

        for attr, size in self._fixed_length_attrs:
            if getattr(self, attr) is None:
                dtype = np.float32
                if isinstance(size, tuple):
                    size, dtype = size
                setattr(self, attr, np.full(size, -np.inf, dtype=dtype))

        for attr in self._str_attrs:
            if isinstance(getattr(self, attr), bytes):
                setattr(self, attr, getattr(self, attr).decode())

        for attr in self._bool_attrs:
            if isinstance(getattr(self, attr), (np.uint8, np.bool_)):
                setattr(self, attr, bool(getattr(self, attr)))

    def __eq__(self, other):
        """Checks that all attributes of two class instances are the same.

        Parameters
        ----------
        other : obj
            Other instance of the same object class

        Returns
        -------
        bool
            `True` if all attributes of both objects are identical
        """
        if self.__class__ != other.__class__:
            return False

        for key, value in self.__dict__.items():
            other_value = getattr(other, key)
            if np.isscalar(value):
                if other_value != value:
                    return False
            elif (value.shape != other_value.shape or
                  (value != other_value).any()):
                return False

        return True

    @property
    def fixed_length_attrs(self):
        """Dictionary which maps fixed-length attributes onto their length."""
        return dict(self._fixed_length_attrs)

    @property
    def var_length_attrs(self):
        """Dictionary which maps variable-length attributes onto their type."""
        return dict(self._var_length_attrs)

    def as_dict(self):
        """Returns the data class as dictionary of (key, value) pairs.

        Returns
        -------
        dict
            Dictionary of attribute names and their values
        """
        return {
            k: v for k, v in asdict(self).items() if k not in self._skip_attrs
        }

    def scalar_dict(self, attrs=None, lengths=None):
        """Returns the data class attributes as a dictionary of scalars.

        This is what gets stored in a CSV table, which expects a single scalar
        per column.

        Parameters
        ----------
        attrs : List[str], optional
            List of attribute names to include in the dictionary. If not
            specified, all the keys are included.
        lengths : Dict[str, int], optional
            Specifies the length of variable-length attributes

        Returns
        -------
        dict
            Dictionary of scalar values
        """
        lengths = lengths or {}
        scalars, found = {}, []
        for attr, value in self.as_dict().items():
            if attrs is not None and attr not in attrs:
                continue
            found.append(attr)

            if np.isscalar(value):
                scalars[attr] = value

            elif attr in self._pos_attrs + self._vec_attrs:
                for i, v in enumerate(value):
                    scalars[f"{attr}_{self._axes[i]}"] = v

            elif attr in self.fixed_length_attrs:
                for i, v in enumerate(value):
                    scalars[f"{attr}_{i}"] = v

            elif attr in self.var_length_attrs:
                if attr not in lengths:
                    # Arrays of indeterminate length cannot become columns
                    assert attrs is None, (
                        f"Cannot cast {attr} to scalars. To cast a variable-"
                        "length array, must provide a fixed length."
                    )
                    continue

                for i in range(lengths[attr]):
                    scalars[f"{attr}_{i}"] = value[i] if i < len(value) else None

            else:
                raise ValueError(
                    f"Cannot expand the `{attr}` attribute of "
                    f"`{self.__class__.__name__}` to scalar values."
                )

        if attrs is not None and len(attrs) != len(found):
            missing = sorted(set(attrs).difference(found))
            raise AttributeError(
                f"Attribute(s) {missing} do(es) not appear in "
                f"{self.__class__.__name__}."
            )

        return scalars


@dataclass(eq=False)
class PosDataBase(DataBase):
    """Base class of for data structures with positional attributes.

    Attributes
    ----------
    units : str
        Units in which the position attributes are expressed
    """

    units = "cm"

    # String attributes
    _str_attrs = ("units",)

    def __post_init__(self):
        """Makes sure the units are not binary and that they are recognized."""
        super().__post_init__()
        if isinstance(self.units, bytes):
            self.units = self.units.decode()

        assert self.units in ("cm", "mm"), "Units can only be `cm` or `mm`."
