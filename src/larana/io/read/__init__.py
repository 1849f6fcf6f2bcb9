"""Readers which load event data products from files."""

from .hdf5 import HDF5Reader
