"""Writers which store event data products and analysis tables to files."""

from .csv import CSVWriter
from .hdf5 import HDF5Writer
