"""Input/output tools for event data products.

- `read`: readers which turn file entries into dictionaries of data products
- `write`: writers for data dictionaries (HDF5) and analysis tables (CSV)
"""

from .factories import reader_factory, writer_factory
from .read import HDF5Reader
from .write import CSVWriter, HDF5Writer
