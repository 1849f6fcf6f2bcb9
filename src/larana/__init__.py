"""Analysis framework for liquid argon time projection chamber event data.

`larana` reads event data products (reconstructed particle hierarchies,
simulated optical photons, Monte Carlo truth) from HDF5 event files, runs
configurable analysis scripts over each entry and stores their output tables
to CSV files.

- :mod:`larana.data`: data structures
- :mod:`larana.io`: readers and writers
- :mod:`larana.ana`: analysis scripts
- :mod:`larana.driver`: configuration-driven processing loop
"""

from .driver import Driver
from .version import __version__
