"""Command line entry points.

- `larana-run` (:mod:`larana.bin.cli`): run the analysis driver from a
  YAML configuration file
- `larana-count` (:mod:`larana.bin.count_entries`): count the entries in a
  set of HDF5 event files
"""
