"""Analysis scripts.

Analysis scripts consume the data products of one entry and store tables
(trees) of derived quantities to CSV files. They may also return products
which are added to the data dictionary.

- `pandora`: consolidation of the Pandora particle flow output
- `optical`: PMT response to simulated optical photons
- `truth`: summary of the Geant4 truth of primary particles

To add a script, subclass :class:`larana.ana.base.AnaBase`, give it a `name`,
list it in the `__all__` of its module and define its `process` method.
"""

from .manager import AnaManager
