"""Data structures consumed and produced by the analysis scripts.

- :class:`RunInfo`: run, subrun and event numbers
- :class:`PFParticle`, :class:`PFParticleMetadata`: Pandora hierarchy
- :class:`Track`, :class:`Shower`: reconstructed objects tied to particles
- :class:`OpticalPhoton`: simulated photons reaching the PMTs
- :class:`MCParticle`, :class:`Neutrino`: Monte Carlo truth
- :class:`ObjectList`: typed list, used to store empty collections
"""

from .list import ObjectList
from .mc import MCParticle, Neutrino
from .optical import OpticalPhoton
from .pfparticle import PFParticle, PFParticleMetadata
from .reco import Shower, Track
from .run_info import RunInfo
