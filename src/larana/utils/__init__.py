"""Utilities shared by the readers, writers and analysis scripts.

- `logger`: package-level logger configuration
- `factory`: instantiate classes from configuration blocks
- `config`: YAML configuration loading (includes and overrides)
- `stopwatch`: wall/CPU time bookkeeping
- `errors`: exceptions raised on inconsistent event data
- `pandora`: navigation of the Pandora PFParticle hierarchy
- `optical`: photon wavelength and detection sampling
- `truth`: Geant4 trajectory helpers
"""
