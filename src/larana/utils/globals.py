"""Physical constants and shared sentinel values."""

import numpy as np

# Parent ID given to top-level (primary) PFParticles
PRIMARY_PFP_ID = -1

# Mother ID given to primary Geant4 particles
PRIMARY_MOTHER_ID = 0

# Pandora metadata properties flagging the target of the reconstruction
NEUTRINO_PROPERTY = "IsNeutrino"
TEST_BEAM_PROPERTY = "IsTestBeam"

# Reduced Planck constant times the speed of light in MeV nm
HBARC = 1.973269804e-4

# Photon energy (MeV) to wavelength (nm) conversion factor
TWO_PI_HBARC = 2 * np.pi * HBARC

# Value given to quantities which could not be computed
INVAL = -np.inf

# Neutrino PDG codes
NU_PDG_CODES = (12, -12, 14, -14, 16, -16)
