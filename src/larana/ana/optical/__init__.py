"""Analysis scripts which use the simulated optical photons."""

from .pmt_response import *
