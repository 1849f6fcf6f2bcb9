"""Analysis scripts which use the Monte Carlo truth."""

from .g4 import *
