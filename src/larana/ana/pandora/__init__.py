"""Analysis scripts which use the Pandora particle flow output."""

from .consolidated import *
