"""Module which stores the larana release version."""

__version__ = "0.2.0"
