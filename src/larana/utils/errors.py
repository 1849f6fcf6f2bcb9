"""Exceptions raised when event data products are inconsistent."""


class HierarchyError(ValueError):
    """Raised when a particle hierarchy or one of its associations is invalid.

    This covers repeated particle IDs, daughters which do not exist in the
    collection, unexpected numbers of reconstructed neutrinos and particles
    associated with an ambiguous set of tracks and showers.
    """


class MissingProductError(KeyError):
    """Raised when an association refers to a data product which is absent."""
