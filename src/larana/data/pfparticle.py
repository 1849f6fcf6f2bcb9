"""Module with data classes which represent the Pandora particle flow output.

A :class:`PFParticle` is a node of the reconstructed particle hierarchy. Each
one is associated by the Pandora producer with zero or more
:class:`PFParticleMetadata` objects which hold a map of named scores
(e.g. `IsNeutrino`, `NuScore`, `TrackScore`).
"""

from dataclasses import dataclass

import numpy as np

from larana.utils.globals import PRIMARY_PFP_ID

from .base import DataBase

__all__ = ["PFParticle", "PFParticleMetadata"]


@dataclass(eq=False)
class PFParticle(DataBase):
    """Reconstructed particle flow particle.

    Attributes
    ----------
    id : int
        Identifier of the particle in the hierarchy (unique in an event)
    pdg_code : int
        Particle hypothesis, as a PDG code (11 for shower-like, 13 for
        track-like, 12/14 for neutrinos)
    parent_id : int
        Identifier of the parent particle, -1 if the particle is primary
    daughter_ids : np.ndarray
        (N) Identifiers of the daughter particles
    """

    id: int = -1
    pdg_code: int = 0
    parent_id: int = PRIMARY_PFP_ID
    daughter_ids: np.ndarray = None

    # Variable-length attributes
    _var_length_attrs = (("daughter_ids", np.int64),)

    @property
    def is_primary(self):
        """Whether this particle sits at the top of the hierarchy.

        Returns
        -------
        bool
            `True` if the particle has no parent
        """
        return self.parent_id == PRIMARY_PFP_ID

    @property
    def num_daughters(self):
        """Number of daughter particles.

        Returns
        -------
        int
            Number of daughters
        """
        return len(self.daughter_ids)


@dataclass(eq=False)
class PFParticleMetadata(DataBase):
    """Properties map attached to a particle by the Pandora producer.

    The property names are stored as a single comma-separated string so that
    the object can be stored as one row of a compound HDF5 dataset.

    Attributes
    ----------
    id : int
        Index of the metadata object in its collection
    property_names : str
        Comma-separated list of property names
    property_values : np.ndarray
        (N) Value of each property, in the order of `property_names`
    """

    id: int = -1
    property_names: str = ""
    property_values: np.ndarray = None

    # Variable-length attributes
    _var_length_attrs = (("property_values", np.float64),)

    # String attributes
    _str_attrs = ("property_names",)

    def __post_init__(self):
        """Check that there is one value per property name."""
        super().__post_init__()
        assert len(self.names) == len(self.property_values), (
            f"Got {len(self.names)} property names but "
            f"{len(self.property_values)} property values."
        )

    @classmethod
    def from_properties(cls, properties, id=-1):
        """Builds a metadata object from a dictionary of properties.

        Parameters
        ----------
        properties : Dict[str, float]
            Map of property names onto their values
        id : int, default -1
            Index of the metadata object in its collection

        Returns
        -------
        PFParticleMetadata
            Metadata object
        """
        for name in properties:
            assert "," not in name, (
                f"Property names cannot contain commas, got `{name}`."
            )

        return cls(
            id=id,
            property_names=",".join(properties.keys()),
            property_values=np.array(list(properties.values()), dtype=np.float64),
        )

    @property
    def names(self):
        """List of property names.

        Returns
        -------
        List[str]
            Property names
        """
        if not self.property_names:
            return []

        return self.property_names.split(",")

    @property
    def properties(self):
        """Map of property names onto their values, ordered by name.

        Returns
        -------
        Dict[str, float]
            Properties map
        """
        pairs = zip(self.names, self.property_values)
        return {k: float(v) for k, v in sorted(pairs)}

    def has_property(self, name):
        """Checks whether a property is present in the map, whatever its value.

        Parameters
        ----------
        name : str
            Name of the property

        Returns
        -------
        bool
            `True` if the property is present
        """
        return name in self.names
