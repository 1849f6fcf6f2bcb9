"""Analysis script which summarizes the Geant4 truth of primary particles.

For each primary particle, it records how the particle starts, how it leaves
the TPC and how it enters the downstream MINOS near detector, which is used
as a muon spectrometer behind the TPC.
"""

import numpy as np

from larana.ana.base import AnaBase
from larana.utils.assn import product_key
from larana.utils.globals import INVAL
from larana.utils.truth import angle_between, first_point_beyond, last_point_inside

__all__ = ["G4TruthAna"]


class G4TruthAna(AnaBase):
    """Stores one row per primary Geant4 particle in the `particles` table.

    Quantities which cannot be computed (e.g. the MINOS entry point of a
    particle which never reaches it) are stored as -inf.

    Typical configuration should look like:

    .. code-block:: yaml

        ana:
          g4_truth:
            g4_label: largeant
            generator_label: generator
            pdg_codes: [13, -13]
            minos_z: 140.
            minos_offset: [117.4, 19.3, -148.1]
    """

    # Name of the analysis script (as specified in the configuration)
    name = "g4_truth"

    # Default TPC boundaries in cm
    _tpc_bounds = ((0.0, 47.0), (-20.0, 20.0), (0.0, 90.0))

    def __init__(self, g4_label, generator_label=None, pdg_codes=None,
                 tpc_bounds=_tpc_bounds, minos_z=None, minos_offset=(0, 0, 0),
                 **kwargs):
        """Initialize the analysis script.

        Parameters
        ----------
        g4_label : str
            Label of the Geant4 producer (particle list)
        generator_label : str, optional
            Label of the neutrino generator producer
        pdg_codes : List[int], optional
            PDG codes of the particles to store. If not specified, store all
        tpc_bounds : np.ndarray, default ((0, 47), (-20, 20), (0, 90))
            (3, 2) TPC boundaries along each axis in cm
        minos_z : float, optional
            Position of the MINOS front face along z in cm. If not specified,
            the MINOS entry quantities are not computed
        minos_offset : np.ndarray, default (0, 0, 0)
            (3) Offset added to positions to express them in MINOS coordinates
        **kwargs : dict, optional
            Additional arguments to pass to :class:`AnaBase`
        """
        super().__init__(**kwargs)

        self.pdg_codes = set(pdg_codes) if pdg_codes is not None else None
        self.tpc_bounds = np.asarray(tpc_bounds, dtype=np.float64)
        assert self.tpc_bounds.shape == (3, 2), (
            "The TPC boundaries must be given as three (lower, upper) pairs."
        )
        self.minos_z = minos_z
        self.minos_offset = np.asarray(minos_offset, dtype=np.float64)
        assert self.minos_offset.shape == (3,), (
            "The MINOS offset must be a three-vector."
        )

        self.particle_key = product_key(g4_label, "particles")
        self.neutrino_key = None
        keys = {self.particle_key: True}
        if generator_label is not None:
            self.neutrino_key = product_key(generator_label, "neutrinos")
            keys[self.neutrino_key] = False

        self.update_keys(keys)

        self.initialize_writer("particles")

    def process(self, data):
        """Store the truth information of the primary particles in one entry.

        Parameters
        ----------
        data : dict
            Dictionary of data products
        """
        nu_dict = self.get_neutrino_dict(data.get(self.neutrino_key, None))
        for particle in data[self.particle_key]:
            if not particle.is_primary:
                continue
            if (self.pdg_codes is not None and
                particle.pdg_code not in self.pdg_codes):
                continue

            row = {"track_id": particle.track_id,
                   "pdg_code": particle.pdg_code, "mass": particle.mass}
            row.update(self.get_particle_dict(particle))
            row.update(nu_dict)

            self.append("particles", **row)

    def get_particle_dict(self, particle):
        """Computes the trajectory summary of one particle.

        Parameters
        ----------
        particle : MCParticle
            Geant4 particle

        Returns
        -------
        dict
            Initial, TPC exit and MINOS entry quantities
        """
        init, tpc_exit, enter = (np.full(7, INVAL) for _ in range(3))
        if particle.num_points:
            init = self.get_point(particle, 0)
            tpc_idx = last_point_inside(particle.positions, self.tpc_bounds)
            if tpc_idx > -1:
                tpc_exit = self.get_point(particle, tpc_idx)
            if self.minos_z is not None:
                minos_idx = first_point_beyond(particle.positions, self.minos_z)
                if minos_idx > -1:
                    enter = self.get_point(particle, minos_idx)
                    enter[:3] += self.minos_offset

        energy_lost, angle = INVAL, INVAL
        if np.isfinite(tpc_exit[-1]):
            energy_lost = init[-1] - tpc_exit[-1]
            angle = angle_between(init[3:6], tpc_exit[3:6])

        row = {}
        for prefix, values in (("init", init), ("tpc_exit", tpc_exit)):
            row.update(self.expand(prefix, values))
        row["energy_lost"] = energy_lost
        row["deflection_angle"] = angle
        row.update(self.expand("minos_enter", enter))
        for i, axis in enumerate("xyz"):
            row[f"offset_{axis}"] = self.minos_offset[i]

        return row

    @staticmethod
    def get_point(particle, idx):
        """Fetches the position, momentum and energy at a trajectory point.

        Parameters
        ----------
        particle : MCParticle
            Geant4 particle
        idx : int
            Index of the trajectory point

        Returns
        -------
        np.ndarray
            (7) Position, momentum and energy
        """
        return np.concatenate([
            particle.positions[idx, :3], particle.momenta[idx]
        ]).astype(np.float64)

    @staticmethod
    def expand(prefix, values):
        """Names the position, momentum and energy components.

        Parameters
        ----------
        prefix : str
            Prefix of each column name
        values : np.ndarray
            (7) Position, momentum and energy

        Returns
        -------
        dict
            Dictionary of named components
        """
        names = ("x", "y", "z", "px", "py", "pz", "energy")
        return {f"{prefix}_{n}": v for n, v in zip(names, values)}

    def get_neutrino_dict(self, neutrinos):
        """Summarizes the first generator neutrino of the event.

        Parameters
        ----------
        neutrinos : List[Neutrino], optional
            Generator neutrinos

        Returns
        -------
        dict
            Neutrino PDG code, vertex, momentum and energy
        """
        values = np.full(7, INVAL)
        pdg_code = -1
        if neutrinos:
            nu = neutrinos[0]
            pdg_code = nu.pdg_code
            values = np.concatenate(
                [nu.position, nu.momentum, [nu.energy_init]]
            ).astype(np.float64)

        return {"neutrino_pdg_code": pdg_code,
                **self.expand("neutrino", values)}
