"""
Backbone hydrogen bonds scored with the DSSP electrostatic model.

    E = q1 * q2 * f * (1/r_ON + 1/r_CH - 1/r_OH - 1/r_CN)

with q1 = 0.42e, q2 = 0.20e, f = 332, giving energies in kcal/mol. The donor
is the N-H of one residue, the acceptor the C=O of another. The amide
hydrogen is not taken from the file: it is placed 1 A from N along the
C=O direction of the preceding residue, as DSSP does.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .chain_extractor import ChainStructure
from .config import HBondConfig
from .residues import ResidueId

DSSP_COUPLING = 0.084 * 332.0
MINIMAL_DISTANCE = 0.5
BACKBONE_ATOMS = ("N", "CA", "C", "O")


def dssp_energies(n, h, c, o, min_energy: float = -9.9) -> np.ndarray:
    """Energies for donor (N, H) / acceptor (C, O) coordinate rows.

    Missing atoms (NaN) give NaN energies, which never pass a cutoff.
    """
    n, h, c, o = (np.atleast_2d(np.asarray(x, dtype=float)) for x in (n, h, c, o))
    r_on = np.linalg.norm(o - n, axis=-1)
    r_ch = np.linalg.norm(c - h, axis=-1)
    r_oh = np.linalg.norm(o - h, axis=-1)
    r_cn = np.linalg.norm(c - n, axis=-1)
    with np.errstate(divide="ignore", invalid="ignore"):
        energy = DSSP_COUPLING * (1.0 / r_on + 1.0 / r_ch - 1.0 / r_oh - 1.0 / r_cn)
        too_close = np.minimum.reduce([r_on, r_ch, r_oh, r_cn]) < MINIMAL_DISTANCE
    return np.where(too_close, min_energy, np.maximum(energy, min_energy))


def amide_hydrogens(n: np.ndarray, c: np.ndarray, o: np.ndarray, peptide_bond_length: float = 2.5) -> np.ndarray:
    h = n.copy()
    if len(n) < 2:
        return h
    co = c[:-1] - o[:-1]
    with np.errstate(divide="ignore", invalid="ignore"):
        shift = co / np.linalg.norm(co, axis=1)[:, None]
        bonded = np.linalg.norm(n[1:] - c[:-1], axis=1) < peptide_bond_length
    use = bonded & np.isfinite(shift).all(axis=1)
    h[1:][use] = n[1:][use] + shift[use]
    return h


class BackboneHBondMap:
    """Directional bond lookup keyed by ``(donor, acceptor)`` residue ids."""

    def __init__(self, bonds: Optional[Dict[Tuple[ResidueId, ResidueId], float]] = None):
        self._bonds = dict(bonds or {})

    def __len__(self) -> int:
        return len(self._bonds)

    def bond(self, donor: ResidueId, acceptor: ResidueId) -> Optional[float]:
        return self._bonds.get((donor, acceptor))

    @classmethod
    def from_backbone(
        cls,
        residue_ids: Sequence[ResidueId],
        residue_names: Sequence[str],
        backbone: Dict[str, np.ndarray],
        config: Optional[HBondConfig] = None,
    ) -> "BackboneHBondMap":
        cfg = config or HBondConfig()
        count = len(residue_ids)
        if count == 0:
            return cls()
        n, ca, c, o = (np.asarray(backbone[name], dtype=float).reshape(count, 3) for name in BACKBONE_ATOMS)
        h = amide_hydrogens(n, c, o, cfg.peptide_bond_length)

        with np.errstate(invalid="ignore"):
            candidates = np.linalg.norm(ca[:, None, :] - ca[None, :, :], axis=-1) < cfg.ca_distance
        np.fill_diagonal(candidates, False)
        # a residue never donates to the carbonyl directly before it
        idx = np.arange(count)
        candidates[idx[1:], idx[:-1]] = False
        is_proline = np.array([name.upper() == "PRO" for name in residue_names], dtype=bool)
        candidates[is_proline, :] = False

        donors, acceptors = np.nonzero(candidates)
        energies = dssp_energies(n[donors], h[donors], c[acceptors], o[acceptors], cfg.min_energy)
        with np.errstate(invalid="ignore"):
            keep = energies < cfg.energy_cutoff
        bonds = {
            (residue_ids[d], residue_ids[a]): float(e)
            for d, a, e in zip(donors[keep], acceptors[keep], energies[keep])
        }
        return cls(bonds)

    @classmethod
    def from_chain(cls, chain: ChainStructure, config: Optional[HBondConfig] = None) -> "BackboneHBondMap":
        residue_ids: List[ResidueId] = chain.residue_ids()
        backbone: Dict[str, np.ndarray] = {}
        for atom_name in BACKBONE_ATOMS:
            rows = []
            for rid in residue_ids:
                coord = chain.atom_coord(rid, atom_name)
                rows.append(coord if coord is not None else (np.nan, np.nan, np.nan))
            backbone[atom_name] = np.array(rows, dtype=float).reshape(len(residue_ids), 3)
        names = [chain.residue_name(rid) for rid in residue_ids]
        return cls.from_backbone(residue_ids, names, backbone, config)
