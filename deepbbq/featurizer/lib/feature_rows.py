"""
Assembly and serialisation of per-residue feature rows.

A data row carries the anchor (CA) coordinate of the residue, its DSSP code
and every backbone hydrogen bond it takes part in. Bonds are looked up against
all observed residues of the chain in both directions, so a pair that bonds
both ways shows up as two separate edges on the same row. Partners are
referenced by their entity row index, which is also the first column of the
partner's own row.

Line layout (format version 2)::

    <idx:4> <res> <chain:seq> : <ss> <x:8.3> <y:8.3> <z:8.3> [<partner:4> <energy:.3>]...

Format version 1 has no ``<ss>`` field. Gap rows are ``' -   <res>'``.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .aligner import AlignedResidue
from .errors import SecondaryStructureNotDefined
from .residues import (
    Coord,
    CoordinateProvider,
    EntityMonomer,
    HBondLookup,
    ResidueId,
    SecondaryStructureProvider,
)

LOG = logging.getLogger("deepbbq.rows")

FORMAT_VERSION = 2


class HBondDirection(enum.Enum):
    DONOR = "donor"
    ACCEPTOR = "acceptor"


@dataclass(frozen=True)
class HBondEdge:
    partner_index: int
    energy: float
    direction: HBondDirection


@dataclass
class FeatureRow:
    entity_index: int
    monomer: EntityMonomer
    residue_id: Optional[ResidueId] = None
    ss_code: Optional[str] = None
    ca: Optional[Coord] = None
    hbonds: List[HBondEdge] = field(default_factory=list)

    @property
    def is_gap(self) -> bool:
        return self.residue_id is None


class FeatureRowBuilder:
    def __init__(
        self,
        coords: CoordinateProvider,
        ss: Optional[SecondaryStructureProvider],
        hbonds: HBondLookup,
        entity_index_of: Mapping[ResidueId, int],
        anchor_atom: str = "CA",
        emit_secondary_structure: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        if emit_secondary_structure and ss is None:
            raise ValueError("A secondary-structure provider is required when emitting secondary structure.")
        self.coords = coords
        self.ss = ss
        self.hbonds = hbonds
        self.entity_index_of = entity_index_of
        self.anchor_atom = anchor_atom
        self.emit_secondary_structure = emit_secondary_structure
        self.logger = logger or LOG
        self._observed = coords.residue_ids()

    def build(self, aligned: AlignedResidue) -> Optional[FeatureRow]:
        """Row for one aligned residue, or None when its anchor atom is missing."""
        if aligned.residue_id is None:
            return FeatureRow(aligned.entity_index, aligned.monomer)

        rid = aligned.residue_id
        ca = self.coords.atom_coord(rid, self.anchor_atom)
        if ca is None:
            self.logger.warning("%s atom missing for residue: %s", self.anchor_atom, rid)
            return None

        ss_code = None
        if self.emit_secondary_structure:
            try:
                ss_code = self.ss.code(rid)  # type: ignore[union-attr]
            except KeyError:
                raise SecondaryStructureNotDefined(rid) from None

        return FeatureRow(
            entity_index=aligned.entity_index,
            monomer=aligned.monomer,
            residue_id=rid,
            ss_code=ss_code,
            ca=ca,
            hbonds=self._edges(rid),
        )

    def _edges(self, rid: ResidueId) -> List[HBondEdge]:
        edges: List[HBondEdge] = []
        for partner in self._observed:
            partner_index = self.entity_index_of.get(partner)
            if partner_index is None:
                # observed residue that never got bound to an entity row
                continue
            energy = self.hbonds.bond(rid, partner)
            if energy is not None:
                edges.append(HBondEdge(partner_index, energy, HBondDirection.DONOR))
            energy = self.hbonds.bond(partner, rid)
            if energy is not None:
                edges.append(HBondEdge(partner_index, energy, HBondDirection.ACCEPTOR))
        return edges


def format_row(row: FeatureRow, format_version: int = FORMAT_VERSION) -> str:
    if row.is_gap:
        return f"{'-':^4} {row.monomer.code}"
    x, y, z = row.ca  # type: ignore[misc]
    head = f"{row.entity_index:4} {row.monomer.code} {row.residue_id} :"
    if format_version >= 2:
        head = f"{head} {row.ss_code}"
    line = f"{head} {x:8.3f} {y:8.3f} {z:8.3f}"
    return line + "".join(f" {edge.partner_index:4} {edge.energy:.3f}" for edge in row.hbonds)
