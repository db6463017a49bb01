"""Residue identifiers, entity monomers and the narrow capability interfaces.

The aligner and the row builder only see these protocols, so they can run
against Bio.PDB-backed implementations or small in-memory fakes alike.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

Coord = Tuple[float, float, float]


@dataclass(frozen=True)
class ResidueId:
    chain_id: str
    seq_num: int
    insertion_code: str = ""

    @classmethod
    def from_biopython(cls, chain_id: str, residue_id: Tuple[str, int, str]) -> "ResidueId":
        _, seq_num, icode = residue_id
        return cls(chain_id=chain_id, seq_num=int(seq_num), insertion_code=(icode or "").strip())

    def __str__(self) -> str:
        return f"{self.chain_id}:{self.seq_num}{self.insertion_code}"


@dataclass(frozen=True)
class EntityMonomer:
    code: str
    is_gap: bool = False

    def __str__(self) -> str:
        return self.code


class CoordinateProvider(Protocol):
    def residue_ids(self) -> List[ResidueId]:
        ...

    def atom_coord(self, residue_id: ResidueId, atom_name: str) -> Optional[Coord]:
        ...


class SecondaryStructureProvider(Protocol):
    def code(self, residue_id: ResidueId) -> str:
        """Single-character class; raises KeyError for unassigned residues."""
        ...


class HBondLookup(Protocol):
    def bond(self, donor: ResidueId, acceptor: ResidueId) -> Optional[float]:
        ...
