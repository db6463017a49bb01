"""Lock-step alignment of a chain's designed sequence against its observed residues.

Gap entries of the entity are the only places where coordinates may be
missing; everywhere else the next observed residue is taken in order. The
observed list is never reordered or searched.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from .errors import ResidueNotDefined
from .residues import EntityMonomer, ResidueId


@dataclass(frozen=True)
class AlignedResidue:
    entity_index: int
    monomer: EntityMonomer
    residue_id: Optional[ResidueId] = None

    @property
    def is_gap(self) -> bool:
        return self.residue_id is None


def align_residues(entity: Sequence[EntityMonomer], observed: Sequence[ResidueId]) -> Iterator[AlignedResidue]:
    """Yield one ``AlignedResidue`` per entity entry, in entity order.

    Raises ``ResidueNotDefined`` at the first concrete entry with no observed
    residue left; entries before it have already been yielded.
    """
    cursor = 0
    for index, monomer in enumerate(entity):
        if monomer.is_gap:
            yield AlignedResidue(index, monomer)
            continue
        if cursor >= len(observed):
            raise ResidueNotDefined(index)
        yield AlignedResidue(index, monomer, observed[cursor])
        cursor += 1


def count_unconsumed(entity: Sequence[EntityMonomer], observed: Sequence[ResidueId]) -> int:
    """Observed residues left over once every concrete entity entry is bound."""
    concrete = sum(1 for monomer in entity if not monomer.is_gap)
    return max(0, len(observed) - concrete)
