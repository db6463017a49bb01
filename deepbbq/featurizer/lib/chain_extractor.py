from __future__ import annotations

from typing import Dict, List, Optional

from Bio.PDB.Polypeptide import is_aa
from Bio.PDB.Residue import Residue
from Bio.PDB.Structure import Structure

from .errors import NoSuchChain
from .residues import Coord, ResidueId


def _is_polymer(residue: Residue) -> bool:
    hetflag = residue.id[0]
    if hetflag == "W":
        return False
    if hetflag == " ":
        return True
    # HETATM records inside the chain: keep modified amino acids (MSE, SEP, ...)
    return is_aa(residue, standard=False)


def polymer_residues(structure: Structure, chain_id: str) -> List[Residue]:
    """Polymer residues of ``chain_id`` in the first model, in file order."""
    model = next(iter(structure), None)
    if model is None or chain_id not in model:
        return []
    return [res for res in model[chain_id] if _is_polymer(res)]


class ChainStructure:
    """Coordinates of one chain with ligands and solvent removed."""

    def __init__(self, chain_id: str, residues: List[Residue]):
        self.chain_id = chain_id
        self._residues: Dict[ResidueId, Residue] = {}
        for res in residues:
            self._residues.setdefault(ResidueId.from_biopython(chain_id, res.id), res)

    def __len__(self) -> int:
        return len(self._residues)

    @property
    def atom_count(self) -> int:
        return sum(len(res) for res in self._residues.values())

    def residue_ids(self) -> List[ResidueId]:
        return list(self._residues)

    def residue_name(self, residue_id: ResidueId) -> str:
        return self._residues[residue_id].get_resname()

    def atom_coord(self, residue_id: ResidueId, atom_name: str) -> Optional[Coord]:
        res = self._residues.get(residue_id)
        if res is None or atom_name not in res:
            return None
        x, y, z = res[atom_name].get_coord()
        return float(x), float(y), float(z)


def extract_chain(structure: Structure, chain_id: str) -> ChainStructure:
    chain = ChainStructure(chain_id, polymer_residues(structure, chain_id))
    if chain.atom_count == 0:
        raise NoSuchChain(chain_id)
    return chain
