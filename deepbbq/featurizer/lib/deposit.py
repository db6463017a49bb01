"""Loaded structure files and the designed (entity) sequence of their chains.

mmCIF files carry the full designed sequence in ``_pdbx_poly_seq_scheme`` with
``?`` in place of the author residue name for positions that were never
modelled. PDB files only carry SEQRES, so the unobserved positions are
recovered by aligning SEQRES against the residues present in the coordinates.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

from Bio.Align import PairwiseAligner
from Bio.PDB.MMCIF2Dict import MMCIF2Dict
from Bio.PDB.Structure import Structure
from Bio.SeqUtils import seq1

from .chain_extractor import polymer_residues
from .errors import EntityError
from .pdb_utils import open_structure_text, parse_structure, structure_format
from .residues import EntityMonomer

LOG = logging.getLogger("deepbbq.deposit")

POLY_SEQ_PREFIX = "_pdbx_poly_seq_scheme."
_UNOBSERVED = {"?", "."}


def _column(mmcif_dict: Mapping[str, object], key: str) -> List[str]:
    value = mmcif_dict.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]  # type: ignore[union-attr]


def poly_seq_monomers(mmcif_dict: Mapping[str, object], chain_id: str) -> List[EntityMonomer]:
    strands = _column(mmcif_dict, POLY_SEQ_PREFIX + "pdb_strand_id")
    if not strands:
        return []
    asym_ids = _column(mmcif_dict, POLY_SEQ_PREFIX + "asym_id") or [""] * len(strands)
    seq_ids = _column(mmcif_dict, POLY_SEQ_PREFIX + "seq_id")
    mon_ids = _column(mmcif_dict, POLY_SEQ_PREFIX + "mon_id")
    pdb_mon_ids = _column(mmcif_dict, POLY_SEQ_PREFIX + "pdb_mon_id")
    if not (len(strands) == len(seq_ids) == len(mon_ids) == len(pdb_mon_ids)):
        raise EntityError("Inconsistent _pdbx_poly_seq_scheme columns")

    monomers: List[EntityMonomer] = []
    seen = set()
    for strand, asym, seq_id, mon_id, pdb_mon in zip(strands, asym_ids, seq_ids, mon_ids, pdb_mon_ids):
        if strand != chain_id:
            continue
        # micro-heterogeneity lists several monomers for one position; the first wins
        key = (asym, seq_id)
        if key in seen:
            continue
        seen.add(key)
        monomers.append(EntityMonomer(code=mon_id, is_gap=pdb_mon in _UNOBSERVED))
    return monomers


def read_seqres(lines: Iterable[str]) -> Dict[str, List[str]]:
    seqres: Dict[str, List[str]] = {}
    for line in lines:
        if line.startswith(("ATOM  ", "HETATM", "MODEL ")):
            break
        if not line.startswith("SEQRES") or len(line) < 12:
            continue
        seqres.setdefault(line[11].strip(), []).extend(line[19:].split())
    return seqres


def _one_letter(names: Sequence[str]) -> str:
    return "".join(seq1(name) if len(name) == 3 else "X" for name in names)


def _seqres_aligner() -> PairwiseAligner:
    aligner = PairwiseAligner()
    aligner.mode = "global"
    aligner.match_score = 2.0
    aligner.mismatch_score = -1.0
    # SEQRES is the reference: every observed residue must land on it
    aligner.insertion_score = -100.0
    aligner.open_internal_deletion_score = -2.0
    aligner.extend_internal_deletion_score = -0.5
    aligner.end_deletion_score = 0.0
    return aligner


def seqres_monomers(seqres: Sequence[str], observed: Sequence[str]) -> List[EntityMonomer]:
    """Mark SEQRES positions without an observed partner as gaps."""
    if not observed:
        return [EntityMonomer(code=name, is_gap=True) for name in seqres]
    if len(observed) > len(seqres):
        raise EntityError(f"SEQRES lists {len(seqres)} residues but {len(observed)} are observed")

    alignment = _seqres_aligner().align(_one_letter(seqres), _one_letter(observed))[0]
    covered = [False] * len(seqres)
    target_blocks, query_blocks = alignment.aligned
    consumed = 0
    for (t_start, t_end), (q_start, q_end) in zip(target_blocks, query_blocks):
        for pos in range(int(t_start), int(t_end)):
            covered[pos] = True
        consumed += int(q_end) - int(q_start)
    if consumed != len(observed):
        raise EntityError("SEQRES does not cover all observed residues")
    return [EntityMonomer(code=name, is_gap=not hit) for name, hit in zip(seqres, covered)]


@dataclass
class Deposit:
    path: Path
    structure: Structure
    format: str
    poly_seq: Dict[str, List[str]] = field(default_factory=dict)
    seqres: Dict[str, List[str]] = field(default_factory=dict)

    def _observed_names(self, chain_id: str) -> List[str]:
        return [res.get_resname() for res in polymer_residues(self.structure, chain_id)]

    def chain_monomers(self, chain_id: str) -> List[EntityMonomer]:
        if self.format == "mmcif":
            monomers = poly_seq_monomers(self.poly_seq, chain_id)
        elif chain_id in self.seqres:
            monomers = seqres_monomers(self.seqres[chain_id], self._observed_names(chain_id))
        else:
            monomers = []
        if not monomers:
            LOG.debug("No sequence records for chain %s in %s; using observed residues", chain_id, self.path.name)
            monomers = [EntityMonomer(code=name) for name in self._observed_names(chain_id)]
        if not monomers:
            raise EntityError(f"No polymer residues for chain '{chain_id}'")
        return monomers


def load_deposit(path: Path) -> Deposit:
    structure = parse_structure(path)
    fmt = structure_format(path)
    if fmt == "mmcif":
        with open_structure_text(path) as handle:
            mmcif_dict = MMCIF2Dict(handle)
        poly_seq = {key: _column(mmcif_dict, key) for key in mmcif_dict if key.startswith(POLY_SEQ_PREFIX)}
        return Deposit(path=path, structure=structure, format=fmt, poly_seq=poly_seq)
    with open_structure_text(path) as handle:
        seqres = read_seqres(handle)
    return Deposit(path=path, structure=structure, format=fmt, seqres=seqres)
