"""Per-residue secondary-structure codes from mkdssp through Bio.PDB.DSSP."""
from __future__ import annotations

import gzip
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional

from Bio.PDB.DSSP import DSSP
from Bio.PDB.Structure import Structure

from .errors import DsspError
from .pdb_utils import is_gzipped, structure_format, uncompressed_name
from .residues import ResidueId

LOG = logging.getLogger("deepbbq.dssp")


def dssp_available(executable: str) -> bool:
    return shutil.which(executable) is not None


class DsspSecondaryStructure:
    """Secondary-structure codes of one chain keyed by residue id."""

    def __init__(self, codes: Dict[ResidueId, str]):
        self._codes = dict(codes)

    def __len__(self) -> int:
        return len(self._codes)

    def code(self, residue_id: ResidueId) -> str:
        return self._codes[residue_id]


def _run_dssp(structure: Structure, path: Path, executable: str) -> DSSP:
    model = structure[0]
    file_type = "MMCIF" if structure_format(path) == "mmcif" else "PDB"
    if not is_gzipped(path):
        return DSSP(model, str(path), dssp=executable, file_type=file_type)
    # mkdssp cannot read gzip input
    with tempfile.TemporaryDirectory(prefix="deepbbq_dssp_") as tmp:
        plain = Path(tmp) / uncompressed_name(path)
        with gzip.open(path, "rb") as src, plain.open("wb") as dst:
            shutil.copyfileobj(src, dst)
        return DSSP(model, str(plain), dssp=executable, file_type=file_type)


def compute_secondary_structure(
    structure: Structure,
    path: Path,
    chain_id: str,
    executable: str = "mkdssp",
    logger: Optional[logging.Logger] = None,
) -> DsspSecondaryStructure:
    log = logger or LOG
    try:
        dssp = _run_dssp(structure, path, executable)
    except Exception as exc:
        raise DsspError(f"mkdssp failed on {path.name}: {exc}") from exc

    codes: Dict[ResidueId, str] = {}
    for key in dssp.keys():
        key_chain, bio_id = key
        if key_chain != chain_id:
            continue
        codes[ResidueId.from_biopython(key_chain, bio_id)] = dssp[key][2]
    if not codes:
        raise DsspError(f"mkdssp assigned no residues of chain '{chain_id}' in {path.name}")
    log.debug("DSSP assigned %d residues of chain %s in %s", len(codes), chain_id, path.name)
    return DsspSecondaryStructure(codes)
