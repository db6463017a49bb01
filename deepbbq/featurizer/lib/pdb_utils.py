"""Helpers for configuring Bio.PDB parsers and reading structure files."""

from __future__ import annotations

import gzip
import logging
import warnings
from pathlib import Path
from typing import IO, Union

from Bio.PDB import MMCIFParser, PDBParser
from Bio.PDB.PDBExceptions import PDBConstructionWarning
from Bio.PDB.Structure import Structure

LOG = logging.getLogger("deepbbq.pdb")

MMCIF_SUFFIXES = (".cif", ".mmcif")

_QUIET_DEFAULT = True
_CURRENT_QUIET = _QUIET_DEFAULT


def configure_pdb_parser(warnings_enabled: bool) -> None:
    """
    Decide whether structure parsing is noisy for the rest of the run.

    Deposited files routinely trip PDBConstructionWarning (discontinuous
    chains, alternate locations), so both parsers stay quiet unless
    ``--pdb-warnings`` / ``parser.pdb_warnings`` asks for the messages.
    """
    global _CURRENT_QUIET
    _CURRENT_QUIET = not warnings_enabled
    if warnings_enabled:
        warnings.simplefilter("default", PDBConstructionWarning)
        LOG.info("PDB warnings enabled (Bio.PDB.PDBConstructionWarning will be shown).")
    else:
        warnings.simplefilter("ignore", PDBConstructionWarning)
        LOG.debug("PDB warnings suppressed (use --pdb-warnings to enable).")


def create_pdb_parser() -> PDBParser:
    return PDBParser(PERMISSIVE=True, QUIET=_CURRENT_QUIET)


def create_mmcif_parser() -> MMCIFParser:
    return MMCIFParser(QUIET=_CURRENT_QUIET)


def uncompressed_name(path: Union[str, Path]) -> str:
    name = Path(path).name
    if name.lower().endswith(".gz"):
        name = name[:-3]
    return name


def is_gzipped(path: Union[str, Path]) -> bool:
    return Path(path).name.lower().endswith(".gz")


def structure_format(path: Union[str, Path]) -> str:
    """``"mmcif"`` or ``"pdb"``, decided by the (possibly gzipped) file name."""
    suffix = Path(uncompressed_name(path)).suffix.lower()
    return "mmcif" if suffix in MMCIF_SUFFIXES else "pdb"


def structure_stem(path: Union[str, Path]) -> str:
    """Base name without ``.gz`` and without the structure extension."""
    return Path(uncompressed_name(path)).stem


def open_structure_text(path: Union[str, Path]) -> IO[str]:
    if is_gzipped(path):
        return gzip.open(path, "rt", encoding="utf-8")
    return open(path, "r", encoding="utf-8")


def parse_structure(path: Path) -> Structure:
    parser = create_mmcif_parser() if structure_format(path) == "mmcif" else create_pdb_parser()
    with open_structure_text(path) as handle:
        return parser.get_structure(structure_stem(path), handle)
