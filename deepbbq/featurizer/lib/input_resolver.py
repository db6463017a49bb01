"""
Turn command-line input into an ordered list of chain tasks.

A list file holds one identifier per line (only the first whitespace token
counts, blank lines and ``#`` comments are ignored). Identifiers combine a
PDB code and a chain, written as ``1abc:A``, ``1abc_A`` or ``1abcA``; the
code is resolved to a structure file inside a search directory.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .errors import InputError

LOG = logging.getLogger("deepbbq.input")

PDB_CODE_LENGTH = 4
_SEPARATORS = (":", "_")

MMCIF_PATTERNS = ("{code}.cif", "{code}.cif.gz", "{code}.mmcif")
PDB_PATTERNS = ("{code}.pdb", "pdb{code}.ent", "{code}.pdb.gz", "pdb{code}.ent.gz", "{code}.ent")


@dataclass(frozen=True)
class ChainTask:
    structure_path: Path
    chain_id: Optional[str] = None
    code: Optional[str] = None

    @property
    def has_chain(self) -> bool:
        return bool(self.chain_id)

    def describe(self) -> str:
        return f"{self.structure_path.name} chain {self.chain_id or '?'}"


def code_and_chain(token: str) -> Tuple[str, Optional[str]]:
    """Split ``1abcA`` / ``1abc:A`` / ``1abc_A`` into ``("1abc", "A")``.

    Without a separator the first four characters are the code and the rest
    is the chain, so multi-character chains (``1abcAB``) survive intact.
    """
    token = token.strip()
    for position, char in enumerate(token):
        if char in _SEPARATORS:
            return token[:position], (token[position + 1:] or None)
    if len(token) <= PDB_CODE_LENGTH:
        return token, None
    return token[:PDB_CODE_LENGTH], token[PDB_CODE_LENGTH:]


def read_list_file(list_file: Path) -> List[str]:
    """First token of every non-blank, non-comment line."""
    try:
        text = list_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise InputError(f"Can't open list file {list_file}: {exc}") from exc
    tokens: List[str] = []
    for line in text.splitlines():
        fields = line.split()
        if not fields or fields[0].startswith("#"):
            continue
        tokens.append(fields[0])
    return tokens


def _candidate_names(code: str, patterns: Tuple[str, ...]) -> Iterator[str]:
    variants = list(dict.fromkeys((code, code.lower(), code.upper())))
    for pattern in patterns:
        for variant in variants:
            yield pattern.format(code=variant)


def _first_match(code: str, directory: Path, patterns: Tuple[str, ...]) -> Optional[Path]:
    folders = [directory]
    if len(code) >= 3:
        # divided PDB mirror layout: ab/1abc.cif
        folders.append(directory / code[1:3].lower())
    for folder in folders:
        for name in _candidate_names(code, patterns):
            candidate = folder / name
            if candidate.is_file():
                return candidate
    return None


def find_structure_file(code: str, directory: Path) -> Optional[Path]:
    """mmCIF file for ``code`` if there is one, otherwise a PDB file."""
    return _first_match(code, directory, MMCIF_PATTERNS) or _first_match(code, directory, PDB_PATTERNS)


def resolve_list_file(list_file: Path, directory: Path, logger: Optional[logging.Logger] = None) -> List[ChainTask]:
    log = logger or LOG
    log.debug("Loading list file: %s", list_file)
    tasks: List[ChainTask] = []
    for token in read_list_file(list_file):
        code, chain_id = code_and_chain(token)
        path = find_structure_file(code, directory)
        if path is None:
            log.warning("Can't find a structure file for PDB ID %s in %s (set the folder with --path)", code, directory)
            continue
        tasks.append(ChainTask(structure_path=path, chain_id=chain_id, code=code))
    log.info("%d input files found in %s", len(tasks), list_file)
    return tasks


def single_task(input_file: Path, chain_id: Optional[str]) -> ChainTask:
    return ChainTask(structure_path=input_file, chain_id=chain_id or None)
