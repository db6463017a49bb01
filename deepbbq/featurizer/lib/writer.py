from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, TextIO

from .feature_rows import FORMAT_VERSION, FeatureRow, format_row
from .pdb_utils import structure_stem

LOG = logging.getLogger("deepbbq.writer")


def output_name(structure_path: Path, chain_id: str, suffix: str = ".dat") -> str:
    """``1abc.cif.gz`` + ``A`` -> ``1abc_A.dat``."""
    return f"{structure_stem(structure_path)}_{chain_id}{suffix}"


class FeatureFileWriter:
    """Stream feature rows to one file; delete the file if the block fails.

    A feature file on disk is either complete or absent.
    """

    def __init__(
        self,
        path: Path,
        format_version: int = FORMAT_VERSION,
        logger: Optional[logging.Logger] = None,
    ):
        self.path = Path(path)
        self.format_version = format_version
        self.logger = logger or LOG
        self.rows_written = 0
        self._handle: Optional[TextIO] = None

    def __enter__(self) -> "FeatureFileWriter":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self.path.open("w", encoding="utf-8")
        return self

    def write_row(self, row: FeatureRow) -> None:
        if self._handle is None:
            raise RuntimeError(f"{self.path} is not open for writing")
        self._handle.write(format_row(row, self.format_version) + "\n")
        self.rows_written += 1

    def __exit__(self, exc_type, exc, tb) -> bool:
        handle, self._handle = self._handle, None
        if exc_type is None:
            if handle is not None:
                handle.close()
            return False
        if handle is not None:
            try:
                handle.close()
            except OSError as close_exc:
                self.logger.debug("Closing %s failed: %s", self.path, close_exc)
        self._remove_partial()
        return False

    def _remove_partial(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            self.logger.warning("Partial output %s was already gone", self.path)
            return
        except OSError as exc:
            self.logger.error("Failed to remove partial output %s: %s", self.path, exc)
            return
        self.logger.warning("Removed partial output %s", self.path)
