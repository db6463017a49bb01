"""Internal implementation package for the featurizer."""
from __future__ import annotations

from .aligner import AlignedResidue, align_residues  # noqa: F401
from .config import FeaturizerConfig, load_config  # noqa: F401
from .errors import FeaturizerError, NoSuchChain, ResidueNotDefined  # noqa: F401
from .input_resolver import ChainTask  # noqa: F401
from .pipeline import Featurizer, RunSummary  # noqa: F401

__all__ = [
    "AlignedResidue",
    "ChainTask",
    "Featurizer",
    "FeaturizerConfig",
    "FeaturizerError",
    "NoSuchChain",
    "ResidueNotDefined",
    "RunSummary",
    "align_residues",
    "load_config",
]
