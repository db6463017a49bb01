"""
Per-residue feature tables for deep-bbq training.

The implementation lives in :mod:`deepbbq.featurizer.lib`; the command-line
entry point is :mod:`deepbbq.featurizer.featurizer`.
"""
from __future__ import annotations

from importlib import metadata as _metadata

from .lib import ChainTask, Featurizer, FeaturizerConfig, RunSummary, load_config  # re-export common entry points

__all__ = [
    "__version__",
    "ChainTask",
    "Featurizer",
    "FeaturizerConfig",
    "RunSummary",
    "load_config",
]


def __getattr__(name: str):
    if name == "__version__":
        try:
            return _metadata.version("deepbbq-featurizer")
        except _metadata.PackageNotFoundError:  # pragma: no cover - local dev
            from .featurizer_info import FEATURIZER_VERSION

            return FEATURIZER_VERSION
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
