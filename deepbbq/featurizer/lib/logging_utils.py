"""
Logging and timing utilities for the featurizer.

Provides:
- prepare_run_directory: create a timestamped run folder under a log root,
  moving earlier runs into ``history/``.
- setup_logger: configure the ``deepbbq`` logger once with a console stream
  and, when a run directory is supplied, a rotating file handler. The returned
  logger is handed to the orchestrator explicitly.
- timeit: decorator to log the wall time of long-running calls.
"""
from __future__ import annotations

import logging
import shutil
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional, Union

LOGGER_NAME = "deepbbq"
_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class RunDirectory:
    root_dir: Path
    history_dir: Path
    run_dir: Path
    run_name: str


def _archive(entry: Path, history_dir: Path) -> None:
    target = history_dir / entry.name
    counter = 1
    while target.exists():
        target = history_dir / f"{entry.name}.{counter}"
        counter += 1
    shutil.move(str(entry), str(target))


def prepare_run_directory(
    log_root: Path,
    *,
    run_prefix: str = "featurizer",
    timestamp: Optional[datetime] = None,
) -> RunDirectory:
    """Return a fresh ``<prefix>.<timestamp>`` directory below ``log_root``.

    Earlier ``<prefix>.*`` run directories are archived under ``history``;
    any other entry in ``log_root`` is left alone, and nothing already in
    ``history`` is overwritten.
    """
    log_root.mkdir(parents=True, exist_ok=True)
    history_dir = log_root / "history"
    history_dir.mkdir(exist_ok=True)
    for entry in sorted(log_root.glob(f"{run_prefix}.*")):
        if entry.is_dir():
            _archive(entry, history_dir)

    ts = timestamp or datetime.now()
    run_name = f"{run_prefix}.{ts.strftime('%Y-%m-%d_%H-%M-%S')}"
    run_dir = log_root / run_name
    run_dir.mkdir()
    return RunDirectory(root_dir=log_root, history_dir=history_dir, run_dir=run_dir, run_name=run_name)


def setup_logger(
    log_dir: Optional[Path] = None,
    name: str = LOGGER_NAME,
    level: Union[int, str] = logging.INFO,
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.setLevel(level)
    fmt = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(fmt)
    logger.addHandler(stream_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / f"{name}.log", maxBytes=5_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def timeit(label: Optional[str] = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Log how long the wrapped call took on the ``deepbbq`` logger."""
    def _decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def _wrapper(*args: Any, **kwargs: Any) -> Any:
            _label = label or func.__qualname__
            logger = logging.getLogger(LOGGER_NAME)
            t0 = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                logger.info("[time] %s took %.3fs", _label, time.perf_counter() - t0)
        return _wrapper
    return _decorator
