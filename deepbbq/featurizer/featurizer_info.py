from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .lib.config import FeaturizerConfig, config_as_dict

FEATURIZER_ID = "deepbbq_featurizer"
FEATURIZER_VERSION = "2.0.0"
FEATURIZER_ENTRYPOINT = "deepbbq.featurizer.featurizer"
RUN_INFO_FILENAME = "run_info.json"


def version_string(config: Optional[FeaturizerConfig] = None) -> str:
    cfg = config or FeaturizerConfig()
    return f"{FEATURIZER_ID} {FEATURIZER_VERSION} (output format v{cfg.format_version})"


def build_run_info(
    *,
    config: FeaturizerConfig,
    config_path: Optional[Path],
    task_count: int,
    options: Optional[Dict[str, Any]] = None,
) -> Dict[str, object]:
    """Featurizer identity, effective configuration and command line of this run."""
    return {
        "id": FEATURIZER_ID,
        "version": FEATURIZER_VERSION,
        "format_version": config.format_version,
        "module": FEATURIZER_ENTRYPOINT,
        "command": list(sys.argv),
        "config_path": str(config_path.resolve()) if config_path else None,
        "config": config_as_dict(config),
        "task_count": task_count,
        "options": dict(options or {}),
    }


def write_run_info(run_dir: Path, run_info: Dict[str, object]) -> Path:
    target = run_dir / RUN_INFO_FILENAME
    target.write_text(json.dumps(run_info, indent=2, sort_keys=True), encoding="utf-8")
    return target
