from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


@dataclass
class OutputConfig:
    directory: Path = field(default_factory=lambda: Path("."))
    suffix: str = ".dat"


@dataclass
class FeatureToggles:
    secondary_structure: bool = True
    hbonds: bool = True
    anchor_atom: str = "CA"


@dataclass
class HBondConfig:
    energy_cutoff: float = -0.5
    min_energy: float = -9.9
    ca_distance: float = 9.0
    peptide_bond_length: float = 2.5


@dataclass
class DsspConfig:
    executable: str = "mkdssp"


@dataclass
class ParserConfig:
    pdb_warnings: bool = False


@dataclass
class FeaturizerConfig:
    output: OutputConfig = field(default_factory=OutputConfig)
    features: FeatureToggles = field(default_factory=FeatureToggles)
    hbond: HBondConfig = field(default_factory=HBondConfig)
    dssp: DsspConfig = field(default_factory=DsspConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)

    @property
    def format_version(self) -> int:
        return 2 if self.features.secondary_structure else 1


def _merge_dict(default: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(default)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _merge_dict(merged[key], value)
        else:
            merged[key] = value
    return merged


def _as_bool(value: Any, label: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    raise ValueError(f"{label} must be a boolean.")


def _as_float(value: Any, label: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be numeric.")


def _section(merged: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = merged.get(key)
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a mapping.")
    return value


def load_config(config_path: Optional[Path]) -> FeaturizerConfig:
    default_dict: Dict[str, Any] = {
        "output": {"directory": ".", "suffix": ".dat"},
        "features": {"secondary_structure": True, "hbonds": True, "anchor_atom": "CA"},
        "hbond": {
            "energy_cutoff": -0.5,
            "min_energy": -9.9,
            "ca_distance": 9.0,
            "peptide_bond_length": 2.5,
        },
        "dssp": {"executable": "mkdssp"},
        "parser": {"pdb_warnings": False},
    }

    user_dict: Dict[str, Any] = {}
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Config at {config_path} must be a mapping.")
            user_dict = loaded

    merged = _merge_dict(default_dict, user_dict)
    output = _section(merged, "output")
    features = _section(merged, "features")
    hbond = _section(merged, "hbond")
    dssp = _section(merged, "dssp")
    parser = _section(merged, "parser")

    suffix = str(output.get("suffix", ".dat"))
    if not suffix.startswith("."):
        suffix = f".{suffix}"
    anchor = str(features.get("anchor_atom", "CA")).strip().upper()
    if not anchor:
        raise ValueError("features.anchor_atom must not be empty.")
    cutoff = _as_float(hbond.get("energy_cutoff"), "hbond.energy_cutoff")
    if cutoff >= 0.0:
        raise ValueError("hbond.energy_cutoff must be negative.")

    return FeaturizerConfig(
        output=OutputConfig(directory=Path(str(output.get("directory", "."))), suffix=suffix),
        features=FeatureToggles(
            secondary_structure=_as_bool(features.get("secondary_structure"), "features.secondary_structure"),
            hbonds=_as_bool(features.get("hbonds"), "features.hbonds"),
            anchor_atom=anchor,
        ),
        hbond=HBondConfig(
            energy_cutoff=cutoff,
            min_energy=_as_float(hbond.get("min_energy"), "hbond.min_energy"),
            ca_distance=_as_float(hbond.get("ca_distance"), "hbond.ca_distance"),
            peptide_bond_length=_as_float(hbond.get("peptide_bond_length"), "hbond.peptide_bond_length"),
        ),
        dssp=DsspConfig(executable=str(dssp.get("executable", "mkdssp"))),
        parser=ParserConfig(pdb_warnings=_as_bool(parser.get("pdb_warnings"), "parser.pdb_warnings")),
    )


def config_as_dict(config: FeaturizerConfig) -> Dict[str, Any]:
    return {
        "output": {
            "directory": str(config.output.directory),
            "suffix": config.output.suffix,
        },
        "features": {
            "secondary_structure": config.features.secondary_structure,
            "hbonds": config.features.hbonds,
            "anchor_atom": config.features.anchor_atom,
        },
        "hbond": {
            "energy_cutoff": config.hbond.energy_cutoff,
            "min_energy": config.hbond.min_energy,
            "ca_distance": config.hbond.ca_distance,
            "peptide_bond_length": config.hbond.peptide_bond_length,
        },
        "dssp": {"executable": config.dssp.executable},
        "parser": {"pdb_warnings": config.parser.pdb_warnings},
    }
