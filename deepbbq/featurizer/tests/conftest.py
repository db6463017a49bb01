import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytest

# Ensure repo root is on sys.path so `deepbbq` imports resolve without installation.
ROOT = Path(__file__).resolve().parents[3]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from deepbbq.featurizer.lib.logging_utils import LOGGER_NAME  # noqa: E402

BACKBONE = ("N", "CA", "C", "O")
RISE = 3.8


def backbone_coords(position: int) -> Dict[str, Tuple[float, float, float]]:
    """Idealised, straight backbone: CA of residue ``position`` sits at (3.8 * position, 0, 0)."""
    x = RISE * position
    return {
        "N": (x - 1.2, 0.5, 0.0),
        "CA": (x, 0.0, 0.0),
        "C": (x + 1.2, 0.5, 0.0),
        "O": (x + 1.2, 1.7, 0.0),
    }


def pdb_atom_line(
    serial: int,
    name: str,
    resname: str,
    chain: str,
    resseq: int,
    xyz: Tuple[float, float, float],
    record: str = "ATOM",
    icode: str = "",
) -> str:
    atom_field = f" {name:<3}" if len(name) < 4 else name
    x, y, z = xyz
    return (
        f"{record:<6}{serial:5d} {atom_field} {resname:>3} {chain:1}{resseq:4d}{icode:1}   "
        f"{x:8.3f}{y:8.3f}{z:8.3f}{1.0:6.2f}{0.0:6.2f}          {name[0]:>2}"
    )


def seqres_lines(chain: str, names: Sequence[str]) -> List[str]:
    lines = []
    for serial, start in enumerate(range(0, len(names), 13), start=1):
        chunk = " ".join(names[start:start + 13])
        lines.append(f"SEQRES{serial:4d} {chain}{len(names):5d}  {chunk}")
    return lines


def render_pdb(
    residues: Iterable[Tuple],
    seqres: Optional[Dict[str, Sequence[str]]] = None,
    waters: Iterable[Tuple[str, int]] = (),
) -> str:
    """
    ``residues`` holds ``(chain, resseq, resname)`` or ``(chain, resseq, resname, atom_names)``
    tuples; coordinates follow :func:`backbone_coords` by position within the chain.
    """
    lines: List[str] = []
    for chain, names in (seqres or {}).items():
        lines.extend(seqres_lines(chain, names))
    serial = 1
    positions: Dict[str, int] = {}
    for entry in residues:
        chain, resseq, resname = entry[:3]
        atom_names = entry[3] if len(entry) > 3 else BACKBONE
        position = positions.get(chain, 0)
        positions[chain] = position + 1
        coords = backbone_coords(position)
        for name in atom_names:
            lines.append(pdb_atom_line(serial, name, resname, chain, resseq, coords[name]))
            serial += 1
    for chain, resseq in waters:
        lines.append(pdb_atom_line(serial, "O", "HOH", chain, resseq, (50.0, 50.0, float(resseq)), record="HETATM"))
        serial += 1
    lines.append("END")
    return "\n".join(lines) + "\n"


POLY_SEQ_COLUMNS = ("asym_id", "entity_id", "seq_id", "mon_id", "pdb_seq_num", "pdb_mon_id", "pdb_strand_id")
ATOM_SITE_COLUMNS = (
    "group_PDB", "id", "type_symbol", "label_atom_id", "label_alt_id", "label_comp_id",
    "label_asym_id", "label_entity_id", "label_seq_id", "pdbx_PDB_ins_code",
    "Cartn_x", "Cartn_y", "Cartn_z", "occupancy", "B_iso_or_equiv",
    "auth_seq_id", "auth_comp_id", "auth_asym_id", "auth_atom_id", "pdbx_PDB_model_num",
)


def render_mmcif(
    code: str,
    chain: str,
    entity: Sequence[Tuple[str, Optional[int], str]],
    label_asym: str = "A",
) -> str:
    """
    ``entity`` lists ``(resname, auth_seq_id or None, record)`` per designed
    position; ``None`` marks a residue that was never modelled.
    """
    lines = [f"data_{code}", "#", "loop_"]
    lines.extend(f"_pdbx_poly_seq_scheme.{name}" for name in POLY_SEQ_COLUMNS)
    for seq_id, (resname, auth_seq, _) in enumerate(entity, start=1):
        observed = auth_seq is not None
        lines.append(
            f"{label_asym} 1 {seq_id} {resname} {auth_seq if observed else seq_id} "
            f"{resname if observed else '?'} {chain}"
        )
    lines.extend(["#", "loop_"])
    lines.extend(f"_atom_site.{name}" for name in ATOM_SITE_COLUMNS)
    serial = 1
    position = 0
    for seq_id, (resname, auth_seq, record) in enumerate(entity, start=1):
        if auth_seq is None:
            continue
        coords = backbone_coords(position)
        position += 1
        for name in BACKBONE:
            x, y, z = coords[name]
            lines.append(
                f"{record} {serial} {name[0]} {name} . {resname} {label_asym} 1 {seq_id} ? "
                f"{x:.3f} {y:.3f} {z:.3f} 1.00 0.00 {auth_seq} {resname} {chain} {name} 1"
            )
            serial += 1
    lines.append("#")
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_pdb(tmp_path):
    def _make(filename: str, residues, seqres=None, waters=()) -> Path:
        path = tmp_path / filename
        path.write_text(render_pdb(residues, seqres=seqres, waters=waters), encoding="utf-8")
        return path

    return _make


@pytest.fixture
def make_cif(tmp_path):
    def _make(filename: str, chain: str, entity, label_asym: str = "A") -> Path:
        path = tmp_path / filename
        path.write_text(render_mmcif(Path(filename).name.split(".")[0], chain, entity, label_asym), encoding="utf-8")
        return path

    return _make


@pytest.fixture(autouse=True)
def _reset_featurizer_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
