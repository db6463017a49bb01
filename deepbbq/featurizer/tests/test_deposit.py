from __future__ import annotations

import pytest

from deepbbq.featurizer.lib.deposit import (
    load_deposit,
    poly_seq_monomers,
    read_seqres,
    seqres_monomers,
)
from deepbbq.featurizer.lib.errors import EntityError
from deepbbq.featurizer.lib.residues import EntityMonomer


def _poly_seq(rows):
    columns = ("asym_id", "seq_id", "mon_id", "pdb_mon_id", "pdb_strand_id")
    return {
        f"_pdbx_poly_seq_scheme.{name}": [row[index] for row in rows]
        for index, name in enumerate(columns)
    }


def test_poly_seq_marks_unobserved_positions_as_gaps() -> None:
    mmcif = _poly_seq(
        [
            ("A", "1", "MET", "?", "A"),
            ("A", "2", "THR", "THR", "A"),
            ("A", "3", "TYR", "TYR", "A"),
            ("B", "1", "GLY", "GLY", "B"),
            ("A", "4", "LYS", ".", "A"),
        ]
    )
    assert poly_seq_monomers(mmcif, "A") == [
        EntityMonomer("MET", is_gap=True),
        EntityMonomer("THR"),
        EntityMonomer("TYR"),
        EntityMonomer("LYS", is_gap=True),
    ]
    assert poly_seq_monomers(mmcif, "B") == [EntityMonomer("GLY")]
    assert poly_seq_monomers(mmcif, "Z") == []


def test_poly_seq_keeps_first_monomer_of_heterogeneous_position() -> None:
    mmcif = _poly_seq([("A", "1", "SER", "SER", "A"), ("A", "1", "CYS", "CYS", "A"), ("A", "2", "ALA", "ALA", "A")])
    assert [m.code for m in poly_seq_monomers(mmcif, "A")] == ["SER", "ALA"]


def test_poly_seq_inconsistent_columns() -> None:
    mmcif = _poly_seq([("A", "1", "SER", "SER", "A")])
    mmcif["_pdbx_poly_seq_scheme.mon_id"] = []
    with pytest.raises(EntityError):
        poly_seq_monomers(mmcif, "A")


def test_read_seqres_stops_at_coordinates() -> None:
    lines = [
        "HEADER    TEST",
        "SEQRES   1 A   15  MET GLY ALA SER LYS THR TYR LYS LEU ILE LEU ASN GLY",
        "SEQRES   2 A   15  LYS THR",
        "SEQRES   1 B    2  GLY GLY",
        "ATOM      1  N   MET A   1      11.104   6.134  -6.504  1.00  0.00           N",
        "SEQRES   9 C    1  ALA",
    ]
    seqres = read_seqres(lines)
    assert list(seqres) == ["A", "B"]
    assert len(seqres["A"]) == 15
    assert seqres["A"][-2:] == ["LYS", "THR"]


def test_seqres_alignment_recovers_terminal_and_internal_gaps() -> None:
    seqres = ["MET", "GLY", "ALA", "SER", "LYS", "THR", "TYR", "LYS"]
    observed = ["GLY", "ALA", "THR", "TYR"]
    monomers = seqres_monomers(seqres, observed)
    assert [m.code for m in monomers] == seqres
    assert [m.is_gap for m in monomers] == [True, False, False, True, True, False, False, True]


def test_seqres_shorter_than_observed_is_rejected() -> None:
    with pytest.raises(EntityError):
        seqres_monomers(["ALA"], ["ALA", "GLY"])


def test_seqres_with_nothing_observed_is_all_gaps() -> None:
    assert all(m.is_gap for m in seqres_monomers(["ALA", "GLY"], []))


def test_load_pdb_deposit_uses_seqres(make_pdb) -> None:
    path = make_pdb(
        "1tst.pdb",
        [("A", 2, "GLY"), ("A", 3, "ALA"), ("A", 4, "SER")],
        seqres={"A": ["MET", "GLY", "ALA", "SER", "LYS"]},
        waters=[("A", 101)],
    )
    deposit = load_deposit(path)
    assert deposit.format == "pdb"
    assert [m.is_gap for m in deposit.chain_monomers("A")] == [True, False, False, False, True]


def test_deposit_without_seqres_uses_observed_residues(make_pdb) -> None:
    path = make_pdb("1tst.pdb", [("A", 1, "GLY"), ("A", 2, "ALA")])
    monomers = load_deposit(path).chain_monomers("A")
    assert monomers == [EntityMonomer("GLY"), EntityMonomer("ALA")]
    with pytest.raises(EntityError):
        load_deposit(path).chain_monomers("Q")


def test_load_deposit_reads_poly_seq_from_mmcif(make_cif) -> None:
    path = make_cif("5tst.cif", "B", [("MET", None, "ATOM"), ("THR", 7, "ATOM"), ("TYR", 8, "ATOM")], label_asym="D")
    deposit = load_deposit(path)
    assert deposit.format == "mmcif"
    assert deposit.chain_monomers("B") == [
        EntityMonomer("MET", is_gap=True),
        EntityMonomer("THR"),
        EntityMonomer("TYR"),
    ]
