from __future__ import annotations

from pathlib import Path

import pytest

from deepbbq.featurizer.lib.errors import InputError
from deepbbq.featurizer.lib.input_resolver import (
    ChainTask,
    code_and_chain,
    find_structure_file,
    read_list_file,
    resolve_list_file,
    single_task,
)


@pytest.mark.parametrize(
    "token, expected",
    [
        ("2gb1A", ("2gb1", "A")),
        ("1abcAB", ("1abc", "AB")),
        ("1abc:a", ("1abc", "a")),
        ("1abc_B", ("1abc", "B")),
        ("1abc_", ("1abc", None)),
        ("1abc", ("1abc", None)),
        ("abc", ("abc", None)),
        ("model_1:C", ("model", "1:C")),
    ],
)
def test_code_and_chain(token, expected) -> None:
    assert code_and_chain(token) == expected


def test_read_list_file_skips_blank_and_comment_lines(tmp_path: Path) -> None:
    list_file = tmp_path / "chains.txt"
    list_file.write_text("# training set\n\n2gb1A  56 residues\n   \n#1abcA\n1ubqA\n", encoding="utf-8")
    assert read_list_file(list_file) == ["2gb1A", "1ubqA"]


def test_read_list_file_missing_raises_input_error(tmp_path: Path) -> None:
    with pytest.raises(InputError):
        read_list_file(tmp_path / "absent.txt")


def test_mmcif_preferred_over_pdb(tmp_path: Path) -> None:
    (tmp_path / "2gb1.pdb").write_text("", encoding="utf-8")
    (tmp_path / "2gb1.cif").write_text("", encoding="utf-8")
    assert find_structure_file("2gb1", tmp_path) == tmp_path / "2gb1.cif"


def test_lookup_finds_case_variants_and_mirror_layout(tmp_path: Path) -> None:
    (tmp_path / "pdb1ubq.ent").write_text("", encoding="utf-8")
    mirror = tmp_path / "gb"
    mirror.mkdir()
    (mirror / "2gb1.cif.gz").write_bytes(b"")
    assert find_structure_file("1UBQ", tmp_path) == tmp_path / "pdb1ubq.ent"
    assert find_structure_file("2GB1", tmp_path) == mirror / "2gb1.cif.gz"
    assert find_structure_file("9xyz", tmp_path) is None


def test_resolve_list_file_drops_unknown_codes(tmp_path: Path, caplog) -> None:
    (tmp_path / "2gb1.cif").write_text("", encoding="utf-8")
    (tmp_path / "1ubq.pdb").write_text("", encoding="utf-8")
    list_file = tmp_path / "list.txt"
    list_file.write_text("2gb1A\n9xyzA\n1ubq\n", encoding="utf-8")

    tasks = resolve_list_file(list_file, tmp_path)

    assert tasks == [
        ChainTask(tmp_path / "2gb1.cif", "A", "2gb1"),
        ChainTask(tmp_path / "1ubq.pdb", None, "1ubq"),
    ]
    assert not tasks[1].has_chain
    assert "9xyz" in caplog.text


def test_single_task_without_chain_is_flagged(tmp_path: Path) -> None:
    task = single_task(tmp_path / "x.pdb", "")
    assert task.chain_id is None
    assert not task.has_chain
    assert single_task(tmp_path / "x.pdb", "B").has_chain
