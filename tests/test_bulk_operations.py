"""Tests for bulk delete/copy/move, comparison, and integrity checks."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from fileprobe.inspection.errors import InspectionIOError
from fileprobe.operations.bulk import BulkFileOps


def test_delete_continues_past_failures(tmp_path: Path) -> None:
    first = tmp_path / "one.txt"
    second = tmp_path / "two.txt"
    empty_dir = tmp_path / "empty"
    for path in (first, second):
        path.write_text("x", encoding="utf-8")
    empty_dir.mkdir()
    missing = tmp_path / "missing.txt"

    result = BulkFileOps().delete([first, missing, second, empty_dir])

    assert result.operation == "delete"
    assert result.succeeded == 3
    assert [item.source for item in result.failed] == [missing]
    assert result.failed[0].error
    assert not first.exists() and not second.exists() and not empty_dir.exists()


def test_delete_refuses_non_empty_directory(tmp_path: Path) -> None:
    directory = tmp_path / "full"
    directory.mkdir()
    (directory / "keep.txt").write_text("x", encoding="utf-8")

    result = BulkFileOps().delete([directory])

    assert result.succeeded == 0
    assert directory.exists()


def test_copy_into_directory(tmp_path: Path) -> None:
    source = tmp_path / "source.txt"
    source.write_text("payload", encoding="utf-8")
    tree = tmp_path / "tree"
    tree.mkdir()
    (tree / "inner.txt").write_text("inner", encoding="utf-8")
    destination = tmp_path / "out"
    destination.mkdir()

    result = BulkFileOps().copy([source, tree, tmp_path / "missing"], destination)

    assert result.succeeded == 2
    assert len(result.failed) == 1
    assert (destination / "source.txt").read_text(encoding="utf-8") == "payload"
    assert (destination / "tree" / "inner.txt").read_text(encoding="utf-8") == "inner"
    assert source.exists()
    assert result.items[0].destination == destination / "source.txt"


def test_move_into_directory(tmp_path: Path) -> None:
    source = tmp_path / "move-me.txt"
    source.write_text("payload", encoding="utf-8")
    destination = tmp_path / "out"
    destination.mkdir()

    result = BulkFileOps().move([source], destination)

    assert result.succeeded == 1
    assert not source.exists()
    assert (destination / "move-me.txt").read_text(encoding="utf-8") == "payload"


def test_move_into_missing_directory_fails_per_item(tmp_path: Path) -> None:
    source = tmp_path / "stay.txt"
    source.write_text("payload", encoding="utf-8")

    result = BulkFileOps().move([source], tmp_path / "nowhere")

    assert result.succeeded == 0
    assert len(result.failed) == 1
    assert source.exists()


def test_compare_same_file_is_identical(tmp_path: Path) -> None:
    sample = tmp_path / "same.bin"
    sample.write_bytes(b"0123456789" * 10)

    result = BulkFileOps().compare(sample, sample)

    assert result.identical is True
    assert result.size_equal is True
    assert result.difference == 0


def test_compare_counts_differing_bytes_across_chunks(tmp_path: Path) -> None:
    payload = bytearray(b"a" * 100)
    first = tmp_path / "first.bin"
    first.write_bytes(bytes(payload))
    for index in (0, 40, 99):
        payload[index] = ord("b")
    second = tmp_path / "second.bin"
    second.write_bytes(bytes(payload))

    result = BulkFileOps(chunk_size=16).compare(first, second)

    assert result.identical is False
    assert result.size_equal is True
    assert result.difference == 3


def test_compare_single_flipped_byte(tmp_path: Path) -> None:
    first = tmp_path / "first.bin"
    second = tmp_path / "second.bin"
    first.write_bytes(b"\x00\x01\x02\x03")
    second.write_bytes(b"\x00\x01\xff\x03")

    result = BulkFileOps().compare(first, second)

    assert (result.identical, result.size_equal, result.difference) == (False, True, 1)


def test_compare_size_mismatch_reports_size_difference(tmp_path: Path) -> None:
    first = tmp_path / "short.bin"
    second = tmp_path / "long.bin"
    first.write_bytes(b"abc")
    second.write_bytes(b"abcdefgh")

    result = BulkFileOps().compare(first, second)

    assert result.identical is False
    assert result.size_equal is False
    assert result.difference == 5


def test_compare_missing_file_raises(tmp_path: Path) -> None:
    present = tmp_path / "present.bin"
    present.write_bytes(b"x")

    with pytest.raises(InspectionIOError):
        BulkFileOps().compare(present, tmp_path / "missing.bin")


def test_integrity_check_ignores_case_and_whitespace(tmp_path: Path) -> None:
    sample = tmp_path / "abc.txt"
    sample.write_bytes(b"abc")
    expected = hashlib.sha256(b"abc").hexdigest()

    ops = BulkFileOps()
    assert ops.check_integrity(sample, expected) is True
    assert ops.check_integrity(sample, f"  {expected.upper()}\n") is True
    assert ops.check_integrity(sample, "0" * 64) is False


def test_integrity_check_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(InspectionIOError):
        BulkFileOps().check_integrity(tmp_path / "missing", "0" * 64)
