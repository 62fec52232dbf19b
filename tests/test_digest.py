"""Tests for streaming digests."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from fileprobe.inspection.detectors import DigestEngine
from fileprobe.inspection.errors import InspectionIOError
from fileprobe.inspection.models import DigestSet


def test_known_vectors(tmp_path: Path) -> None:
    sample = tmp_path / "abc.txt"
    sample.write_bytes(b"abc")

    digests = DigestEngine().digest(sample)

    assert digests.md5 == "900150983cd24fb0d6963f7d28e17f72"
    assert digests.sha1 == "a9993e364706816aba3e25717850c26c9cd0d89d"
    assert digests.sha256 == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_empty_file_digests(tmp_path: Path) -> None:
    sample = tmp_path / "empty"
    sample.write_bytes(b"")

    digests = DigestEngine().digest(sample)

    assert digests.md5 == "d41d8cd98f00b204e9800998ecf8427e"
    assert digests.sha1 == "da39a3ee5e6b4b0d3255bfef95601890afd80709"
    assert digests.sha256 == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_digest_is_lowercase_hex_of_expected_length(tmp_path: Path) -> None:
    sample = tmp_path / "blob.bin"
    sample.write_bytes(bytes(range(256)))

    digests = DigestEngine().digest(sample)

    for value, length in ((digests.md5, 32), (digests.sha1, 40), (digests.sha256, 64)):
        assert len(value) == length
        assert value == value.lower()
        int(value, 16)


@pytest.mark.parametrize("chunk_size", [1, 7, 64, 8192])
def test_chunking_does_not_change_result(tmp_path: Path, chunk_size: int) -> None:
    payload = bytes(range(256)) * 41 + b"tail"
    sample = tmp_path / "multi.bin"
    sample.write_bytes(payload)

    digests = DigestEngine(chunk_size=chunk_size).digest(sample)

    assert digests.md5 == hashlib.md5(payload).hexdigest()
    assert digests.sha1 == hashlib.sha1(payload).hexdigest()
    assert digests.sha256 == hashlib.sha256(payload).hexdigest()


def test_digest_is_deterministic(tmp_path: Path) -> None:
    sample = tmp_path / "same.bin"
    sample.write_bytes(b"repeatable content")

    engine = DigestEngine()
    assert engine.digest(sample) == engine.digest(sample)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(InspectionIOError, match="Cannot open file for hashing"):
        DigestEngine().digest(tmp_path / "absent.bin")


@pytest.mark.parametrize("workers", [1, 4])
def test_digest_many_preserves_order(tmp_path: Path, workers: int) -> None:
    paths = []
    for index in range(6):
        path = tmp_path / f"file-{index}.txt"
        path.write_bytes(f"payload {index}".encode())
        paths.append(path)

    results = DigestEngine(max_workers=workers).digest_many(paths)

    assert [result.sha256 for result in results] == [
        hashlib.sha256(f"payload {index}".encode()).hexdigest() for index in range(6)
    ]


def test_digest_many_raises_on_missing_file(tmp_path: Path) -> None:
    present = tmp_path / "present.txt"
    present.write_text("x", encoding="utf-8")

    with pytest.raises(InspectionIOError):
        DigestEngine(max_workers=2).digest_many([present, tmp_path / "missing.txt"])


def test_empty_digest_set() -> None:
    assert DigestSet.empty() == DigestSet(md5="", sha1="", sha256="")
