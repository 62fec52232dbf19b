"""Tests for the fileprobe CLI commands."""

import hashlib
import json
import os
import plistlib
import struct
import zipfile
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from fileprobe.cli import cli


@pytest.fixture()
def env(tmp_path: Path) -> dict[str, Any]:
    home = tmp_path / "home"
    home.mkdir()
    environ: dict[str, Any] = {key: None for key in os.environ if key.startswith("FILEPROBE__")}
    environ["HOME"] = str(home)
    return environ


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    (root / "notes.txt").write_text("hello world\n", encoding="utf-8")
    (root / "Demo").write_bytes(b"\xca\xfe\xba\xbe" + struct.pack(">I", 2) + b"\x00" * 24)
    nested = root / "nested"
    nested.mkdir()
    (nested / "data.json").write_text("{}", encoding="utf-8")
    return root


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "fileprobe classifies files" in result.output
    for command in ("classify", "scan", "digest", "binary", "bundle", "archive", "config"):
        assert command in result.output


def test_classify_json(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["classify", str(workspace / "notes.txt"), "--json"], env=env)

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"path": str(workspace / "notes.txt"), "type": "text"}


def test_classify_plain_output(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["classify", str(workspace / "Demo")], env=env)

    assert result.exit_code == 0
    assert "Mach-O" in result.output


def test_classify_missing_file_json_error(tmp_path: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["classify", str(tmp_path / "missing"), "--json"], env=env)

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["error"]["code"] == "io_error"


def test_inspect_json(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["inspect", str(workspace / "Demo"), "--json"], env=env)

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["file_type"] == "executable_image"
    assert payload["signature"] == "CA FE BA BE 00 00 00 02"
    assert payload["size"] == 32


def test_scan_summary(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["scan", str(workspace), "--recursive", "--summary"], env=env)

    assert result.exit_code == 0
    assert "files=3" in result.output
    assert "directories=1" in result.output
    assert "notes.txt" not in result.output


def test_scan_table_lists_entries(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["scan", str(workspace)], env=env)

    assert result.exit_code == 0
    assert "notes.txt" in result.output
    assert "data.json" not in result.output
    assert "files=2" in result.output


def test_scan_json(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["scan", str(workspace), "-r", "--json"], env=env)

    assert result.exit_code == 0
    records = json.loads(result.stdout)
    names = sorted(record["name"] for record in records)
    assert names == ["Demo", "data.json", "nested", "notes.txt"]


def test_scan_quiet_suppresses_output(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["scan", str(workspace), "--quiet"], env=env)

    assert result.exit_code == 0
    assert result.stdout.strip() == ""


def test_scan_missing_directory_fails(tmp_path: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["scan", str(tmp_path / "missing")], env=env)

    assert result.exit_code != 0
    assert "Cannot open directory" in result.output


def test_digest_json(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    target = workspace / "notes.txt"
    result = runner.invoke(cli, ["digest", str(target), "--json"], env=env)

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload[0]["sha256"] == hashlib.sha256(target.read_bytes()).hexdigest()


def test_digest_missing_file_exits_nonzero(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["digest", str(workspace / "notes.txt"), str(workspace / "missing"), "--json"],
        env=env,
    )

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload[0]["md5"]
    assert payload[1]["md5"] == ""
    assert "error" in payload[1]


def test_binary_json(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["binary", str(workspace / "Demo"), "--json"], env=env)

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["is_fat"] is True
    assert payload["architecture_count"] == 2


def test_binary_invalid_magic_json_error(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["binary", str(workspace / "notes.txt"), "--json"], env=env)

    assert result.exit_code == 1
    assert json.loads(result.stdout)["error"]["code"] == "format_error"


def test_compare_and_verify(workspace: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    target = workspace / "notes.txt"
    copy = workspace / "copy.txt"
    copy.write_bytes(target.read_bytes())

    compared = runner.invoke(cli, ["compare", str(target), str(copy), "--json"], env=env)
    assert compared.exit_code == 0
    assert json.loads(compared.stdout)["identical"] is True

    digest = hashlib.sha256(target.read_bytes()).hexdigest().upper()
    verified = runner.invoke(cli, ["verify", str(target), digest], env=env)
    assert verified.exit_code == 0
    assert "OK" in verified.output

    failed = runner.invoke(cli, ["verify", str(target), "0" * 64], env=env)
    assert failed.exit_code != 0
    assert "Integrity check failed" in failed.output


def test_archive_commands(workspace: Path, tmp_path: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    output = tmp_path / "out.zip"

    created = runner.invoke(
        cli, ["archive", "create", str(output), str(workspace / "nested")], env=env
    )
    assert created.exit_code == 0
    assert output.exists()

    validated = runner.invoke(cli, ["archive", "validate", str(output)], env=env)
    assert validated.exit_code == 0

    destination = tmp_path / "extracted"
    extracted = runner.invoke(cli, ["archive", "extract", str(output), str(destination)], env=env)
    assert extracted.exit_code == 0
    assert (destination / "nested" / "data.json").exists()


def test_bundle_json(tmp_path: Path, env: dict[str, Any]) -> None:
    ipa = tmp_path / "App.ipa"
    with zipfile.ZipFile(ipa, "w") as archive:
        archive.writestr(
            "Payload/App.app/Info.plist",
            plistlib.dumps({"CFBundleIdentifier": "com.example.app", "CFBundleName": "App"}),
        )
        archive.writestr("Payload/App.app/App", b"\xcf\xfa\xed\xfe" + b"\x00" * 28)

    runner = CliRunner()
    result = runner.invoke(cli, ["bundle", str(ipa), "--json"], env=env)

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["bundle_identifier"] == "com.example.app"
    assert payload["display_name"] == "App"
    assert payload["executable_count"] == 1


def test_bulk_commands(workspace: Path, tmp_path: Path, env: dict[str, Any]) -> None:
    runner = CliRunner()
    destination = tmp_path / "dest"
    destination.mkdir()

    copied = runner.invoke(
        cli, ["cp", str(workspace / "notes.txt"), str(destination), "--json"], env=env
    )
    assert copied.exit_code == 0
    assert json.loads(copied.stdout)["succeeded"] == 1
    assert (destination / "notes.txt").exists()

    moved = runner.invoke(cli, ["mv", str(workspace / "Demo"), str(destination)], env=env)
    assert moved.exit_code == 0
    assert (destination / "Demo").exists()
    assert not (workspace / "Demo").exists()

    removed = runner.invoke(
        cli,
        ["rm", str(destination / "notes.txt"), str(destination / "missing"), "--json"],
        env=env,
    )
    assert removed.exit_code == 0
    payload = json.loads(removed.stdout)
    assert payload["succeeded"] == 1
    assert [item["ok"] for item in payload["items"]] == [True, False]
