"""Tests for utility functions."""

from __future__ import annotations

import io
import os
import tarfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from termstrap.utils import (
    CommandError,
    ask_yes_no,
    download_file,
    extract_archive,
    log,
    prepend_to_path,
    run_command,
)


@pytest.mark.parametrize(
    ("answer", "default", "expected"),
    [
        ("", True, True),
        ("", False, False),
        ("y", False, True),
        ("Yes", False, True),
        ("n", True, False),
        ("nope", True, False),
        ("  Y  ", False, True),
    ],
)
def test_ask_yes_no(
    monkeypatch: pytest.MonkeyPatch,
    answer: str,
    default: bool,  # noqa: FBT001
    expected: bool,  # noqa: FBT001
) -> None:
    monkeypatch.setattr("builtins.input", lambda *_args: answer)
    assert ask_yes_no("Continue?", default=default) is expected


def test_log_prefixes(capsys: pytest.CaptureFixture[str]) -> None:
    log("hello")
    log("done", "success")
    log("careful", "warning")
    log("broken", "error")

    out = capsys.readouterr().out
    assert "[INFO] hello" in out
    assert "[SUCCESS] done" in out
    assert "[WARNING] careful" in out
    assert "[ERROR] broken" in out


def test_run_command_raises_on_failure() -> None:
    with pytest.raises(CommandError) as exc_info:
        run_command("exit 3")
    assert exc_info.value.returncode == 3
    assert exc_info.value.command == "exit 3"


def test_run_command_success() -> None:
    run_command("true")


def test_prepend_to_path_is_idempotent(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("PATH", "/usr/bin")

    prepend_to_path(tmp_path)
    prepend_to_path(tmp_path)

    assert os.environ["PATH"].split(os.pathsep) == [str(tmp_path), "/usr/bin"]


def test_download_file(tmp_path: Path) -> None:
    response = MagicMock()
    response.iter_content.return_value = [b"abc", b"def"]

    with patch("termstrap.utils.requests.get", return_value=response) as get:
        result = download_file("https://example.com/file", tmp_path / "sub" / "file")

    get.assert_called_once_with("https://example.com/file", stream=True, timeout=30)
    assert result.read_bytes() == b"abcdef"


def test_download_file_wraps_errors(tmp_path: Path) -> None:
    with (
        patch(
            "termstrap.utils.requests.get",
            side_effect=requests.ConnectionError("no route"),
        ),
        pytest.raises(RuntimeError, match="Failed to download"),
    ):
        download_file("https://example.com/file", tmp_path / "file")


def test_extract_tarball(tmp_path: Path) -> None:
    archive = tmp_path / "archive.tar.gz"
    with tarfile.open(archive, "w:gz") as tar:
        info = tarfile.TarInfo("bin/tool")
        info.size = 4
        tar.addfile(info, io.BytesIO(b"tool"))

    extract_archive(archive, tmp_path / "out")

    assert (tmp_path / "out" / "bin" / "tool").read_bytes() == b"tool"


@pytest.mark.filterwarnings("error::DeprecationWarning")
def test_extract_tarball_rejects_escaping_members(tmp_path: Path) -> None:
    archive = tmp_path / "archive.tar.gz"
    with tarfile.open(archive, "w:gz") as tar:
        info = tarfile.TarInfo("../outside")
        info.size = 4
        tar.addfile(info, io.BytesIO(b"evil"))

    with pytest.raises(tarfile.FilterError):
        extract_archive(archive, tmp_path / "out")

    assert not (tmp_path / "outside").exists()


def test_extract_unsupported(tmp_path: Path) -> None:
    archive = tmp_path / "archive.rar"
    archive.write_bytes(b"Rar!")

    with pytest.raises(ValueError, match="Unsupported archive format"):
        extract_archive(archive, tmp_path / "out")
