from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from common.files import LOCKED_MODE, LocalFiles


posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")


def _mode(p: Path) -> int:
    return stat.S_IMODE(os.stat(p).st_mode)


def test_read_missing_returns_none(tmp_path: Path):
    assert LocalFiles().read_bytes(tmp_path / "nope.klin") is None


@posix_only
def test_create_makes_empty_locked_file(tmp_path: Path):
    p = tmp_path / "nested" / "Config.klin"
    LocalFiles().create(p)

    assert p.exists()
    assert p.read_bytes() == b""
    assert _mode(p) == LOCKED_MODE


@posix_only
def test_write_then_read_restores_lock(tmp_path: Path):
    files = LocalFiles()
    p = tmp_path / "Config.klin"
    files.write_bytes(p, b"int|{}\n")
    assert _mode(p) == LOCKED_MODE

    assert files.read_bytes(p) == b"int|{}\n"
    assert _mode(p) == LOCKED_MODE


class _RecordingFiles(LocalFiles):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    def set_readable(self, path: Path) -> None:
        self.calls.append("readable")

    def set_hidden(self, path: Path) -> None:
        self.calls.append("hidden")


def test_unlocked_restores_on_error(tmp_path: Path):
    files = _RecordingFiles()
    with pytest.raises(OSError):
        with files.unlocked(tmp_path / "x"):
            raise OSError("disk full")
    assert files.calls == ["readable", "hidden"]


def test_windows_attributes_are_used_on_windows(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    from common import files as files_mod

    seen: list[int] = []
    monkeypatch.setattr(files_mod, "_set_windows_attributes", lambda path, flags: seen.append(flags))

    files = LocalFiles(windows=True)
    p = tmp_path / "Config.klin"
    files.set_readable(p)
    files.set_hidden(p)
    assert seen == [
        files_mod.FILE_ATTRIBUTE_NORMAL,
        files_mod.FILE_ATTRIBUTE_HIDDEN | files_mod.FILE_ATTRIBUTE_READONLY,
    ]
