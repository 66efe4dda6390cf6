from __future__ import annotations

import logging
import os
import stat
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional


logger = logging.getLogger(__name__)

# Windows file attribute flags (winnt.h)
FILE_ATTRIBUTE_READONLY = 0x01
FILE_ATTRIBUTE_HIDDEN = 0x02
FILE_ATTRIBUTE_NORMAL = 0x80

# POSIX has no hidden bit; at rest the file is owner read-only.
LOCKED_MODE = stat.S_IRUSR
UNLOCKED_MODE = stat.S_IRUSR | stat.S_IWUSR


def _set_windows_attributes(path: Path, flags: int) -> None:
    import ctypes

    if not ctypes.windll.kernel32.SetFileAttributesW(str(path), flags):
        raise ctypes.WinError()


class LocalFiles:
    """
    Local filesystem access for a store file.

    - `read_bytes` returns None when the file does not exist.
    - `set_hidden` / `set_readable` toggle the at-rest attributes: hidden and
      read-only on Windows, mode 0400 / 0600 elsewhere.
    - `unlocked(path)` clears the attributes for the duration of an I/O call
      and restores them on every exit path.
    """

    def __init__(self, *, windows: Optional[bool] = None) -> None:
        self._windows = sys.platform == "win32" if windows is None else windows

    # -------- Attributes --------
    def set_readable(self, path: Path) -> None:
        if self._windows:
            _set_windows_attributes(path, FILE_ATTRIBUTE_NORMAL)
        else:
            os.chmod(path, UNLOCKED_MODE)

    def set_hidden(self, path: Path) -> None:
        if self._windows:
            _set_windows_attributes(path, FILE_ATTRIBUTE_HIDDEN | FILE_ATTRIBUTE_READONLY)
        else:
            os.chmod(path, LOCKED_MODE)

    @contextmanager
    def unlocked(self, path: Path) -> Iterator[Path]:
        self.set_readable(path)
        try:
            yield path
        finally:
            self.set_hidden(path)

    # -------- I/O --------
    def create(self, path: Path) -> None:
        """Create an empty file (and missing parents), then lock it."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
        self.set_hidden(path)
        logger.debug("Created store file %s", path)

    def read_bytes(self, path: Path) -> Optional[bytes]:
        if not path.exists():
            return None
        with self.unlocked(path):
            return path.read_bytes()

    def write_bytes(self, path: Path, data: bytes) -> None:
        if not path.exists():
            self.create(path)
        with self.unlocked(path):
            path.write_bytes(data)
