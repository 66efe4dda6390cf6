from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from cryptography.fernet import Fernet, InvalidToken

from common.codec import decode_bytes, encode
from common.files import LocalFiles
from common.typed_store import TypedStore
from common.value_types import Kind

from .models import DEFAULT_FILE_NAME, KlinSettings


logger = logging.getLogger(__name__)

# Environment variable names for convenience configuration
ENV_PATH = "KLIN_PATH"
ENV_AUTO_SAVE = "KLIN_AUTO_SAVE"
ENV_FERNET_KEY = "KLIN_FERNET_KEY"


def _fernet_for(key: Optional[str | bytes]) -> Optional[Fernet]:
    # Keys come from Fernet.generate_key(); env/settings hand them over as str
    if not key:
        return None
    return Fernet(key.encode("ascii") if isinstance(key, str) else key)


def _dump_store(store: TypedStore, fernet: Optional[Fernet]) -> bytes:
    payload = encode(store).encode("utf-8")
    if fernet is not None:
        payload = fernet.encrypt(payload)
    return payload


def _load_store(data: bytes, fernet: Optional[Fernet]) -> TypedStore:
    # A freshly created file is empty, never a token
    if not data:
        return TypedStore()
    if fernet is not None:
        try:
            data = fernet.decrypt(data)
        except InvalidToken as ex:
            raise ValueError("Failed to decrypt store: invalid Fernet token") from ex
    return decode_bytes(data)


class Klin:
    """
    Typed settings store persisted to a single hidden, read-only local file.

    Usage
    - `Klin()` binds to `./Config.klin`; `Klin.open(path)` takes a full path.
    - The file is read on construction; a missing file is created empty.
    - `set()` saves immediately while `auto_save_enabled` is True; otherwise
      call `save()`. A save rewrites the whole file (no atomic rename, so a
      crash mid-write can leave it truncated).
    - With `fernet_key` the file content is Fernet-encrypted.

    Environment variables (optional, see `from_env`)
    - `KLIN_PATH`:       full path of the store file
    - `KLIN_AUTO_SAVE`:  "true"/"false" (default true)
    - `KLIN_FERNET_KEY`: urlsafe base64-encoded key for Fernet

    I/O errors (OSError) propagate to the caller; the file's at-rest
    attributes are restored before they do.
    """

    def __init__(
        self,
        name: str = DEFAULT_FILE_NAME,
        directory: os.PathLike[str] | str = ".",
        *,
        auto_save: bool = True,
        fernet_key: Optional[str | bytes] = None,
        files: Optional[LocalFiles] = None,
    ) -> None:
        self.auto_save_enabled = auto_save
        self._path = Path(directory) / name
        self._files = files or LocalFiles()
        self._fernet = _fernet_for(fernet_key)
        self._store = self._load()

    # -------- Construction helpers --------
    @classmethod
    def open(cls, path: os.PathLike[str] | str, **kwargs: Any) -> "Klin":
        p = Path(path)
        return cls(p.name, p.parent, **kwargs)

    @classmethod
    def from_settings(cls, settings: KlinSettings, *, files: Optional[LocalFiles] = None) -> "Klin":
        return cls.open(
            settings.path,
            auto_save=settings.auto_save,
            fernet_key=settings.fernet_key,
            files=files,
        )

    @classmethod
    def from_env(cls, *, files: Optional[LocalFiles] = None) -> "Klin":
        raw = {
            "path": os.environ.get(ENV_PATH),
            "auto_save": os.environ.get(ENV_AUTO_SAVE),
            "fernet_key": os.environ.get(ENV_FERNET_KEY),
        }
        settings = KlinSettings.model_validate({k: v for k, v in raw.items() if v})
        return cls.from_settings(settings, files=files)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def store(self) -> TypedStore:
        return self._store

    # -------- Core operations --------
    def _load(self) -> TypedStore:
        data = self._files.read_bytes(self._path)
        if data is None:
            self._files.create(self._path)
            return TypedStore()
        store = _load_store(data, self._fernet)
        logger.debug("Loaded %d entries from %s", len(store), self._path)
        return store

    def save(self) -> None:
        """Encode the full in-memory state and overwrite the file."""
        self._files.write_bytes(self._path, _dump_store(self._store, self._fernet))
        logger.debug("Saved %d entries to %s", len(self._store), self._path)

    def get(self, key: str, kind: Kind) -> Any:
        return self._store.get(key, kind)

    def try_get(self, key: str, kind: Kind) -> Tuple[Optional[Any], bool]:
        return self._store.try_get(key, kind)

    def contains_key(self, key: str, kind: Kind) -> bool:
        return self._store.contains_key(key, kind)

    def set(self, key: str, value: Any, kind: Optional[Kind] = None) -> None:
        self._store.set(key, value, kind)
        if self.auto_save_enabled:
            self.save()

    def set_many(self, mapping: Mapping[str, Any], kind: Kind) -> None:
        """Merge a whole mapping of one kind; saves once when auto-saving."""
        self._store.add_mapping(kind, mapping)
        if self.auto_save_enabled:
            self.save()


# -------- Convenience top-level helpers --------
def load_store(
    path: os.PathLike[str] | str,
    *,
    fernet_key: Optional[str | bytes] = None,
    files: Optional[LocalFiles] = None,
) -> TypedStore:
    return Klin.open(path, auto_save=False, fernet_key=fernet_key, files=files).store


def save_store(
    store: TypedStore,
    path: os.PathLike[str] | str,
    *,
    fernet_key: Optional[str | bytes] = None,
    files: Optional[LocalFiles] = None,
) -> None:
    fernet = _fernet_for(fernet_key)
    (files or LocalFiles()).write_bytes(Path(path), _dump_store(store, fernet))
