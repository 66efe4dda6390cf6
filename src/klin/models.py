from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


DEFAULT_FILE_NAME = "Config.klin"


class KlinSettings(BaseModel):
    """
    Construction settings for a `Klin` store.

    Fields
    - path: full path of the backing file (default `./Config.klin`).
    - auto_save: save after every `set` (default True).
    - fernet_key: optional urlsafe base64 Fernet key; when set the file is
      encrypted at rest.

    Notes
    - `auto_save` accepts the usual string spellings when loaded from the
      environment ("1"/"0", "true"/"false", "yes"/"no", "on"/"off").
    """

    path: Path = Field(
        default_factory=lambda: Path(".") / DEFAULT_FILE_NAME,
        description="Backing file path",
    )
    auto_save: bool = Field(default=True, description="Save after every set")
    fernet_key: Optional[str] = Field(
        default=None,
        description="Fernet key for encryption at rest (None for plain text)",
    )
