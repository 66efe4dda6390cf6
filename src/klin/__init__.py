"""
Typed key-value settings store persisted to a single local file.

`Klin` binds a `TypedStore` (values segregated by kind: bool, int, float,
string) to a hidden, read-only file written in a line-per-kind text format.
"""

from common.typed_store import NotFoundError, TypedStore
from common.value_types import ValueType

from .models import KlinSettings
from .store import Klin, load_store, save_store

__all__ = [
    "Klin",
    "KlinSettings",
    "NotFoundError",
    "TypedStore",
    "ValueType",
    "load_store",
    "save_store",
]
