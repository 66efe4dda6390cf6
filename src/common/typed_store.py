from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Set, Tuple

from .value_types import Kind, ValueType


class TypedStore:
    """
    In-memory settings container segregated by value kind.

    - Outer mapping: ValueType -> inner mapping; inner mapping: key -> value.
    - The same key may live under several kinds without collision.
    - `set` overwrites; nothing is ever pruned implicitly.
    - Not thread-safe; callers sharing an instance must serialize access.
    """

    def __init__(self) -> None:
        self._data: Dict[ValueType, Dict[str, Any]] = {}

    # -------- Lookup --------
    def get(self, key: str, kind: Kind) -> Any:
        """Return the value for (kind, key); raises NotFoundError when absent."""
        vt = ValueType.resolve(kind)
        inner = self._data.get(vt)
        if inner is None or key not in inner:
            raise NotFoundError(key, vt)
        return inner[key]

    def try_get(self, key: str, kind: Kind) -> Tuple[Optional[Any], bool]:
        """Return `(value, True)` if present, else `(None, False)`."""
        inner = self._data.get(ValueType.resolve(kind))
        if inner is None or key not in inner:
            return (None, False)
        return (inner[key], True)

    def contains_key(self, key: str, kind: Kind) -> bool:
        inner = self._data.get(ValueType.resolve(kind))
        return inner is not None and key in inner

    # -------- Mutation --------
    def set(self, key: str, value: Any, kind: Optional[Kind] = None) -> None:
        """Insert or overwrite (kind, key). The kind is inferred when omitted."""
        vt = ValueType.of(value) if kind is None else ValueType.resolve(kind)
        key = _check_key(key)
        normalized = vt.normalize(value)
        self._data.setdefault(vt, {})[key] = normalized

    def add_mapping(self, kind: Kind, mapping: Mapping[str, Any]) -> None:
        """Bulk-install a kind's inner mapping.

        Installed as-is when the kind has no entries yet; otherwise merged with
        incoming keys overwriting existing ones.
        """
        vt = ValueType.resolve(kind)
        incoming = {_check_key(key): vt.normalize(value) for key, value in mapping.items()}
        inner = self._data.get(vt)
        if inner is None:
            self._data[vt] = incoming
        else:
            inner.update(incoming)

    # -------- Export --------
    def all_entries(self) -> List[Tuple[ValueType, Mapping[str, Any]]]:
        """Snapshot of `(kind, read-only inner mapping)` pairs."""
        return [(vt, MappingProxyType(inner)) for vt, inner in self._data.items()]

    def triples(self) -> Set[Tuple[ValueType, str, Any]]:
        return {(vt, key, value) for vt, inner in self._data.items() for key, value in inner.items()}

    def __len__(self) -> int:
        return sum(len(inner) for inner in self._data.values())

    def __iter__(self) -> Iterator[Tuple[ValueType, Mapping[str, Any]]]:
        return iter(self.all_entries())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypedStore):
            return NotImplemented
        return self.triples() == other.triples()

    def __repr__(self) -> str:
        counts = ", ".join(f"{vt.tag}={len(inner)}" for vt, inner in self._data.items())
        return f"TypedStore({counts})"


def _check_key(key: Any) -> str:
    if not isinstance(key, str):
        raise TypeError(f"Keys must be str, not {type(key).__name__}")
    return key


class NotFoundError(KeyError):
    """Raised by `get` when no entry exists for the requested (kind, key)."""

    def __init__(self, key: str, kind: ValueType) -> None:
        super().__init__(f"No {kind.tag} entry for key {key!r}")
        self.key = key
        self.kind = kind
