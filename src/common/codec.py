"""
Text codec for TypedStore.

Format (UTF-8), one record per non-empty kind:

    <tag>|<json object>

e.g. `bool|{"dark_mode":true,"telemetry":false}`. The payload is JSON so keys
and values may contain `|`, `=` or line breaks without corrupting the file.
Non-ASCII characters are written as JSON escapes, so encoded text is ASCII.
"""

from __future__ import annotations

import json
import logging
from typing import Iterable, List, Tuple

from pydantic import ValidationError

from .typed_store import TypedStore
from .value_types import ValueType


logger = logging.getLogger(__name__)

RECORD_SEPARATOR = "|"


def _dump_mapping(mapping) -> str:
    # Deterministic JSON: stable key order, no extra whitespace
    return json.dumps(dict(mapping), ensure_ascii=True, separators=(",", ":"), sort_keys=True)


def encode(store: TypedStore) -> str:
    """Serialize every non-empty inner mapping, in ValueType declaration order."""
    inner_by_kind = dict(store.all_entries())
    lines: List[str] = []
    for vt in ValueType:
        inner = inner_by_kind.get(vt)
        if not inner:
            continue
        lines.append(f"{vt.tag}{RECORD_SEPARATOR}{_dump_mapping(inner)}")
    return "".join(line + "\n" for line in lines)


def _decode_lines(lines: Iterable[Tuple[int, str]]) -> TypedStore:
    store = TypedStore()
    for lineno, line in lines:
        line = line.rstrip("\r")
        if not line.strip():
            continue
        tag, sep, payload = line.partition(RECORD_SEPARATOR)
        if not sep:
            logger.warning("Skipping record %d: missing %r separator", lineno, RECORD_SEPARATOR)
            continue
        try:
            vt = ValueType.from_tag(tag.strip())
        except KeyError:
            logger.debug("Skipping record %d: unknown type tag %r", lineno, tag)
            continue
        try:
            mapping = vt.parse_mapping(json.loads(payload))
        except (ValueError, ValidationError, OverflowError, RecursionError) as ex:
            logger.warning("Skipping record %d (%s): %s", lineno, vt.tag, ex)
            continue
        store.add_mapping(vt, mapping)
    return store


def decode(text: str) -> TypedStore:
    """Parse records into a TypedStore.

    Bad records are skipped one by one: a missing separator, an unknown tag,
    invalid JSON, or a payload that isn't an object of the tag's value type.
    Several records with the same tag are merged, later keys winning.
    """
    # Split on \n only: str.splitlines would also break on U+2028 etc.
    return _decode_lines(enumerate(text.split("\n"), start=1))


def decode_bytes(data: bytes) -> TypedStore:
    """Like `decode`, but lines that are not valid UTF-8 are skipped too."""

    def lines() -> Iterable[Tuple[int, str]]:
        for lineno, raw in enumerate(data.split(b"\n"), start=1):
            try:
                yield lineno, raw.decode("utf-8")
            except UnicodeDecodeError:
                logger.warning("Skipping record %d: not valid UTF-8", lineno)

    return _decode_lines(lines())
