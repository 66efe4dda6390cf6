from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Type, Union

from pydantic import StrictBool, StrictFloat, StrictInt, StrictStr, TypeAdapter


class ValueType(Enum):
    """
    Closed set of value kinds a store can hold.

    Each member carries its record tag (as written to disk) and the Python type
    of its values. Declaration order is the order records are written in.
    """

    BOOL = ("bool", bool)
    INT = ("int", int)
    FLOAT = ("float", float)
    STRING = ("string", str)

    def __init__(self, tag: str, python_type: type) -> None:
        self.tag = tag
        self.python_type = python_type

    # -------- Lookup --------
    @classmethod
    def from_tag(cls, tag: str) -> "ValueType":
        """Return the member for a record tag; KeyError when unknown."""
        return _BY_TAG[tag]

    @classmethod
    def resolve(cls, kind: "Kind") -> "ValueType":
        """Accept either a member or the matching Python type."""
        if isinstance(kind, ValueType):
            return kind
        try:
            return _BY_PYTHON_TYPE[kind]
        except (KeyError, TypeError):
            raise TypeError(f"Unsupported value type: {kind!r}") from None

    @classmethod
    def of(cls, value: Any) -> "ValueType":
        """Infer the kind of a value. bool is checked before int."""
        if isinstance(value, bool):
            return cls.BOOL
        if isinstance(value, int):
            return cls.INT
        if isinstance(value, float):
            return cls.FLOAT
        if isinstance(value, str):
            return cls.STRING
        raise TypeError(f"Unsupported value type: {type(value).__name__}")

    # -------- Values --------
    def accepts(self, value: Any) -> bool:
        if self is ValueType.BOOL:
            return isinstance(value, bool)
        if isinstance(value, bool):
            return False
        if self is ValueType.FLOAT:
            return isinstance(value, (int, float))
        return isinstance(value, self.python_type)

    def normalize(self, value: Any) -> Any:
        """Check a value against this kind and return it as the kind's type."""
        if not self.accepts(value):
            raise TypeError(
                f"Value {value!r} of type {type(value).__name__} is not a valid {self.tag}"
            )
        return self.python_type(value)

    def parse_mapping(self, raw: Any) -> Dict[str, Any]:
        """Validate a decoded JSON object as a key -> value mapping of this kind.

        Raises pydantic.ValidationError if `raw` is not an object or any value
        has the wrong JSON type (e.g. `1` in a bool record).
        """
        validated = _ADAPTERS[self].validate_python(raw)
        return {key: self.python_type(value) for key, value in validated.items()}


Kind = Union[ValueType, Type[bool], Type[int], Type[float], Type[str]]

_BY_TAG: Dict[str, ValueType] = {member.tag: member for member in ValueType}
_BY_PYTHON_TYPE: Dict[type, ValueType] = {member.python_type: member for member in ValueType}

# Strict so JSON `true` is never accepted as an int and `1` never as a bool.
_ADAPTERS: Dict[ValueType, TypeAdapter] = {
    ValueType.BOOL: TypeAdapter(Dict[StrictStr, StrictBool]),
    ValueType.INT: TypeAdapter(Dict[StrictStr, StrictInt]),
    ValueType.FLOAT: TypeAdapter(Dict[StrictStr, Union[StrictFloat, StrictInt]]),
    ValueType.STRING: TypeAdapter(Dict[StrictStr, StrictStr]),
}
