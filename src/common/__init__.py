"""
Common building blocks for klin.

Modules:
- value_types: the closed set of storable value kinds
- typed_store: in-memory store segregated by kind
- codec: line-per-kind text format
- files: local file access with hidden/read-only attribute handling
"""

__all__ = [
    "codec",
    "files",
    "typed_store",
    "value_types",
]
