"""Per-token key/value byte storage."""

from __future__ import annotations

from typing import Dict, List, Tuple

from .types import Id


def as_bytes(value: object, label: str) -> bytes:
    """Normalize a bytes-like value, rejecting everything else."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"attribute {label} must be bytes, got {type(value).__name__}")


class AttributeStore:
    """
    Attribute storage keyed by (token id, key).

    No existence check is made against the ledger: attributes may be written
    for a token that has not been minted yet, or for the collection id.
    """

    def __init__(self) -> None:
        self._data: Dict[Id, Dict[bytes, bytes]] = {}

    def set(self, id: Id, key: bytes, value: bytes) -> None:
        key = as_bytes(key, "key")
        value = as_bytes(value, "value")
        self._data.setdefault(id, {})[key] = value

    def get(self, id: Id, key: bytes) -> bytes | None:
        return self._data.get(id, {}).get(as_bytes(key, "key"))

    def keys(self, id: Id) -> List[bytes]:
        return list(self._data.get(id, {}))

    def items(self, id: Id) -> List[Tuple[bytes, bytes]]:
        return list(self._data.get(id, {}).items())

    def clear(self, id: Id) -> int:
        """Remove every attribute of a token; returns how many were removed."""
        return len(self._data.pop(id, {}))

    def __contains__(self, id: object) -> bool:
        return id in self._data
