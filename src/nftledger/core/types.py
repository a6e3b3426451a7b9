"""
Value types shared by every ledger component.

- Id: tagged token identifier (fixed-width unsigned integer or byte string)
- AccountId: opaque 32-byte account identity
- ZERO_ACCOUNT: reserved identity that can never own or receive a token
"""

from __future__ import annotations

import functools
import hashlib
from dataclasses import dataclass
from enum import Enum

ACCOUNT_ID_LENGTH = 32


class IdKind(Enum):
    """Variants of a token identifier, in their structural sort order."""

    U8 = 0
    U16 = 1
    U32 = 2
    U64 = 3
    U128 = 4
    BYTES = 5

    @property
    def bits(self) -> int | None:
        """Width of an integer variant, None for BYTES."""
        return _KIND_BITS.get(self)

    @property
    def is_integer(self) -> bool:
        return self is not IdKind.BYTES

    @property
    def max_value(self) -> int | None:
        """Largest value an integer variant can hold."""
        bits = self.bits
        if bits is None:
            return None
        return (1 << bits) - 1

    @classmethod
    def parse(cls, name: str) -> "IdKind":
        """Resolve a variant from a case-insensitive name such as "u64"."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown id kind: {name!r}") from None


_KIND_BITS = {
    IdKind.U8: 8,
    IdKind.U16: 16,
    IdKind.U32: 32,
    IdKind.U64: 64,
    IdKind.U128: 128,
}


@functools.total_ordering
@dataclass(frozen=True)
class Id:
    """
    Token identifier.

    Equality and ordering are structural: ids are ordered by variant first
    (U8 < U16 < U32 < U64 < U128 < BYTES) and then by value, so
    ``Id.u8(1) != Id.u16(1)``.
    """

    kind: IdKind
    value: int | bytes

    def __post_init__(self) -> None:
        if not isinstance(self.kind, IdKind):
            raise TypeError(f"Id kind must be IdKind, got {type(self.kind).__name__}")

        if self.kind is IdKind.BYTES:
            if not isinstance(self.value, (bytes, bytearray, memoryview)):
                raise TypeError("BYTES id requires a bytes-like value")
            object.__setattr__(self, "value", bytes(self.value))
            return

        # bool is an int subclass; reject it explicitly
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"{self.kind.name} id requires an int value")
        if not 0 <= self.value <= self.kind.max_value:
            raise ValueError(
                f"{self.value} out of range for {self.kind.name} id "
                f"(0..{self.kind.max_value})"
            )

    # ==================== Constructors ====================

    @classmethod
    def u8(cls, value: int) -> "Id":
        return cls(IdKind.U8, value)

    @classmethod
    def u16(cls, value: int) -> "Id":
        return cls(IdKind.U16, value)

    @classmethod
    def u32(cls, value: int) -> "Id":
        return cls(IdKind.U32, value)

    @classmethod
    def u64(cls, value: int) -> "Id":
        return cls(IdKind.U64, value)

    @classmethod
    def u128(cls, value: int) -> "Id":
        return cls(IdKind.U128, value)

    @classmethod
    def bytes_(cls, value: bytes) -> "Id":
        return cls(IdKind.BYTES, value)

    @classmethod
    def from_value(cls, kind: IdKind | str, value: int | bytes) -> "Id":
        """Build an id from a variant (or its name) and a raw value."""
        if isinstance(kind, str):
            kind = IdKind.parse(kind)
        return cls(kind, value)

    # ==================== Conversions ====================

    def to_u128(self) -> int:
        """
        Widen the id to an unsigned 128-bit integer.

        Integer variants convert losslessly. A BYTES id converts only when it
        holds exactly 16 bytes, read big-endian.

        Raises:
            ValueError: If a BYTES id is not 16 bytes long
        """
        if self.kind.is_integer:
            return int(self.value)
        if len(self.value) != 16:
            raise ValueError(
                f"BYTES id of length {len(self.value)} cannot be read as u128"
            )
        return int.from_bytes(self.value, "big")

    def _sort_key(self) -> tuple[int, int | bytes]:
        return (self.kind.value, self.value)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Id):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __repr__(self) -> str:
        if self.kind is IdKind.BYTES:
            return f"Id.bytes_(0x{self.value.hex()})"
        return f"Id.{self.kind.name.lower()}({self.value})"


@dataclass(frozen=True)
class AccountId:
    """Opaque fixed-size account identity."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray, memoryview)):
            raise TypeError("AccountId requires a bytes-like value")
        raw = bytes(self.raw)
        if len(raw) != ACCOUNT_ID_LENGTH:
            raise ValueError(
                f"AccountId must be {ACCOUNT_ID_LENGTH} bytes, got {len(raw)}"
            )
        object.__setattr__(self, "raw", raw)

    @classmethod
    def from_hex(cls, value: str) -> "AccountId":
        """Parse a hex account, with or without a 0x prefix."""
        text = value.strip().lower()
        if text.startswith("0x"):
            text = text[2:]
        try:
            return cls(bytes.fromhex(text))
        except ValueError as exc:
            raise ValueError(f"Invalid account hex: {value!r}") from exc

    @classmethod
    def derive(cls, seed: bytes | str) -> "AccountId":
        """Deterministically derive an account from arbitrary seed material."""
        if isinstance(seed, str):
            seed = seed.encode()
        return cls(hashlib.sha3_256(seed).digest())

    @property
    def is_zero(self) -> bool:
        return not any(self.raw)

    def hex(self) -> str:
        return "0x" + self.raw.hex()

    def short(self) -> str:
        """Truncated form for log lines."""
        return self.hex()[:10]

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"AccountId({self.hex()})"


ZERO_ACCOUNT = AccountId(bytes(ACCOUNT_ID_LENGTH))
