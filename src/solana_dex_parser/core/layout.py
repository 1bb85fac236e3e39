"""
Bounds-checked binary readers for instruction and event payloads.

Two flavors share the same integer / pubkey primitives:

- ``FixedSchemaReader``: field-by-field decoding of records whose layout is
  fixed (Anchor events, instruction args). Whole records can be decoded at
  once from a ``construct.Struct`` schema.
- ``LengthPrefixedReader``: Borsh-style containers where strings, byte
  sequences and vectors carry an explicit u32 little-endian length.

No read ever goes past the end of the slice: a short read raises
``UnexpectedEnd``.
"""
from __future__ import annotations

import struct
from typing import Callable, List, TypeVar

from construct import ConstructError, Struct
from solders.pubkey import Pubkey

from solana_dex_parser.core.errors import DecodeError, UnexpectedEnd

T = TypeVar("T")

PUBKEY_SIZE = 32

# u32 length prefixes above this are rejected before any allocation
MAX_CONTAINER_LEN = 10 * 1024 * 1024

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")
_I8 = struct.Struct("<b")
_I16 = struct.Struct("<h")
_I32 = struct.Struct("<i")
_I64 = struct.Struct("<q")


class BinaryReader:
    """Cursor over a byte slice with little-endian primitives."""

    def __init__(self, data: bytes, offset: int = 0):
        self._data = bytes(data)
        if offset < 0 or offset > len(self._data):
            raise UnexpectedEnd(offset, 0, len(self._data))
        self._offset = offset

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return max(len(self._data) - self._offset, 0)

    def __len__(self) -> int:
        return len(self._data)

    def _check(self, length: int) -> None:
        if length < 0 or self._offset + length > len(self._data):
            raise UnexpectedEnd(length, self._offset, len(self._data))

    def _unpack(self, fmt: struct.Struct) -> int:
        self._check(fmt.size)
        value = fmt.unpack_from(self._data, self._offset)[0]
        self._offset += fmt.size
        return value

    def read_u8(self) -> int:
        return self._unpack(_U8)

    def read_u16(self) -> int:
        return self._unpack(_U16)

    def read_u32(self) -> int:
        return self._unpack(_U32)

    def read_u64(self) -> int:
        return self._unpack(_U64)

    def read_i8(self) -> int:
        return self._unpack(_I8)

    def read_i16(self) -> int:
        return self._unpack(_I16)

    def read_i32(self) -> int:
        return self._unpack(_I32)

    def read_i64(self) -> int:
        return self._unpack(_I64)

    def read_bool(self) -> bool:
        value = self.read_u8()
        if value > 1:
            raise DecodeError(f"invalid bool tag {value} at offset {self._offset - 1}")
        return value == 1

    def read_enum_tag(self, variants: int) -> int:
        """Read a 1-byte enum discriminant and check it is below ``variants``."""
        tag = self.read_u8()
        if tag >= variants:
            raise DecodeError(f"invalid enum tag {tag} (expected < {variants})")
        return tag

    def read_fixed(self, length: int) -> bytes:
        self._check(length)
        chunk = self._data[self._offset:self._offset + length]
        self._offset += length
        return chunk

    def read_pubkey(self) -> Pubkey:
        return Pubkey.from_bytes(self.read_fixed(PUBKEY_SIZE))

    def peek(self, length: int) -> bytes:
        self._check(length)
        return self._data[self._offset:self._offset + length]

    def skip(self, length: int) -> None:
        self._check(length)
        self._offset += length

    def require(self, length: int) -> None:
        """Fail unless at least ``length`` bytes remain."""
        self._check(length)

    def expect_exhausted(self) -> None:
        if self.remaining:
            raise DecodeError(f"{self.remaining} trailing bytes after record")


class FixedSchemaReader(BinaryReader):
    """Reader for records with an implicit, fixed layout."""

    def read_struct(self, schema: Struct):
        """Decode ``schema`` at the cursor and advance past it.

        Only the bytes in the slice are visible to construct, so a short
        buffer surfaces as ``UnexpectedEnd`` rather than an over-read.
        """
        size = schema.sizeof()
        self._check(size)
        try:
            parsed = schema.parse(self._data[self._offset:self._offset + size])
        except ConstructError as e:
            raise DecodeError(f"schema decode failed at offset {self._offset}: {e}") from e
        self._offset += size
        return parsed


class LengthPrefixedReader(BinaryReader):
    """Reader for containers with explicit u32 length prefixes."""

    def _read_len(self) -> int:
        length = self.read_u32()
        if length > MAX_CONTAINER_LEN:
            raise DecodeError(f"length prefix {length} exceeds limit")
        return length

    def read_bytes(self) -> bytes:
        length = self._read_len()
        return self.read_fixed(length)

    def read_string(self) -> str:
        return self.read_bytes().decode("utf-8", errors="replace")

    def read_vec(self, read_item: Callable[["LengthPrefixedReader"], T]) -> List[T]:
        count = self._read_len()
        # every element consumes at least one byte
        self._check(min(count, self.remaining + 1))
        return [read_item(self) for _ in range(count)]
