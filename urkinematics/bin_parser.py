"""Big-endian binary parsing and serialization of the robot's wire format."""

from __future__ import annotations

import struct
from enum import Enum
from types import TracebackType
from typing import Optional, Union

from urkinematics.exceptions import UrException

Value = Union[int, float, bool]

_PARSE_ERROR = (
    "Could not parse received package. This can occur if the driver is started while the robot is "
    "booting - please restart the driver once the robot has finished booting. "
    "If the problem persists after the robot has booted, please contact the package maintainer."
)


class ValueKind(Enum):
    """Primitive types found in packages, each with its big-endian struct code."""

    UINT8 = "B"
    INT8 = "b"
    UINT16 = "H"
    INT16 = "h"
    UINT32 = "I"
    INT32 = "i"
    UINT64 = "Q"
    INT64 = "q"
    FLOAT = "f"
    DOUBLE = "d"
    BOOL = "?"

    @property
    def struct(self) -> struct.Struct:
        return struct.Struct(">" + self.value)

    @property
    def size(self) -> int:
        return self.struct.size


class BinParser:
    """Reads values sequentially from a byte buffer.

    A sub-parser covers part of its parent's remaining bytes; when it is closed
    (used as a context manager) the parent continues where the sub-parser stopped.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview]) -> None:
        self._data = bytes(data)
        self._pos = 0
        self._end = len(self._data)
        self._parent: Optional[BinParser] = None

    def sub_parser(self, length: int) -> "BinParser":
        """Return a parser over the next ``length`` bytes of this one."""
        if length < 0 or not self.check_size(length):
            raise UrException(_PARSE_ERROR)
        child = BinParser.__new__(BinParser)
        child._data = self._data
        child._pos = self._pos
        child._end = self._pos + length
        child._parent = self
        return child

    def close(self) -> None:
        """Hand the current position back to the parent parser, if any."""
        if self._parent is not None:
            self._parent._pos = self._pos

    def __enter__(self) -> "BinParser":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def peek(self, kind: ValueKind) -> Value:
        """Decode the next value of ``kind`` without advancing."""
        if not self.check_size(kind.size):
            raise UrException(_PARSE_ERROR)
        (value,) = kind.struct.unpack_from(self._data, self._pos)
        return value

    def parse(self, kind: ValueKind) -> Value:
        """Decode the next value of ``kind`` and advance past it."""
        value = self.peek(kind)
        self._pos += kind.size
        return value

    def parse_array(self, kind: ValueKind, count: int) -> list[Value]:
        """Decode ``count`` consecutive values of ``kind``."""
        return [self.parse(kind) for _ in range(count)]

    def parse_string(self, length: int) -> str:
        """Decode the next ``length`` bytes as text."""
        if length < 0 or not self.check_size(length):
            raise UrException(_PARSE_ERROR)
        raw = self._data[self._pos:self._pos + length]
        self._pos += length
        return raw.decode("utf-8", errors="replace")

    def parse_short_string(self) -> str:
        """Decode a string preceded by a one-byte length."""
        length = self.parse(ValueKind.UINT8)
        return self.parse_string(int(length))

    def parse_remainder(self) -> str:
        """Decode all remaining bytes as text."""
        return self.parse_string(self.remaining())

    def raw_data(self) -> bytes:
        """Return all remaining bytes unparsed and consume them."""
        raw = self._data[self._pos:self._end]
        self.consume()
        return raw

    def consume(self, nbytes: Optional[int] = None) -> None:
        """Skip ``nbytes`` bytes, or everything that remains if omitted."""
        if nbytes is None:
            self._pos = self._end
            return
        if nbytes < 0 or not self.check_size(nbytes):
            raise UrException(_PARSE_ERROR)
        self._pos += nbytes

    def check_size(self, nbytes: int) -> bool:
        """Whether at least ``nbytes`` bytes remain unparsed."""
        return nbytes <= self.remaining()

    def remaining(self) -> int:
        """Number of bytes not yet parsed."""
        return self._end - self._pos

    def empty(self) -> bool:
        """Whether every byte has been parsed."""
        return self._pos == self._end

    def __repr__(self) -> str:
        return f"BinParser(pos={self._pos}, end={self._end}, remaining={self.remaining()})"


def serialize(kind: ValueKind, value: Value) -> bytes:
    """Encode ``value`` as ``kind`` in network byte order."""
    return kind.struct.pack(value)


def serialize_string(value: str) -> bytes:
    """Encode a string as its raw bytes, without a length prefix."""
    return value.encode("utf-8")