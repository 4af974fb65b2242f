"""Primitive big-endian reads over a seekable ABX byte source."""

import io
import struct

from .errors import InvalidInternedStringIndex, InvalidUtf8Error, ReadError
from .protocol import INTERNED_NEW


class FastDataInput:
    """
    Reads the fixed-width, length-prefixed and interned values an ABX stream
    is built from. ``reader`` needs read/seek/tell; wrap pipes in
    ``SeekableReader`` first.

    The interned string table belongs to this instance alone and only grows.
    """

    def __init__(self, reader):
        self.reader = reader
        self._interned_strings: list[str] = []

    def _read_exact(self, length: int, field: str) -> bytes:
        data = b""
        while len(data) < length:
            chunk = self.reader.read(length - len(data))
            if not chunk:
                raise ReadError(field)
            data += chunk
        return data

    def read_byte(self) -> int:
        return self._read_exact(1, "byte")[0]

    def read_short(self) -> int:
        return struct.unpack(">H", self._read_exact(2, "short"))[0]

    def read_int(self) -> int:
        return struct.unpack(">i", self._read_exact(4, "int"))[0]

    def read_long(self) -> int:
        return struct.unpack(">q", self._read_exact(8, "long"))[0]

    def read_float(self) -> float:
        # Same bits as the int, reinterpreted
        return struct.unpack(">f", struct.pack(">i", self.read_int()))[0]

    def read_double(self) -> float:
        return struct.unpack(">d", struct.pack(">q", self.read_long()))[0]

    def read_utf(self) -> str:
        length = self.read_short()
        data = self._read_exact(length, "UTF string")
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidUtf8Error("UTF string") from None

    def read_interned_utf(self) -> str:
        index = self.read_short()
        if index == INTERNED_NEW:
            string = self.read_utf()
            self._interned_strings.append(string)
            return string
        if index >= len(self._interned_strings):
            raise InvalidInternedStringIndex(index)
        return self._interned_strings[index]

    def read_bytes(self, length: int) -> bytes:
        return self._read_exact(length, "bytes")

    def tell(self) -> int:
        return self.reader.tell()

    def seek(self, pos: int) -> None:
        self.reader.seek(pos, io.SEEK_SET)

    def is_eof(self) -> bool:
        current = self.reader.tell()
        end = self.reader.seek(0, io.SEEK_END)
        self.reader.seek(current, io.SEEK_SET)
        return current >= end

    @property
    def interned_strings(self) -> tuple[str, ...]:
        return tuple(self._interned_strings)
