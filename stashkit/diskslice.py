"""An on-disk array of byte values that is read without loading it into memory.

A diskslice file is written once by a :class:`SliceWriter` and served by a
:class:`SliceReader`.  Reading an entry without a cached index costs two seeks
and three reads.  With a cached index it costs one seek and one read.  Every
131,072 entries use about 1 MiB of cache.

File layout (all numbers are little-endian signed 64-bit integers)::

    <reserved header, 64 bytes>
        [index offset]
        [number of entries]
    <data section>
        [value bytes] ...
    <index section>
        [data offset] [data length] ...
"""

from __future__ import annotations

import os
import struct
import threading
from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterator, Optional

RESERVED_HEADER = 64

_HEADER = struct.Struct("<qq")
_ENTRY = struct.Struct("<qq")

Interceptor = Callable[[bytes], bytes]


@dataclass(frozen=True)
class Value:
    """A value produced by :meth:`SliceReader.range` and the index it was at."""

    index: int
    value: bytes


class SliceWriter:
    """Writes an array of byte values to a new diskslice file.  Thread-safe.

    ``intercept``, when given, transforms every value before it is stored;
    it is most often used to compress data.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        intercept: Optional[Interceptor] = None,
    ) -> None:
        self._path = os.fspath(path)
        self._intercept = intercept
        self._file: BinaryIO = open(self._path, "w+b")
        try:
            os.chmod(self._path, 0o600)
            self._file.seek(RESERVED_HEADER)
        except OSError:
            self._file.close()
            raise
        self._index: list[tuple[int, int]] = []
        self._offset = RESERVED_HEADER
        self._lock = threading.Lock()
        self._closed = False

    def write(self, data: bytes) -> None:
        """Append ``data`` as the next entry of the slice."""
        data = bytes(data)
        if self._intercept is not None:
            data = bytes(self._intercept(data))
        with self._lock:
            if self._closed:
                raise ValueError("diskslice writer is closed")
            self._file.write(data)
            self._index.append((self._offset, len(data)))
            self._offset += len(data)

    def close(self) -> None:
        """Write the index and header, sync the file to disk and close it."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                for offset, length in self._index:
                    self._file.write(_ENTRY.pack(offset, length))
                self._file.seek(0)
                self._file.write(_HEADER.pack(self._offset, len(self._index)))
                self._file.flush()
                os.fsync(self._file.fileno())
            finally:
                self._file.close()

    def __enter__(self) -> "SliceWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class SliceReader:
    """Reads a diskslice file written by :class:`SliceWriter`.  Thread-safe.

    ``intercept``, when given, transforms every value after it is read; it is
    most often used to decompress data.  ``cache_index`` keeps the data
    offsets in memory to cut disk access on reads and ranges.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        intercept: Optional[Interceptor] = None,
        cache_index: bool = False,
    ) -> None:
        self._intercept = intercept
        self._lock = threading.Lock()
        self._file: BinaryIO = open(os.fspath(path), "rb")
        self._offsets: Optional[list[int]] = None
        self._last_size = 0
        try:
            header = self._file.read(_HEADER.size)
            if len(header) != _HEADER.size:
                raise ValueError("cannot read diskslice header: unexpected end of file")
            self._index_offset, self._len = _HEADER.unpack(header)
            if self._index_offset < 0 or self._len < 0:
                raise ValueError("corrupt diskslice header")
            if cache_index:
                self._load_offsets()
        except Exception:
            self._file.close()
            raise

    def _load_offsets(self) -> None:
        self._file.seek(self._index_offset)
        raw = self._file.read(_ENTRY.size * self._len)
        if len(raw) != _ENTRY.size * self._len:
            raise ValueError("cannot read the diskslice index: unexpected end of file")
        entries = list(_ENTRY.iter_unpack(raw))
        self._offsets = [offset for offset, _ in entries]
        self._last_size = entries[-1][1] if entries else 0

    def __len__(self) -> int:
        return self._len

    def _locate(self, i: int) -> tuple[int, int]:
        if self._offsets is not None:
            offset = self._offsets[i]
            if i + 1 < self._len:
                return offset, self._offsets[i + 1] - offset
            return offset, self._last_size
        self._file.seek(self._index_offset + i * _ENTRY.size)
        raw = self._file.read(_ENTRY.size)
        if len(raw) != _ENTRY.size:
            raise ValueError("cannot read an index entry: unexpected end of file")
        return _ENTRY.unpack(raw)

    def read(self, i: int) -> bytes:
        """Return the value at index ``i``.

        Raises IndexError when ``i`` is outside ``0 <= i < len(self)``.
        """
        if i < 0 or i >= self._len:
            raise IndexError("index out of bounds")
        with self._lock:
            offset, length = self._locate(i)
            self._file.seek(offset)
            data = self._file.read(length)
        if len(data) != length:
            raise ValueError("error reading value from file: unexpected end of file")
        if self._intercept is not None:
            data = bytes(self._intercept(data))
        return data

    def range(self, start: int = 0, end: int = -1) -> Iterator[Value]:
        """Iterate over entries from ``start`` (inclusive) to ``end`` (exclusive).

        A negative ``end`` means the end of the slice.  Raises ValueError when
        ``start`` is negative or ``end`` is past the length of the slice.
        """
        if start < 0:
            raise ValueError("range cannot have start value < 0")
        if end > self._len:
            raise ValueError("range cannot have end value > the array length")
        if end < 0:
            end = self._len
        return self._iterate(start, end)

    def _iterate(self, start: int, end: int) -> Iterator[Value]:
        for i in range(start, end):
            yield Value(i, self.read(i))

    def close(self) -> None:
        """Close the underlying file."""
        with self._lock:
            self._file.close()

    def __enter__(self) -> "SliceReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()