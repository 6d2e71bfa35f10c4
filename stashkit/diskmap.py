"""Immutable on-disk key/value storage.

A diskmap file is written once by a :class:`DiskMapWriter` and then served by a
:class:`DiskMapReader`.  Keys may repeat; :meth:`DiskMapReader.read` returns the
value written last for a key while :meth:`DiskMapReader.read_all` returns them
all in write order.

File layout (all numbers are little-endian signed 64-bit integers)::

    <reserved header, 64 bytes>
        [index offset]
        [number of key/value pairs]
    <data section>
        [value bytes] ...
    <index section>
        [data offset] [data length] [key length] [key] ...
"""

from __future__ import annotations

import os
import struct
import threading
from dataclasses import dataclass
from typing import BinaryIO, Iterator

RESERVED_HEADER = 64

_INT64 = struct.Struct("<q")
_HEADER = struct.Struct("<qq")
_ENTRY = struct.Struct("<qqq")


class KeyNotFoundError(KeyError):
    """Raised when a searched-for key is not in the diskmap."""


@dataclass(frozen=True)
class KeyValue:
    """A key and the value stored at it."""

    key: bytes
    value: bytes


@dataclass(frozen=True)
class _Entry:
    offset: int
    length: int
    key: bytes


class DiskMapWriter:
    """Writes key/value pairs to a new diskmap file.  Thread-safe."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = os.fspath(path)
        self._file: BinaryIO = open(self._path, "w+b")
        try:
            os.chmod(self._path, 0o600)
            self._file.seek(RESERVED_HEADER)
        except OSError:
            self._file.close()
            raise
        self._index: list[_Entry] = []
        self._offset = RESERVED_HEADER
        self._lock = threading.Lock()
        self._closed = False

    def write(self, key: bytes, value: bytes) -> None:
        """Append a key/value pair.  Duplicate keys are kept."""
        key = bytes(key)
        value = bytes(value)
        with self._lock:
            if self._closed:
                raise ValueError("diskmap writer is closed")
            self._file.write(value)
            self._index.append(_Entry(self._offset, len(value), key))
            self._offset += len(value)

    def close(self) -> None:
        """Write the index and header, sync the file to disk and close it."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                for entry in self._index:
                    self._file.write(_ENTRY.pack(entry.offset, entry.length, len(entry.key)))
                    self._file.write(entry.key)
                self._file.seek(0)
                self._file.write(_HEADER.pack(self._offset, len(self._index)))
                self._file.flush()
                os.fsync(self._file.fileno())
            finally:
                self._file.close()

    def __enter__(self) -> "DiskMapWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class DiskMapReader:
    """Reads a diskmap file written by :class:`DiskMapWriter`.  Thread-safe."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._file: BinaryIO = open(os.fspath(path), "rb")
        self._lock = threading.Lock()
        try:
            self._index = self._load_index()
        except Exception:
            self._file.close()
            raise

    def _read_exact(self, size: int, what: str) -> bytes:
        data = self._file.read(size)
        if len(data) != size:
            raise ValueError(f"cannot read {what}: unexpected end of file")
        return data

    def _load_index(self) -> dict[bytes, list[tuple[int, int]]]:
        (offset,) = _INT64.unpack(self._read_exact(8, "index offset"))
        (num,) = _INT64.unpack(
            self._read_exact(8, "number of entries from reserved header")
        )
        if offset < 0 or num < 0:
            raise ValueError("corrupt diskmap header")
        self._file.seek(offset)
        index: dict[bytes, list[tuple[int, int]]] = {}
        for _ in range(num):
            data_offset, data_length, key_length = _ENTRY.unpack(
                self._read_exact(_ENTRY.size, "an index entry")
            )
            if key_length < 0:
                raise ValueError("corrupt key length in index")
            key = self._read_exact(key_length, "a key from the index")
            index.setdefault(key, []).append((data_offset, data_length))
        return index

    def _read_value(self, offset: int, length: int) -> bytes:
        self._file.seek(offset)
        data = self._file.read(length)
        if len(data) != length:
            raise ValueError("error reading value from file: unexpected end of file")
        return data

    def read(self, key: bytes) -> bytes:
        """Return the value written last for ``key``.

        Raises KeyNotFoundError when the key is absent.
        """
        key = bytes(key)
        with self._lock:
            locations = self._index.get(key)
            if not locations:
                raise KeyNotFoundError(key)
            return self._read_value(*locations[-1])

    def read_all(self, key: bytes) -> list[bytes]:
        """Return every value stored at ``key`` in write order; empty if absent."""
        key = bytes(key)
        with self._lock:
            return [self._read_value(*loc) for loc in self._index.get(key, [])]

    def items(self) -> Iterator[KeyValue]:
        """Yield each distinct key with its last-written value."""
        for key in list(self._index):
            yield KeyValue(key, self.read(key))

    def close(self) -> None:
        """Close the underlying file."""
        with self._lock:
            self._file.close()

    def __enter__(self) -> "DiskMapReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def new(path: str | os.PathLike[str]) -> DiskMapWriter:
    """Create a diskmap file at ``path`` and return a writer for it."""
    return DiskMapWriter(path)


def open_map(path: str | os.PathLike[str]) -> DiskMapReader:
    """Open a diskmap file for reading."""
    return DiskMapReader(path)