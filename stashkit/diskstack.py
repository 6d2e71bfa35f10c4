"""A LIFO stack stored in a single file on local disk.

The file starts with a :class:`~stashkit.versioninfo.VersionInfo` header and
is followed by the entries, oldest first.  Each entry is its pickled value
followed by the value's length as a little-endian uint64, so the last entry
can be located from the end of the file.  The file grows and shrinks with
every push and pop.
"""

from __future__ import annotations

import os
import pickle
import struct
import threading
from typing import Any, BinaryIO

from stashkit.versioninfo import VersionInfo

_SIZE = struct.Struct("<Q")


class StackFull(Exception):
    """The stack reached its maximum depth; pop before pushing again."""


class StackEmpty(IndexError):
    """The stack had no entries."""


class DiskStack:
    """A stack of values of a single type kept in a file.  Thread-safe.

    ``data_type`` is the type of value stored (or a sample value of it).
    ``flush`` syncs the file to disk after every push and pop; turning it off
    is faster but may lose operations on a crash.  ``use_existing`` opens a
    stack file that already exists; otherwise the file must not exist.
    ``max_depth`` limits the number of entries; zero or less means no limit.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        data_type: Any,
        flush: bool = True,
        use_existing: bool = False,
        max_depth: int = 0,
    ) -> None:
        self._type: type = data_type if isinstance(data_type, type) else type(data_type)
        self._flush = flush
        self._max_depth = max_depth
        self._lock = threading.Lock()
        self._length = 0
        path = os.fspath(path)
        if use_existing:
            self._open_existing(path)
        else:
            self._create(path)

    def _create(self, path: str) -> None:
        f: BinaryIO = open(path, "x+b")
        try:
            header = VersionInfo().encode(f)
        except Exception:
            f.close()
            raise
        self._file = f
        self._header_size = header
        self._size = header

    def _open_existing(self, path: str) -> None:
        f: BinaryIO = open(path, "r+b")
        self._file = f
        try:
            _, header = VersionInfo.decode(f)
            self._header_size = header
            self._size = f.seek(0, os.SEEK_END)
            self._length = self._discover_length()
        except Exception:
            f.close()
            raise

    def _discover_length(self) -> int:
        """Walk every entry from the end to verify it decodes; return the count."""
        end = self._size
        count = 0
        while end > self._header_size:
            try:
                start, payload = self._read_entry(end)
                self._decode(payload)
            except ValueError as exc:
                raise ValueError(
                    f"while verifying the file, entry {count} had error: {exc}"
                ) from exc
            end = start
            count += 1
        if end != self._header_size:
            raise ValueError("stack file entries do not line up with the header")
        return count

    def _read_entry(self, end: int) -> tuple[int, bytes]:
        """Return the start offset and payload of the entry ending at ``end``."""
        size_at = end - _SIZE.size
        if size_at < self._header_size:
            raise ValueError("could not read the size of the next entry on the stack")
        self._file.seek(size_at)
        raw = self._file.read(_SIZE.size)
        if len(raw) != _SIZE.size:
            raise ValueError("could not read the size of the next entry on the stack")
        (n,) = _SIZE.unpack(raw)
        start = size_at - n
        if start < self._header_size:
            raise ValueError(f"entry size {n} reaches past the start of the data")
        self._file.seek(start)
        payload = self._file.read(n)
        if len(payload) != n:
            raise ValueError(f"data size was {n}, but only could read {len(payload)} back")
        return start, payload

    def _decode(self, payload: bytes) -> Any:
        try:
            value = pickle.loads(payload)
        except Exception as exc:
            raise ValueError(f"could not decode the stored data: {exc}") from exc
        if not isinstance(value, self._type):
            raise ValueError(
                f"stored data of type {type(value).__name__} is not "
                f"of type {self._type.__name__}"
            )
        return value

    def _sync(self) -> None:
        self._file.flush()
        if self._flush:
            os.fsync(self._file.fileno())

    def push(self, data: Any) -> None:
        """Push ``data`` onto the stack.

        Raises TypeError if ``data`` is not of the stack's type and StackFull
        when the maximum depth is reached.
        """
        if not isinstance(data, self._type):
            raise TypeError(
                f"cannot push data of type {type(data).__name__} "
                f"into stack of type {self._type.__name__}"
            )
        payload = pickle.dumps(data)
        record = payload + _SIZE.pack(len(payload))
        with self._lock:
            if self._max_depth > 0 and self._length >= self._max_depth:
                raise StackFull("stack has reached its max depth")
            self._file.seek(self._size)
            try:
                self._file.write(record)
                self._file.flush()
            except OSError:
                self._file.truncate(self._size)
                raise
            self._size += len(record)
            self._length += 1
            self._sync()

    def pop(self) -> Any:
        """Remove and return the most recently pushed value.

        Raises StackEmpty when the stack has no entries.
        """
        with self._lock:
            if self._length == 0:
                raise StackEmpty("stack was empty")
            start, payload = self._read_entry(self._size)
            value = self._decode(payload)
            self._file.truncate(start)
            self._size = start
            self._length -= 1
            self._sync()
            return value

    def __len__(self) -> int:
        return self._length

    def size(self) -> int:
        """Return the size of the stack file in bytes, header included."""
        return self._size

    def close(self) -> None:
        """Close the backing file.  The file is not removed."""
        with self._lock:
            self._file.close()

    def __enter__(self) -> "DiskStack":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()