"""A seekable stream wrapper that stores and reads data back to front."""

from __future__ import annotations

import io
from typing import BinaryIO


class Reverse:
    """Wraps a seekable binary stream so data is written and read reversed.

    :meth:`write` stores the bytes it is given in reverse order.  :meth:`read`
    consumes bytes *before* the current position, moving towards the start of
    the stream, and returns them reversed.  Not thread-safe.
    """

    def __init__(self, raw: BinaryIO) -> None:
        self.raw = raw

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes preceding the current position.

        Returns ``b""`` once the start of the stream is reached.  A negative
        ``size`` reads everything before the current position.
        """
        if size == 0:
            return b""
        current = self.raw.seek(0, io.SEEK_CUR)
        if current == 0:
            return b""
        n = current if size < 0 or current - size <= 0 else size
        self.raw.seek(-n, io.SEEK_CUR)
        try:
            data = self.raw.read(n)
        except OSError:
            self.raw.seek(current, io.SEEK_SET)
            raise
        if len(data) != n:
            self.raw.seek(current, io.SEEK_SET)
            raise OSError("data changed underneath the reader: short read")
        self.raw.seek(current - n, io.SEEK_SET)
        return data[::-1]

    def write(self, data: bytes) -> int:
        """Write ``data`` in reverse order; return the number of bytes written."""
        if not data:
            return 0
        return self.raw.write(bytes(data)[::-1])

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Seek the underlying stream."""
        return self.raw.seek(offset, whence)