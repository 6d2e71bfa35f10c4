"""Version header written at the start of every disk stack file."""

from __future__ import annotations

import json
import os
import struct
import time
from dataclasses import dataclass, field
from typing import BinaryIO

INTERNAL_VERSION = 1
"""The on-disk format version this code reads and writes.

Files with a version number less than or equal to this can be read.
"""

_UINT64 = struct.Struct("<Q")


def _now() -> int:
    return int(time.time())


@dataclass(frozen=True)
class VersionInfo:
    """Format version and creation time stored in a disk stack file header.

    Fields may be added to this header over time but never removed.

    Header layout::

        [version number, uint64 LE]
        [block size, uint64 LE]
        [block: JSON object holding the fields below]
    """

    version: int = INTERNAL_VERSION
    created: int = field(default_factory=_now)

    def _block(self) -> bytes:
        return json.dumps(
            {"created": self.created, "version": self.version}, sort_keys=True
        ).encode("utf-8")

    def encode(self, f: BinaryIO) -> int:
        """Write the header at the start of ``f`` and return its length in bytes.

        If writing fails the file is truncated to zero length.
        """
        block = self._block()
        try:
            f.seek(0)
            f.write(_UINT64.pack(self.version))
            f.write(_UINT64.pack(len(block)))
            f.write(block)
            f.flush()
        except Exception:
            f.truncate(0)
            f.seek(0)
            raise
        finally:
            try:
                os.fsync(f.fileno())
            except (OSError, ValueError, AttributeError):
                pass
        return 2 * _UINT64.size + len(block)

    @classmethod
    def decode(cls, f: BinaryIO) -> tuple["VersionInfo", int]:
        """Read the header at the start of ``f``.

        Returns the header and its length in bytes.  Raises ValueError if the
        header is truncated, malformed, or of a newer format version.
        """
        f.seek(0)
        raw = f.read(_UINT64.size)
        if len(raw) != _UINT64.size:
            raise ValueError("cannot read the version number from the file")
        (version,) = _UINT64.unpack(raw)
        if version > INTERNAL_VERSION:
            raise ValueError(
                f"cannot read this file: version number {version} is greater "
                f"than the supported version number {INTERNAL_VERSION}"
            )
        raw = f.read(_UINT64.size)
        if len(raw) != _UINT64.size:
            raise ValueError("cannot read the version block size from the file")
        (block_size,) = _UINT64.unpack(raw)
        block = f.read(block_size)
        if len(block) != block_size:
            raise ValueError("cannot read the version block from the file")
        try:
            fields = json.loads(block.decode("utf-8"))
            info = cls(version=int(fields["version"]), created=int(fields["created"]))
        except (ValueError, KeyError, TypeError) as exc:
            raise ValueError(f"cannot decode the version block: {exc}") from exc
        return info, 2 * _UINT64.size + block_size