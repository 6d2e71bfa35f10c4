"""Watch a single file for changes, wherever it is stored.

Paths are prefixed with a marker naming the file system that holds them,
for example ``"local:/path/to/file"``.  Each marker is served by a
:class:`Watch` implementation registered with :func:`register`.
"""

from __future__ import annotations

import abc
import queue
import threading
from typing import Any, Callable, Optional

LOCAL = "local:"
"""Marker for the local file system."""

_lock = threading.Lock()
_registry: dict[str, Callable[[], "Watch"]] = {}


class Watch(abc.ABC):
    """Watches one file and reports its contents each time it changes."""

    @abc.abstractmethod
    def file(self, path: str, options: Any = None) -> "queue.Queue[Optional[bytes]]":
        """Start watching ``path`` (without its marker).

        The returned queue first receives the file's current contents, then
        its contents after each change, and None once watching stops.
        ``options`` passes implementation-specific settings.
        """

    @abc.abstractmethod
    def close(self) -> None:
        """Stop watching the file."""


def register(marker: str, factory: Callable[[], Watch]) -> None:
    """Serve files with ``marker`` using watchers made by ``factory``.

    Raises ValueError if the marker is already registered.
    """
    key = marker.split(":")[0]
    with _lock:
        if key in _registry:
            raise ValueError(f"filewatcher marker {key!r} has already been registered")
        _registry[key] = factory


def get(
    path: str, options: Any = None
) -> tuple["queue.Queue[Optional[bytes]]", Callable[[], None]]:
    """Watch the file at the marked ``path``.

    Returns the queue of contents (see :meth:`Watch.file`) and a function
    that stops watching.  Raises ValueError if the marker is missing or not
    registered.
    """
    parts = path.split(":")
    if len(parts) != 2:
        raise ValueError(
            f"could not locate the file system marker that should be prepended: {path!r}"
        )
    marker, rest = parts
    with _lock:
        factory = _registry.get(marker)
    if factory is None:
        raise ValueError(
            "could not locate an implementation that can read the file system "
            f"designated by marker {marker!r}"
        )
    watcher = factory()
    results = watcher.file(rest, options)
    return results, watcher.close