"""File watching for the local file system.

Watched files are polled for changes to their size, modification time or
identity.  Call :func:`install` to serve paths marked with
:data:`stashkit.filewatcher.LOCAL`.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from stashkit import filewatcher

_log = logging.getLogger(__name__)

POLL_INTERVAL = 0.05
"""Seconds between checks of the watched files."""

_Signature = Optional[tuple[int, int, int]]


def _signature(path: str) -> _Signature:
    try:
        st = os.stat(path)
    except OSError:
        return None
    return (st.st_mtime_ns, st.st_size, st.st_ino)


@dataclass
class _Route:
    signature: _Signature
    callback: Callable[[], None]


class _Dispatcher:
    """Polls every watched file and calls its route when it changes."""

    def __init__(self, interval: float) -> None:
        self._interval = interval
        self._lock = threading.Lock()
        self._routes: dict[str, _Route] = {}
        self._thread: Optional[threading.Thread] = None

    def add(self, path: str, callback: Callable[[], None]) -> None:
        key = os.path.abspath(path)
        with self._lock:
            if key in self._routes:
                raise ValueError(f"file {path!r} is already watched")
            self._routes[key] = _Route(_signature(key), callback)
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._run, name="localwatch-dispatcher", daemon=True
                )
                self._thread.start()

    def remove(self, path: str) -> None:
        key = os.path.abspath(path)
        with self._lock:
            if key not in self._routes:
                raise ValueError(f"file {path!r} was not being watched")
            del self._routes[key]

    def _run(self) -> None:
        while True:
            time.sleep(self._interval)
            with self._lock:
                snapshot = list(self._routes.items())
            for key, route in snapshot:
                current = _signature(key)
                with self._lock:
                    if self._routes.get(key) is not route or route.signature == current:
                        continue
                    route.signature = current
                try:
                    route.callback()
                except Exception:
                    _log.exception("problem with filewatcher for %s", key)


_dispatch = _Dispatcher(POLL_INTERVAL)


class LocalWatch(filewatcher.Watch):
    """Watches one file on the local file system."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._path: Optional[str] = None
        self._results: Optional["queue.Queue[Optional[bytes]]"] = None
        self._running = False

    def file(self, path: str, options: Any = None) -> "queue.Queue[Optional[bytes]]":
        """Start watching ``path``; see :meth:`stashkit.filewatcher.Watch.file`.

        Raises RuntimeError if this watcher is already running, ValueError if
        another watcher has the file, and OSError if it cannot be read.
        """
        with self._lock:
            if self._running:
                raise RuntimeError("file watcher already running")
            _dispatch.add(path, self._changed)
            try:
                with open(path, "rb") as f:
                    content = f.read()
            except OSError:
                _dispatch.remove(path)
                raise
            results: "queue.Queue[Optional[bytes]]" = queue.Queue()
            results.put(content)
            self._path = path
            self._results = results
            self._running = True
            return results

    def _changed(self) -> None:
        with self._lock:
            if not self._running or self._path is None:
                return
            path = self._path
        _log.info("saw event for %s", path)
        try:
            with open(path, "rb") as f:
                content = f.read()
        except OSError as exc:
            _log.error("problem reading file %r: %s", path, exc)
            return
        with self._lock:
            if self._running and self._results is not None:
                self._results.put(content)

    def close(self) -> None:
        """Stop watching; the results queue then receives None."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            path, results = self._path, self._results
        if path is not None:
            try:
                _dispatch.remove(path)
            except ValueError:
                pass
        if results is not None:
            results.put(None)


_install_lock = threading.Lock()
_installed = False


def install() -> None:
    """Register :class:`LocalWatch` for the local marker.  Safe to call repeatedly."""
    global _installed
    with _install_lock:
        if _installed:
            return
        filewatcher.register(filewatcher.LOCAL, LocalWatch)
        _installed = True