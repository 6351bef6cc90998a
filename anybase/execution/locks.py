"""
Named Locks

Serialize whole operations (connection open through commit) under a string
key. Inside one process a re-entrant lock per key is used; across processes
an advisory ``flock`` on a lock file is added where fcntl exists (POSIX).

Usage:
    with named_lock("orders.db"):
        ...
"""

import hashlib
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

try:
    import fcntl
    FCNTL_AVAILABLE = True
except ImportError:
    FCNTL_AVAILABLE = False
    fcntl = None

logger = logging.getLogger(__name__)

_LOCKS: Dict[str, threading.RLock] = {}
_DEPTHS: Dict[str, int] = {}
_FILES: Dict[str, object] = {}
_REGISTRY_LOCK = threading.Lock()


def _thread_lock(name: str) -> threading.RLock:
    with _REGISTRY_LOCK:
        lock = _LOCKS.get(name)
        if lock is None:
            lock = _LOCKS[name] = threading.RLock()
        return lock


def lock_file_path(name: str, lock_directory: Optional[str] = None) -> str:
    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:16]
    return os.path.join(lock_directory or tempfile.gettempdir(), f"anybase-{digest}.lock")


@contextmanager
def named_lock(name: str, lock_directory: Optional[str] = None) -> Iterator[None]:
    """Hold the lock named ``name`` for the duration of the block."""
    lock = _thread_lock(name)
    lock.acquire()
    try:
        # Only the owning thread touches its depth and file entries
        depth = _DEPTHS.get(name, 0)
        if depth == 0 and FCNTL_AVAILABLE:
            handle = open(lock_file_path(name, lock_directory), "a+")
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            except OSError:
                handle.close()
                raise
            _FILES[name] = handle
            logger.debug(f"Acquired file lock for '{name}'")
        _DEPTHS[name] = depth + 1
        try:
            yield
        finally:
            _DEPTHS[name] -= 1
            if _DEPTHS[name] == 0:
                del _DEPTHS[name]
                handle = _FILES.pop(name, None)
                if handle is not None:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
                    handle.close()
    finally:
        lock.release()
