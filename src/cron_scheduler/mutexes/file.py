import fcntl
import hashlib
import logging
import os
from pathlib import Path
from typing import Dict, IO, Union

from cron_scheduler.mutexes.protocol import Mutex

logger = logging.getLogger(__name__)


class FileMutex(Mutex):
    """
    Mutex backed by advisory file locks in a local directory.

    Locks are only visible to processes on the same host, so this backend
    cannot be used for single-server scheduling across machines.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory: Path = Path(directory)
        self._locks: Dict[str, IO[str]] = {}

    def _lock_path(self, name: str) -> Path:
        return self.directory / f"{hashlib.md5(name.encode()).hexdigest()}.lock"

    async def acquire(self, name: str) -> bool:
        if name in self._locks:
            return False

        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._lock_path(name)
        lock_file = open(path, "a+")
        try:
            fcntl.flock(lock_file, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except (IOError, OSError):
            lock_file.close()
            logger.debug("Lock '%s' is held by another process", name)
            return False

        # The holder may have unlinked the file between our open() and flock().
        try:
            stale = os.fstat(lock_file.fileno()).st_ino != os.stat(path).st_ino
        except FileNotFoundError:
            stale = True
        if stale:
            fcntl.flock(lock_file, fcntl.LOCK_UN)
            lock_file.close()
            logger.debug("Lock '%s' was released concurrently, skipping", name)
            return False

        self._locks[name] = lock_file
        return True

    async def release(self, name: str) -> None:
        lock_file = self._locks.pop(name, None)
        if lock_file is None:
            return

        try:
            os.unlink(self._lock_path(name))
        except FileNotFoundError:
            pass
        fcntl.flock(lock_file, fcntl.LOCK_UN)
        lock_file.close()
