"""
Non-blocking advisory lock on a sentinel file.

Only processes that lock the same file are excluded. There is no waiting:
try_acquire() is a single immediate attempt.
"""

import os
import sys

from .config import log

if sys.platform == "win32":
    import msvcrt
else:
    import fcntl


class CredentialsLock:
    """
    Usage:
        lock = CredentialsLock(lock_path)
        if lock.try_acquire():
            try:
                ...
            finally:
                lock.release()
    """

    def __init__(self, path):
        self.path = path
        self._file = None

    @property
    def held(self):
        return self._file is not None

    def try_acquire(self):
        """Returns True if acquired, False if another holder has it."""
        if self._file is not None:
            return True

        self.path.parent.mkdir(parents=True, exist_ok=True)
        f = open(self.path, "a+")
        try:
            if sys.platform == "win32":
                f.seek(0)
                msvcrt.locking(f.fileno(), msvcrt.LK_NBLCK, 1)
            else:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            # BlockingIOError on POSIX, PermissionError on Windows
            f.close()
            log.info("Credentials lock %s is held by another process", self.path)
            return False

        self._file = f
        log.debug("Acquired credentials lock (PID %d)", os.getpid())
        return True

    def release(self):
        """Safe to call multiple times or without prior acquire."""
        if self._file is None:
            return
        try:
            if sys.platform == "win32":
                self._file.seek(0)
                msvcrt.locking(self._file.fileno(), msvcrt.LK_UNLCK, 1)
            else:
                fcntl.flock(self._file.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            log.warning("Error releasing credentials lock: %s", e)
        finally:
            self._file.close()
            self._file = None
