"""Single-instance guard."""

import contextlib
import fcntl
import os
from pathlib import Path
from typing import Iterator, Union

from .utils import log_debug

LOCK_PATH = Path('/run/vbox-vtx-fix.lock')


class InstanceLockedError(RuntimeError):
    """Another instance holds the lock."""

    def __init__(self, lock_path: Path, pid: str):
        self.lock_path = lock_path
        self.pid = pid
        super().__init__(
            f"Another instance is running (PID {pid}). "
            f"If this is incorrect, remove {lock_path}"
        )


@contextlib.contextmanager
def instance_lock(lock_path: Union[str, Path] = LOCK_PATH, debug: bool = False) -> Iterator[None]:
    """Hold an exclusive advisory lock for the duration of the block.

    Raises:
        InstanceLockedError: If another live process holds the lock
    """
    lock_path = Path(lock_path)
    lock_fd = open(lock_path, 'a+')
    try:
        try:
            fcntl.flock(lock_fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            lock_fd.seek(0)
            pid = lock_fd.read().strip() or "unknown"
            raise InstanceLockedError(lock_path, pid) from None

        lock_fd.seek(0)
        lock_fd.truncate()
        lock_fd.write(f"{os.getpid()}\n")
        lock_fd.flush()
        log_debug(f"Acquired exclusive lock: {lock_path}", debug)
        try:
            yield
        finally:
            # Never unlinked: every instance must lock the same inode
            fcntl.flock(lock_fd.fileno(), fcntl.LOCK_UN)
    finally:
        lock_fd.close()
