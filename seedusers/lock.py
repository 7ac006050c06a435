"""Optional run lock preventing two batches from racing for the same uids."""

import contextlib

import filelock

from seedusers.types import LockError


@contextlib.contextmanager
def batch_lock(lock_file=None, timeout: float = 10, log=None):
    """Hold `lock_file` for the duration of the block.   With no `lock_file`
    the block runs unguarded.
    """
    if lock_file is None:
        yield None
        return
    lock = filelock.FileLock(str(lock_file))
    try:
        lock.acquire(timeout=timeout)
    except filelock.Timeout as exc:
        raise LockError(
            f"Another batch holds {lock_file}; gave up after {timeout} seconds."
        ) from exc
    if log is not None:
        log.debug(f"Acquired run lock {lock_file}")
    try:
        yield lock
    finally:
        lock.release()
