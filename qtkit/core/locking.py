"""
Inter-process locking of the shared download cache.

A QtKit run downloads, unpacks and configures Qt trees in place under a
single cache root. The pipeline itself is sequential, but two QtKit
processes pointed at the same cache would race on the same ".part" files and
source trees, so each run holds a file lock on the cache root for its whole
duration.

Usage:
    from qtkit.core.locking import cache_lock

    with cache_lock(Path("download_cache"), timeout=600):
        run_pipeline()
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

from qtkit.core.exceptions import CacheLockTimeout

logger = logging.getLogger(__name__)

LOCK_FILE_NAME = ".qtkit.lock"


def get_lock_path(cache_dir: Path) -> Path:
    """Return the lock file path for a cache root."""
    return Path(cache_dir) / LOCK_FILE_NAME


@contextmanager
def cache_lock(cache_dir: Path, timeout: float = 600):
    """
    Hold the cache lock for the duration of the block.

    The cache directory is created if it does not exist yet.

    Args:
        cache_dir: Download cache root
        timeout: Maximum wait time in seconds (negative waits forever)

    Yields:
        Path to the lock file

    Raises:
        CacheLockTimeout: If the lock can't be acquired within timeout
    """
    cache_dir = Path(cache_dir)
    cache_dir.mkdir(parents=True, exist_ok=True)
    lock_path = get_lock_path(cache_dir)
    lock = FileLock(str(lock_path), timeout=timeout)

    try:
        lock.acquire()
    except LockTimeout as e:
        logger.error(
            f"Could not acquire cache lock after {timeout}s. "
            "Another qtkit process may be using this cache."
        )
        raise CacheLockTimeout(lock_path, timeout) from e

    logger.debug(f"Acquired cache lock: {lock_path}")
    try:
        yield lock_path
    finally:
        lock.release()
        logger.debug(f"Released cache lock: {lock_path}")
