"""
Disk cache for image bytes, one file per key.
Bounded by total bytes and entry count; exceeding either bound flushes the
whole store. Counters are store-wide and, by default, are not reconciled when
a key is overwritten, so they can overstate real disk usage.
"""

import base64
import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Optional, Union

from recipe_browser.errors import DirectoryUnavailable, WriteFailed
from recipe_browser.services import prometheus_metrics

logger = logging.getLogger(__name__)

# 5 MiB
CACHE_BYTE_LIMIT = 5 * 1024 * 1024
CACHE_COUNT_LIMIT = 100

DEFAULT_CACHE_DIR = Path(tempfile.gettempdir()) / "recipe_browser" / "ImageCache"


def cache_filename(key: str) -> str:
    """Filesystem-safe file name for key: base64 of the UTF-8 bytes, '/' -> '_'."""
    encoded = base64.b64encode(key.encode("utf-8")).decode("ascii")
    return encoded.replace("/", "_")


def _write_atomic(path: Path, value: bytes) -> None:
    """Write value to a temp file beside path and rename it over path."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(value)
        os.replace(tmp_name, path)
    except OSError:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


class DiskCacheStore:
    """BlobCache implementation writing one file per key under a directory."""

    def __init__(
        self,
        directory: Union[str, Path, None] = None,
        byte_limit: int = CACHE_BYTE_LIMIT,
        count_limit: int = CACHE_COUNT_LIMIT,
        reconcile_overwrites: bool = False,
    ) -> None:
        self._root = Path(directory) if directory is not None else DEFAULT_CACHE_DIR
        self.byte_limit = byte_limit
        self.count_limit = count_limit
        self.reconcile_overwrites = reconcile_overwrites
        self._directory: Optional[Path] = None
        self._total_bytes = 0
        self._entry_count = 0
        self._lock = threading.Lock()
        # Every store starts cold: whatever a previous session left is erased.
        self._reset_locked()

    @property
    def directory(self) -> Optional[Path]:
        """Cache directory, or None if it could not be created."""
        return self._directory

    @property
    def total_bytes(self) -> int:
        return self._total_bytes

    @property
    def entry_count(self) -> int:
        return self._entry_count

    def _setup_directory(self) -> None:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Could not create cache directory %s: %s", self._root, e)
            self._directory = None
            return
        self._directory = self._root

    def _path_for(self, key: str) -> Optional[Path]:
        if self._directory is None:
            return None
        return self._directory / cache_filename(key)

    def _reset_locked(self) -> None:
        if self._root.exists():
            try:
                shutil.rmtree(self._root)
                logger.info("Cleared image cache directory %s", self._root)
            except OSError as e:
                logger.warning("Could not remove cache directory %s: %s", self._root, e)
        self._total_bytes = 0
        self._entry_count = 0
        self._directory = None
        self._setup_directory()

    def reset(self) -> None:
        """Erase every entry, zero the counters and recreate an empty directory."""
        with self._lock:
            self._reset_locked()

    def get(self, key: str) -> Optional[bytes]:
        """Return the blob stored under key, or None. Never raises."""
        path = self._path_for(key)
        if path is None or not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            logger.warning("Could not read cache file %s: %s", path.name, e)
            return None

    def put(self, key: str, value: bytes) -> None:
        """
        Write value under key, then flush the whole store if a bound is exceeded.
        Raises DirectoryUnavailable when there is no cache directory and
        WriteFailed when the write itself fails; counters are untouched then.
        """
        with self._lock:
            path = self._path_for(key)
            if path is None:
                raise DirectoryUnavailable()

            previous_size: Optional[int] = None
            if self.reconcile_overwrites and path.is_file():
                try:
                    previous_size = path.stat().st_size
                except OSError:
                    previous_size = None

            try:
                _write_atomic(path, value)
            except OSError as e:
                logger.warning("Could not write cache file %s: %s", path.name, e)
                raise WriteFailed(e) from e

            if previous_size is not None:
                self._total_bytes += len(value) - previous_size
            else:
                self._total_bytes += len(value)
                self._entry_count += 1

            if self._total_bytes > self.byte_limit or self._entry_count > self.count_limit:
                logger.info(
                    "Image cache over limit (bytes=%d/%d entries=%d/%d), flushing",
                    self._total_bytes,
                    self.byte_limit,
                    self._entry_count,
                    self.count_limit,
                )
                prometheus_metrics.record_cache_flush()
                self._reset_locked()
