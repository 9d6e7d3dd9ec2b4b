"""
Temporary data file pool.

Each in-memory series handed to gnuplot is written to a uniquely named scratch
file. The allocator caps how many of these may be outstanding at once across
all sessions sharing it, and removes them on request.
"""

import contextlib
import logging
import os
import tempfile
from threading import RLock
from typing import TextIO

from ..config import get_settings
from ..utils.exceptions import TmpFileError

logger = logging.getLogger(__name__)

TMPFILE_PREFIX = "gnuploti"


class TmpFileAllocator:
    """
    Thread-safe allocator of gnuplot data files.

    Attributes:
        max_files: Cap on outstanding files; at most max_files - 1 may exist
        tmp_dir: Directory the files are created in ("" means cwd)

    Example:
        >>> allocator = TmpFileAllocator(max_files=64, tmp_dir="/tmp/")
        >>> owned: list[str] = []
        >>> name, fh = allocator.create(owned)
        >>> fh.write("1 2\\n"); fh.close()
        >>> allocator.remove(owned)
    """

    def __init__(self, max_files: int, tmp_dir: str) -> None:
        """
        Initialize the allocator.

        Args:
            max_files: Platform cap on outstanding temp files
            tmp_dir: Scratch directory
        """
        self.max_files = max_files
        self.tmp_dir = tmp_dir
        self._count = 0
        self._lock = RLock()

    @property
    def count(self) -> int:
        """Number of files currently outstanding."""
        with self._lock:
            return self._count

    def create(self, owner: list[str]) -> tuple[str, TextIO]:
        """
        Create and open a new temporary file.

        Args:
            owner: Session temp-file list the new path is appended to

        Returns:
            Tuple of (path, text file opened for writing)

        Raises:
            TmpFileError: If the cap is reached or the file cannot be created
        """
        with self._lock:
            if self._count >= self.max_files - 1:
                raise TmpFileError(
                    f"Maximum number of temporary files reached ({self.max_files}): "
                    "cannot open more files"
                )

            directory = self.tmp_dir or os.getcwd()
            try:
                fd, name = tempfile.mkstemp(prefix=TMPFILE_PREFIX, dir=directory)
            except OSError as e:
                raise TmpFileError(
                    f"Cannot create temporary file \"{os.path.join(directory, TMPFILE_PREFIX)}XXXXXX\""
                ) from e
            os.close(fd)

            try:
                fh = open(name, "w", encoding="ascii")
            except OSError as e:
                with contextlib.suppress(OSError):
                    os.remove(name)
                raise TmpFileError(f"Cannot create temporary file \"{name}\"") from e

            owner.append(name)
            self._count += 1
            logger.debug(f"Created temporary file {name} ({self._count} outstanding)")
            return name, fh

    def remove(self, owner: list[str]) -> None:
        """
        Delete every file in a session's temp-file list.

        Args:
            owner: Session temp-file list; cleared on success

        Raises:
            TmpFileError: On the first file that cannot be removed

        Note:
            Files removed before a failure are dropped from owner and from the
            outstanding count, so a retry only touches the remaining ones.
        """
        with self._lock:
            removed = 0
            try:
                for name in owner:
                    try:
                        os.remove(name)
                    except OSError as e:
                        raise TmpFileError(f"Cannot remove temporary file \"{name}\"") from e
                    removed += 1
            finally:
                del owner[:removed]
                self._count -= removed

            logger.debug(f"Removed {removed} temporary files ({self._count} outstanding)")

    def reset(self) -> None:
        """
        Forget all outstanding files without touching the filesystem.

        Useful for testing.
        """
        with self._lock:
            self._count = 0


# Global allocator instance
_allocator: TmpFileAllocator | None = None


def get_tmpfile_allocator() -> TmpFileAllocator:
    """
    Get or create the process-wide temp-file allocator.

    Returns:
        TmpFileAllocator singleton configured from settings
    """
    global _allocator
    if _allocator is None:
        settings = get_settings()
        _allocator = TmpFileAllocator(
            max_files=settings.resolved_max_tmp_files(),
            tmp_dir=settings.resolved_tmp_dir(),
        )
    return _allocator
