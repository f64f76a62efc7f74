"""File operation utilities"""

import hashlib
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Union

logger = logging.getLogger(__name__)


def calculate_file_checksum(file_path: Path,
                            algorithm: str = "md5",
                            chunk_size: int = 8192) -> str:
    """
    Calculate file checksum

    Args:
        file_path: Path to file
        algorithm: Hash algorithm (md5, sha256, sha1)
        chunk_size: Read chunk size

    Returns:
        Hex digest string
    """
    hash_func = hashlib.new(algorithm)

    with open(file_path, 'rb') as f:
        while chunk := f.read(chunk_size):
            hash_func.update(chunk)

    return hash_func.hexdigest()


def format_size(size: int) -> str:
    """
    Format file size in human-readable format

    Args:
        size: Size in bytes

    Returns:
        Formatted size string
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"


def scan_directory(directory: Path,
                   extensions: Optional[Iterable[str]] = None,
                   exclude: Optional[Iterable[Path]] = None) -> List[Path]:
    """
    Scan directory for files

    Args:
        directory: Directory to scan
        extensions: Only keep files with one of these extensions (without dot)
        exclude: Files to leave out

    Returns:
        Sorted list of file paths
    """
    wanted = {e.lower() for e in extensions} if extensions is not None else None
    excluded = {Path(p) for p in exclude or ()}
    files = []

    for path in directory.rglob('*'):
        if not path.is_file() or path in excluded:
            continue
        if wanted is not None and file_extension(path) not in wanted:
            continue
        files.append(path)

    return sorted(files)


def file_extension(path: Union[str, Path]) -> str:
    """Lower-case extension of ``path`` without the leading dot"""
    return Path(path).suffix.lstrip('.').lower()


def relative_key(path: Path, root: Path) -> str:
    """Storage key fragment for ``path`` relative to ``root`` with forward slashes"""
    return path.relative_to(root).as_posix()


def get_free_space(path: Path) -> Optional[int]:
    """Free bytes on the filesystem holding ``path``, None if unknown"""
    try:
        return shutil.disk_usage(path).free
    except OSError as e:
        logger.debug(f"Could not determine free space for {path}: {e}")
        return None


def safe_remove(path: Path) -> bool:
    """
    Safely remove file or directory

    Args:
        path: Path to remove

    Returns:
        True if successful
    """
    try:
        if path.is_file() or path.is_symlink():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
        return True
    except OSError as e:
        logger.warning(f"Failed to remove {path}: {e}")
        return False


class TempFileTracker:
    """Context manager that removes tracked local files on exit

    Files are removed on every exit path, including ``KeyboardInterrupt``.
    Remote state is never touched.
    """

    def __init__(self):
        self._paths: List[Path] = []
        self.logger = logging.getLogger(self.__class__.__name__)

    def track(self, path: Union[str, Path]) -> Path:
        """Register a file for removal and return it"""
        path = Path(path)
        if path not in self._paths:
            self._paths.append(path)
        return path

    def make_temp_file(self, suffix: str = "", content: bytes = b"") -> Path:
        """Create a tracked scratch file"""
        fd, name = tempfile.mkstemp(suffix=suffix)
        with os.fdopen(fd, 'wb') as f:
            f.write(content)
        return self.track(name)

    @property
    def paths(self) -> List[Path]:
        return list(self._paths)

    def cleanup(self) -> int:
        """Remove every tracked file that still exists

        Returns:
            Number of files removed
        """
        removed = 0
        while self._paths:
            path = self._paths.pop()
            if path.exists() and safe_remove(path):
                removed += 1
        if removed:
            self.logger.debug(f"Removed {removed} temporary file(s)")
        return removed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()
        return False
