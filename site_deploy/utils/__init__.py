"""Utility functions for site-deploy"""

from .async_utils import retry_async, run_async
from .file_utils import (
    TempFileTracker,
    calculate_file_checksum,
    file_extension,
    format_size,
    get_free_space,
    relative_key,
    safe_remove,
    scan_directory,
)
from .git_utils import get_latest_tag, get_short_revision

__all__ = [
    # Async utilities
    'retry_async',
    'run_async',

    # File utilities
    'TempFileTracker',
    'calculate_file_checksum',
    'file_extension',
    'format_size',
    'get_free_space',
    'relative_key',
    'safe_remove',
    'scan_directory',

    # Git utilities
    'get_latest_tag',
    'get_short_revision',
]
