"""Git operation utilities"""

import subprocess
from pathlib import Path
from typing import Optional


def get_short_revision(path: Path) -> Optional[str]:
    """
    Get abbreviated commit hash of HEAD

    Args:
        path: Repository path

    Returns:
        Short revision or None
    """
    try:
        result = subprocess.run(
            ['git', 'rev-parse', '--short', 'HEAD'],
            cwd=path,
            capture_output=True,
            text=True,
            check=True
        )
        return result.stdout.strip() or None
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        return None


def get_latest_tag(path: Path) -> Optional[str]:
    """
    Get the nearest tag reachable from HEAD

    Args:
        path: Repository path

    Returns:
        Tag name or None when no tag is reachable
    """
    try:
        result = subprocess.run(
            ['git', 'describe', '--tags', '--abbrev=0'],
            cwd=path,
            capture_output=True,
            text=True,
            check=True
        )
        return result.stdout.strip() or None
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        return None
