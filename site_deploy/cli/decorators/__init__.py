"""CLI decorators"""

from .options import common_options, find_project_root

__all__ = [
    'common_options',
    'find_project_root',
]
