"""CLI utility functions"""

from .interactive import InteractiveProvider
from .output import (
    console,
    format_config,
    format_deploy_result,
    format_error,
    format_release_list,
    format_rollback_result,
    print_warning,
)

__all__ = [
    'InteractiveProvider',

    # Output utilities
    'console',
    'format_config',
    'format_deploy_result',
    'format_error',
    'format_release_list',
    'format_rollback_result',
    'print_warning',
]
