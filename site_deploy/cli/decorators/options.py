"""Options shared by every site-deploy command"""

from functools import wraps
from pathlib import Path
from typing import Callable, Optional

import click

from ..utils.output import console
from ...constants import ENV_FILE, PROJECT_CONFIG_FILE, SUPPORTED_STORAGE_TYPES

_COMMON_OPTIONS = [
    click.option('--env', 'environment', default=None,
                 help='Environment name, selects .env.<env> (default: production)'),
    click.option('--project-root', type=click.Path(file_okay=False, path_type=Path), default=None,
                 help='Directory holding the env files (default: nearest parent with config)'),
    click.option('--project', 'project_id', default=None, help='Cloud project ID'),
    click.option('--bucket', default=None, help='Bucket name'),
    click.option('--storage', 'storage_type', type=click.Choice(SUPPORTED_STORAGE_TYPES), default=None,
                 help='Storage backend'),
    click.option('--skip-prompts', is_flag=True, help='Never prompt, fail if configuration is missing'),
]


def common_options(func: Callable) -> Callable:
    """Decorator that adds the shared options and stores them on the context

    The command receives none of the shared options as arguments. They are
    available as ``ctx.obj.environment``, ``ctx.obj.project_root``,
    ``ctx.obj.skip_prompts`` and ``ctx.obj.overrides``.

    Args:
        func: Command function to decorate

    Returns:
        Decorated function
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        obj = ctx.obj

        obj.environment = kwargs.pop('environment')
        obj.project_root = kwargs.pop('project_root') or find_project_root()
        obj.skip_prompts = kwargs.pop('skip_prompts')
        obj.overrides = {
            'project_id': kwargs.pop('project_id'),
            'bucket': kwargs.pop('bucket'),
            'storage_type': kwargs.pop('storage_type'),
        }

        if obj.debug:
            console.print(f"[dim]Project root: {obj.project_root}[/dim]")

        return func(*args, **kwargs)

    for option in reversed(_COMMON_OPTIONS):
        wrapper = option(wrapper)
    return wrapper


def find_project_root(start_path: Optional[Path] = None) -> Path:
    """Find the nearest directory holding a project file or an env file

    Args:
        start_path: Starting directory (defaults to current directory)

    Returns:
        The directory found, or the starting directory when none matches
    """
    start = Path(start_path or Path.cwd()).resolve()

    for current in [start, *start.parents]:
        if (current / PROJECT_CONFIG_FILE).exists() or (current / ENV_FILE).exists():
            return current
        if any(current.glob(f"{ENV_FILE}.*")):
            return current

    return start
