"""Invalidate command implementation"""

import sys

import click

from ..decorators import common_options
from ..utils.output import console, format_error
from ...api import SiteDeployError, cache_invalidation
from ...core.rollback_advisor import DEFAULT_INVALIDATION_PATH


@click.command()
@click.argument('path_pattern', default=DEFAULT_INVALIDATION_PATH)
@click.option('--url-map', default=None, help='Load balancer URL map name')
@common_options
@click.pass_context
def invalidate(ctx, path_pattern, url_map):
    """Print the CDN cache invalidation command for PATH_PATTERN

    The command is printed, not executed; run it once the load balancer
    points at the new release.
    """
    overrides = dict(ctx.obj.overrides)
    overrides['url_map'] = url_map

    try:
        command = cache_invalidation(
            path_pattern,
            ctx.obj.project_root,
            ctx.obj.environment,
            ctx.obj.provider,
            **overrides
        )
    except SiteDeployError as e:
        format_error(e)
        sys.exit(1)

    console.print(command, soft_wrap=True, highlight=False)
