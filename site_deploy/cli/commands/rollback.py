"""Rollback command implementation"""

import sys

import click

from ..decorators import common_options
from ..utils.output import format_rollback_result


@click.command()
@click.argument('version', required=False)
@click.option('--url-map', default=None, help='Load balancer URL map name')
@click.option('--path-matcher', default=None, help='Path matcher name (default: path-matcher-1)')
@click.option('--releases-prefix', default=None, help='Prefix holding the releases (default: releases/)')
@common_options
@click.pass_context
def rollback(ctx, version, url_map, path_matcher, releases_prefix):
    """Point the load balancer back at an existing release

    Verifies that VERSION exists and prints the console steps and gcloud
    commands that switch the path prefix rewrite to it. Nothing is changed
    on the load balancer by this command.

    Examples:

        # Pick a release interactively
        site-deploy rollback

        # Roll staging back to a specific release
        site-deploy rollback 20251108-143022-abc123 --env=staging
    """
    overrides = dict(ctx.obj.overrides)
    overrides.update({
        'url_map': url_map,
        'path_matcher': path_matcher,
        'releases_prefix': releases_prefix,
    })

    result = ctx.obj.deployer().rollback(version, **overrides)

    format_rollback_result(result)
    if result.is_failed:
        sys.exit(1)
