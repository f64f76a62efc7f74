"""Releases command implementation"""

import sys

import click

from ..decorators import common_options
from ..utils.output import format_error, format_release_list
from ...api import SiteDeployError, list_releases


@click.command()
@click.option('--releases-prefix', default=None, help='Prefix holding the releases (default: releases/)')
@common_options
@click.pass_context
def releases(ctx, releases_prefix):
    """List the releases available for rollback"""
    overrides = dict(ctx.obj.overrides)
    overrides['releases_prefix'] = releases_prefix

    try:
        found = list_releases(
            ctx.obj.project_root,
            ctx.obj.environment,
            ctx.obj.provider,
            **overrides
        )
    except SiteDeployError as e:
        format_error(e)
        sys.exit(1)

    format_release_list(found)
