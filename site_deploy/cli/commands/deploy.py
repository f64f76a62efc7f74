"""Deploy command implementation"""

import sys
from pathlib import Path

import click

from ..decorators import common_options
from ..utils.output import console, format_config, format_deploy_result
from ...api import resolve_config


@click.command()
@click.option('--version', 'version', default=None,
              help="Release version: a name such as v1.0.0, 'auto' (git tag) or 'timestamp'")
@click.option('--release-path', default=None,
              help="Target prefix in the bucket, '{version}' is substituted (default: bucket root)")
@click.option('--build-dir', type=click.Path(file_okay=False, path_type=Path), default=None,
              help='Build directory to deploy (default: dist)')
@click.option('--backend', default=None, help='Backend bucket name used by the load balancer')
@click.option('--url-map', default=None, help='Load balancer URL map name, enables repoint instructions')
@click.option('--region', default=None, help='Region (default: us-central1)')
@click.option('--delete/--no-delete', 'delete_extraneous', default=None,
              help='Delete remote objects missing locally when deploying to the bucket root')
@click.option('--show-config', is_flag=True, help='Print the effective configuration and exit')
@common_options
@click.pass_context
def deploy(ctx, version, release_path, build_dir, backend, url_map, region, delete_extraneous, show_config):
    """Upload the build directory as a new release

    Examples:

        # Deploy to the bucket root
        site-deploy deploy --version=v1.0.0

        # Deploy under releases/ for load balancer rollbacks
        site-deploy deploy --version=v1.0.0 --release-path='releases/{version}/'

        # CI/CD: version from the latest git tag, no prompts
        site-deploy deploy --version=auto --skip-prompts
    """
    overrides = dict(ctx.obj.overrides)
    overrides.update({
        'version': version,
        'release_path': release_path,
        'build_dir': build_dir,
        'backend': backend,
        'url_map': url_map,
        'region': region,
        'delete_extraneous': delete_extraneous,
    })

    if show_config:
        format_config(resolve_config(ctx.obj.project_root, ctx.obj.environment, **overrides))
        return

    console.print(f"\n[cyan]Deploying {ctx.obj.environment or 'production'} release...[/cyan]")
    result = ctx.obj.deployer().deploy(**overrides)

    format_deploy_result(result)
    if result.is_failed:
        sys.exit(1)
