"""Main CLI entry point for site-deploy"""

import sys
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.logging import RichHandler

from ..constants import APP_NAME, LOG_FORMAT
from ..api import Deployer
from ..services.config_service import ConfigProvider, NonInteractiveProvider
from .utils.interactive import InteractiveProvider
from .utils.output import console

# Import all commands
from .commands import (
    deploy,
    rollback,
    releases,
    invalidate,
)


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Setup logging configuration

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Configure rich handler
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=console,
                show_time=debug,
                show_path=debug,
                rich_tracebacks=True,
                tracebacks_suppress=[click]
            )
        ]
    )

    # Adjust third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiofiles").setLevel(logging.WARNING)
    logging.getLogger("baidubce").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)


class Context:
    """CLI context object

    Global flags are set by the group; the shared command options
    (environment, project root, prompts, overrides) are filled in by
    ``common_options`` when a command runs.
    """

    def __init__(self):
        """Initialize CLI context"""
        self.verbose: bool = False
        self.debug: bool = False
        self.environment: Optional[str] = None
        self.project_root: Optional[Path] = None
        self.skip_prompts: bool = False
        self.overrides: Dict[str, Any] = {}
        self._provider: Optional[ConfigProvider] = None

    @property
    def provider(self) -> ConfigProvider:
        """Interactive provider unless prompts are disabled"""
        if self._provider is None:
            if self.skip_prompts:
                self._provider = NonInteractiveProvider()
            else:
                self._provider = InteractiveProvider(console)
        return self._provider

    def deployer(self) -> Deployer:
        """Deployer bound to this invocation's project and environment"""
        return Deployer(
            project_root=self.project_root,
            environment=self.environment,
            provider=self.provider
        )


@click.group(name=APP_NAME)
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('-d', '--debug', is_flag=True, help='Enable debug output')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.pass_context
def cli(ctx, verbose, debug, quiet):
    """Site Deploy - Versioned static website releases on object storage

    Uploads a pre-built static site (React, Vue, Svelte, ...) to a bucket
    as an immutable release with gzip-encoded assets and cache headers,
    and prints the load balancer changes needed to roll back to an
    earlier release.

    Configuration comes from .env.<env> (or .env) in the project root,
    the optional .site-deploy.yaml file and command line flags.
    """
    # Setup logging
    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        setup_logging(verbose=verbose, debug=debug)

    ctx.obj = Context()
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug


# Register commands
cli.add_command(deploy.deploy)
cli.add_command(rollback.rollback)
cli.add_command(releases.releases)
cli.add_command(invalidate.invalidate)


def main():
    """Main entry point for the CLI application

    This function handles:
    - Usage errors reported by click
    - Keyboard interrupts (exit code 130)
    - Unexpected exceptions with proper error display
    """
    try:
        # Interrupts and usage errors reach the handlers below
        exit_code = cli.main(prog_name=APP_NAME, standalone_mode=False)
        sys.exit(exit_code if isinstance(exit_code, int) else 0)

    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)

    except (KeyboardInterrupt, click.exceptions.Abort):
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)

    except Exception as e:
        console.print(f"[red]Unexpected error: {e}[/red]")
        if '--debug' in sys.argv or '-d' in sys.argv:
            console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
