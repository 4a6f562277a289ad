"""Cinelog CLI - import Trakt watch history into a personal library."""

import sys

# Configure rich-click BEFORE importing click
import rich_click as click

# Enable rich-click formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100

from .. import __version__
from ..config import setup_logging
from .core import CinelogContext, CinelogGroup, ConfigurationError, get_hook_manager
from .display.console import console


@click.group(
    cls=CinelogGroup,
    commands_package='cinelog.cli.commands',
    context_settings=dict(
        help_option_names=['-h', '--help'],
    ),
)
@click.version_option(version=__version__, help='Show the version and exit.')
@click.option(
    '-c',
    '--config',
    default=None,
    help='Path to config file (or set CINELOG_CONFIG)',
)
@click.option(
    '--db',
    default=None,
    help='Path to database file (or set CINELOG_DB)',
)
@click.pass_context
def cli(ctx, config, db):
    """Import Trakt watch history, ratings and watchlist into your library."""
    try:
        ctx.obj = CinelogContext.create(config, db)
    except ConfigurationError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        console.print("\n[cyan]Tip:[/cyan] Copy config.example.yaml to config.yaml and fill in your Trakt and TMDB keys.")
        sys.exit(1)

    setup_logging(ctx.obj.config)

    hook_manager = get_hook_manager()
    hook_manager.load_from_config(ctx.obj.config)


# Import and register command groups
from .groups import trakt  # noqa: E402

cli.add_command(trakt.trakt_group)


if __name__ == '__main__':
    cli()
