"""Dependency injection decorators for CLI commands.

Stack them above a command function; each one adds a keyword argument:

    @click.command()
    @with_config
    @with_tmdb
    @with_database
    @with_trakt(require_auth=True)
    def command(config, tmdb, database, trakt):
        ...

``with_trakt`` stores OAuth tokens in the library database. Put it below
``with_database`` to share that connection, otherwise it opens its own.
"""

from functools import wraps
import sys

import rich_click as click

from ..commands.common import console, print_trakt_check


def with_config(f):
    """Inject the loaded Config as ``config``."""
    @wraps(f)
    @click.pass_context
    def wrapper(ctx, *args, **kwargs):
        return f(*args, config=ctx.obj.config, **kwargs)
    return wrapper


def with_database(f):
    """
    Inject the library Database as ``database``.

    The database file and its parent directory are created on first use.
    """
    @wraps(f)
    @click.pass_context
    def wrapper(ctx, *args, **kwargs):
        from ..services.database import DatabaseService

        with DatabaseService(ctx.obj.db_path) as database:
            return f(*args, database=database, **kwargs)
    return wrapper


def with_trakt(require_auth=True):
    """
    Inject the Trakt client as ``trakt``.

    Args:
        require_auth: Exit with status 1 unless a valid Trakt session exists
    """
    def decorator(f):
        @wraps(f)
        @click.pass_context
        def wrapper(ctx, *args, **kwargs):
            from ..services.database import DatabaseService
            from ..services.trakt import TraktService

            def run(database):
                with TraktService.from_config(ctx.obj.config, database) as trakt:
                    if require_auth:
                        authenticated = trakt.is_authenticated()
                        print_trakt_check(authenticated)
                        if not authenticated:
                            sys.exit(1)
                    return f(*args, trakt=trakt, **kwargs)

            if "database" in kwargs:
                return run(kwargs["database"])
            with DatabaseService(ctx.obj.db_path) as database:
                return run(database)
        return wrapper
    return decorator


def with_tmdb(f):
    """Inject the TMDB client as ``tmdb``. Exits if no API key is configured."""
    @wraps(f)
    @click.pass_context
    def wrapper(ctx, *args, **kwargs):
        from ..services.tmdb import TmdbService

        with TmdbService.from_config(ctx.obj.config) as tmdb:
            if not tmdb.is_configured():
                console.print("[red]✗[/red] TMDB API key missing - add tmdb.api_key to config.yaml")
                sys.exit(1)
            return f(*args, tmdb=tmdb, **kwargs)
    return wrapper
