"""Table builders for CLI output.

- Functions named _render_*_table() for consistency
- Header style: "bold cyan"
- Primary column (first) styled as "bold"
"""

from rich.table import Table

from ...models import ImportOptions, ImportPreview, SyncResult, SyncStatus


def _render_preview_table(preview: ImportPreview, limit: int = 20):
    """
    Create table listing the titles an import would touch.

    Args:
        preview: Import preview
        limit: Maximum titles listed per media type

    Returns:
        Rich Table object
    """
    table = Table(title="Trakt History", header_style="bold cyan")
    table.add_column("Title", style="bold")
    table.add_column("Type")

    for kind, titles in (("movie", preview.movies), ("series", preview.series)):
        for title in titles[:limit]:
            table.add_row(title, kind)
        if len(titles) > limit:
            table.add_row(f"[dim]...and {len(titles) - limit} more[/dim]", kind)

    return table


def _render_options_table(options: ImportOptions):
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Option", style="bold")
    table.add_column("Enabled")

    rows = (
        ("Watched movies", options.import_watched_movies),
        ("Watched series", options.import_watched_series),
        ("Ratings", options.import_ratings),
        ("Watchlist", options.import_watchlist),
    )
    for label, enabled in rows:
        table.add_row(label, "[green]yes[/green]" if enabled else "[dim]no[/dim]")
    return table


def _render_sync_result_table(result: SyncResult, title: str = "Sync Results"):
    """
    Create table summarising a finished import or sync.

    Args:
        result: SyncResult to show
        title: Table title

    Returns:
        Rich Table object
    """
    table = Table(title=title, header_style="bold cyan")
    table.add_column("Result", style="bold")
    table.add_column("Count", justify="right")

    table.add_row("New movie watches", f"[green]{result.new_movie_watches}[/green]")
    table.add_row("New episode watches", f"[green]{result.new_episode_watches}[/green]")
    table.add_row("Updated items", f"[cyan]{result.updated_items}[/cyan]")
    error_style = "red" if result.errors else "dim"
    table.add_row("Errors", f"[{error_style}]{len(result.errors)}[/{error_style}]")
    return table


def _render_status_table(status: SyncStatus, movies: int, series: int):
    """
    Create table with Trakt connection state and library counts.

    Args:
        status: Current SyncStatus
        movies: Movies in the library
        series: Series in the library

    Returns:
        Rich Table object
    """
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    if status.is_authenticated:
        table.add_row("Trakt", "[green]connected[/green]")
    else:
        table.add_row("Trakt", "[red]not connected[/red]")

    last_sync = status.last_sync_at.strftime("%Y-%m-%d %H:%M UTC") if status.last_sync_at else "[dim]never[/dim]"
    table.add_row("Last sync", last_sync)
    table.add_row("Auto sync", "enabled" if status.auto_sync_enabled else "disabled")
    table.add_row("Movies in library", str(movies))
    table.add_row("Series in library", str(series))
    return table
