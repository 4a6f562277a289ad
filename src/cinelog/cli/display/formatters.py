"""Output formatters for CLI."""

from typing import List, Sequence

from ...models import ImportPreview, ImportStatus, SyncResult
from .console import console
from .tables import _render_preview_table, _render_sync_result_table

DEFAULT_MAX_ERRORS = 10


def truncate_errors(errors: Sequence[str], max_errors: int = DEFAULT_MAX_ERRORS) -> List[str]:
    """
    Limit an error list for display.

    Args:
        errors: All error messages
        max_errors: How many to show in full

    Returns:
        At most ``max_errors`` messages, followed by "...and N more errors"
        when some were left out
    """
    shown = list(errors[:max_errors])
    hidden = len(errors) - len(shown)
    if hidden > 0:
        shown.append(f"...and {hidden} more errors")
    return shown


def format_import_status(status: ImportStatus) -> str:
    """One-line progress description of a running import."""
    if status.total == 0:
        return "Fetching history from Trakt…"
    line = f"{status.completed}/{status.total}"
    if status.current_item:
        line += f" - {status.current_item}"
    if status.errors:
        count = len(status.errors)
        line += f" ({count} error{'' if count == 1 else 's'})"
    return line


def format_preview(preview: ImportPreview, show_titles: bool = True):
    """
    Display an import preview.

    Args:
        preview: Preview to show
        show_titles: Also list the titles found on Trakt
    """
    if show_titles and preview.total_items:
        console.print(_render_preview_table(preview))

    console.print("\n[bold]Preview:[/bold]")
    console.print(f"  Items on Trakt: {preview.total_items}")
    console.print(f"  Already in library: [yellow]{preview.already_in_library}[/yellow]")
    console.print(f"  New: [green]{preview.new_items}[/green]")


def format_sync_result(result: SyncResult, title: str = "Sync Results", max_errors: int = DEFAULT_MAX_ERRORS):
    """
    Display a finished import or sync with truncated errors.

    Args:
        result: SyncResult to show
        title: Table title
        max_errors: Errors listed in full before summarising the rest
    """
    console.print(_render_sync_result_table(result, title=title))

    if result.cancelled:
        console.print("[yellow]⚠[/yellow] Cancelled before all items were processed")

    if result.errors:
        console.print("\n[bold red]Errors:[/bold red]")
        for line in truncate_errors(result.errors, max_errors):
            console.print(f"  [red]•[/red] {line}")
