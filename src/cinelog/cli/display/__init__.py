"""Display layer for CLI output."""

from .console import console
from .formatters import format_import_status, format_preview, format_sync_result, truncate_errors
from .tables import (
    _render_options_table,
    _render_preview_table,
    _render_status_table,
    _render_sync_result_table,
)

__all__ = [
    "console",
    "format_import_status",
    "format_preview",
    "format_sync_result",
    "truncate_errors",
    "_render_options_table",
    "_render_preview_table",
    "_render_status_table",
    "_render_sync_result_table",
]
