"""Import preview: what an import would add to the library."""

import logging
from typing import Iterable

from ...db import Database
from ...models import ImportPreview, MediaType
from .candidates import ImportItem

logger = logging.getLogger(__name__)


def is_in_library(library: Database, item: ImportItem) -> bool:
    if item.media_type == MediaType.MOVIE:
        return library.is_movie_in_library(item.tmdb_id)
    return library.is_series_in_library(item.tmdb_id)


def build_preview(items: Iterable[ImportItem], library: Database) -> ImportPreview:
    """Classify candidates as new or already in the library.

    Only existence checks are made; the library is never modified.

    Args:
        items: Import candidates, one per title
        library: Local library

    Returns:
        ImportPreview with counts and titles
    """
    movies = []
    series = []
    already_in_library = 0

    for item in items:
        if item.media_type == MediaType.MOVIE:
            movies.append(item.title)
        else:
            series.append(item.title)
        if is_in_library(library, item):
            already_in_library += 1

    total = len(movies) + len(series)
    preview = ImportPreview(
        total_items=total,
        already_in_library=already_in_library,
        new_items=total - already_in_library,
        movies=tuple(movies),
        series=tuple(series),
    )
    logger.debug(
        f"Preview: {preview.total_items} items, {preview.already_in_library} in library, "
        f"{preview.new_items} new"
    )
    return preview
