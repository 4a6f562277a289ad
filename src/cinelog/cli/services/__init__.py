"""Service layer for API wrappers and resource management."""

from .database import DatabaseService
from .tmdb import TmdbService
from .trakt import TraktService

__all__ = [
    "DatabaseService",
    "TmdbService",
    "TraktService",
]
