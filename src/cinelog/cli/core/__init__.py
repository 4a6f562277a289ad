"""Core CLI infrastructure."""

from .context import CinelogContext
from .decorators import (
    with_config,
    with_database,
    with_tmdb,
    with_trakt,
)
from .exceptions import (
    AuthenticationError,
    CinelogError,
    ConfigurationError,
    InvalidTransitionError,
)
from .hooks import get_hook_manager, trigger_hook
from .plugin_loader import CinelogGroup

__all__ = [
    # Context
    "CinelogContext",
    # Decorators
    "with_config",
    "with_database",
    "with_tmdb",
    "with_trakt",
    # Exceptions
    "AuthenticationError",
    "CinelogError",
    "ConfigurationError",
    "InvalidTransitionError",
    # Hooks
    "get_hook_manager",
    "trigger_hook",
    # Plugin loader
    "CinelogGroup",
]
