"""Custom CLI exceptions."""


class CinelogError(Exception):
    """Base exception for cinelog errors."""
    pass


class ConfigurationError(CinelogError):
    """Raised when configuration is invalid or missing."""
    pass


class AuthenticationError(CinelogError):
    """Raised when there is no usable Trakt session."""
    pass


class InvalidTransitionError(CinelogError):
    """Raised when an import wizard action is used from the wrong step."""
    pass
