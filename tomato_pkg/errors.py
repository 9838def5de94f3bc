"""
Exceptions raised by Tomato while loading, building and rendering a site.
"""


class TomatoError(Exception):
    """Base class for every fatal build error."""


class ConfigurationError(TomatoError):
    """Bad directories or a missing/malformed siteinfo.json."""


class IngestionError(TomatoError):
    """Structural inconsistency in the input corpus."""

    def __init__(self, message, path=None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class UnknownAuthorError(IngestionError, KeyError):
    """A content file references an author missing from siteinfo.json."""

    def __str__(self):
        # KeyError would otherwise repr() the message
        return Exception.__str__(self)


class RenderError(TomatoError):
    """Template execution or output writing failed."""
