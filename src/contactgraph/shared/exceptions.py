"""
Common exceptions for ContactGraph.
"""


class ContactGraphError(Exception):
    """Base exception for all ContactGraph errors."""
    pass


class ConfigurationError(ContactGraphError):
    """Raised when there are configuration issues."""
    pass


class ContactSourceError(ContactGraphError):
    """Raised when contacts cannot be loaded from their source."""
    pass


class CacheError(ContactGraphError):
    """Raised when cache operations fail."""
    pass


class RenderError(ContactGraphError):
    """Raised when a graph snapshot cannot be rendered."""
    pass
