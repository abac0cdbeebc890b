"""
Exception types shared by the data-access layer and the route handlers.
"""

from typing import Optional


class NotFoundError(Exception):
    """Raised when a query returns no rows or a write affects no rows."""
    pass


class ConfigurationError(Exception):
    """Raised when a required setting (e.g. the connection string) is missing."""
    pass


class ExecutionError(Exception):
    """
    Raised when a statement fails at the data-access layer.

    The underlying driver exception is kept as ``__cause__`` and on
    ``self.cause``; its text is meant for logs, not for HTTP clients.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
