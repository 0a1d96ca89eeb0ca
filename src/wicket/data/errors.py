"""Data layer error hierarchy."""

from wicket.errors import WicketError


class DataError(WicketError):
    """Base for all wicket.data errors."""


class DriverNotInstalledError(DataError):
    """Raised when the required database driver is not installed."""


class DatabaseConnectionError(DataError):
    """Raised when a database connection cannot be established."""


class QueryError(DataError):
    """Raised when a SQL statement fails."""
