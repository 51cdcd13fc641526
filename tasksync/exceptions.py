"""Exceptions raised by the sync engine"""


class SyncError(Exception):
    """Base exception for sync failures."""


class CatalogError(SyncError):
    """Raised when a full enumeration of either store fails and the run must abort."""


class ConfigurationError(SyncError):
    """Raised when settings or credentials are missing or malformed."""


class CorrelationKeyError(ValueError):
    """Raised when a correlation key carries the prefix but no integer id."""
