"""Custom exceptions for TabSplit."""

from uuid import UUID


class TabSplitError(Exception):
    """Base exception for all TabSplit errors."""

    pass


class ConfigurationError(TabSplitError):
    """Raised when configuration is invalid or missing."""

    pass


class PersistenceError(TabSplitError):
    """Raised when the blob store cannot be read or written."""

    pass


class DuplicateTabError(TabSplitError):
    """Raised when appending a tab whose id is already in the store."""

    def __init__(self, tab_id: UUID, message: str | None = None):
        self.tab_id = tab_id
        super().__init__(message or f"Tab {tab_id} is already in the store")
