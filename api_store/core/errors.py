"""
Exceptions raised by the catalog store.

Not-found conditions are reported through ``None``/``False`` return values,
never through exceptions.
"""
from typing import Optional


class StoreError(Exception):
    """Base class for every error raised by the store."""

    def __init__(self, message: str, *, email: Optional[str] = None, group_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.email = email
        self.group_id = group_id


class CatalogValidationError(StoreError):
    """Input rejected before any transaction was opened."""


class ForbiddenError(StoreError):
    """The user has no access to the requested group."""


class DefaultGroupError(ForbiddenError):
    """Attempt to modify or delete a system default group."""


class DatabaseError(StoreError):
    """Persistence failure. The enclosing transaction has been rolled back."""


class PoolError(DatabaseError):
    """No pooled connection became available within the configured timeout."""


class FormatterError(StoreError):
    """The remote YAML formatter rejected the document or was unreachable."""
