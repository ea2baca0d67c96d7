"""Errors raised by the store. The HTTP layer maps each to a status code."""


class StoreError(Exception):
    """Base class for all store errors."""


class NotFoundError(StoreError):
    """File or project missing on read, update or delete."""


class AlreadyExistsError(StoreError):
    """Duplicate file name within a project, or duplicate project."""


class MalformedChangeError(StoreError):
    """Change entry (or its contents) cannot be applied."""


class TransactionAbortedError(StoreError):
    """The underlying database transaction failed and was rolled back."""
