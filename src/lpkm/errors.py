"""
Domain-specific exceptions for LPKM.
All exceptions are explicit and carry meaningful context.
"""

from typing import Optional, Sequence, Tuple


class LPKMError(Exception):
    """Base exception for all LPKM errors."""
    pass


class InputError(LPKMError):
    """Raised when caller-supplied input is invalid (reserved name, bad parameters)."""
    pass


class KeyNotFoundError(LPKMError):
    """Raised when a named key does not exist."""

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"no key named {name} was found")


class NameConflictError(LPKMError):
    """Raised when the destination name is already occupied."""

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"key with name '{name}' already exists")


class StorageError(LPKMError):
    """Base exception for key store backend failures."""
    pass


class DatabaseError(StorageError):
    """Base exception for database-related errors."""
    pass


class SchemaError(DatabaseError):
    """Raised when database schema operations fail."""
    pass


class MigrationError(DatabaseError):
    """Raised when database migrations fail."""
    pass


class PartialMutationError(StorageError):
    """
    Raised when a multi-step mutation fails after it has started.

    The key store is left partially mutated: `name` is the entry the
    failing step touched, `completed` lists the (action, name) steps
    already applied.
    """

    def __init__(self, message: str, name: str, completed: Sequence[Tuple[str, str]] = ()):
        self.name = name
        self.completed = list(completed)
        super().__init__(message)


class DerivationError(LPKMError):
    """Raised when an identity cannot be derived from a public key."""
    pass


class KeypairError(LPKMError):
    """Raised when keypair generation or serialization fails."""
    pass


class RepositoryError(LPKMError):
    """Raised when a repository is missing, already initialized, or unreadable."""
    pass


CLIENT_ERRORS = (InputError, KeyNotFoundError, NameConflictError, RepositoryError)


def is_client_error(exc: BaseException) -> bool:
    """
    Classify an exception as caused by client input.

    Args:
        exc: Exception raised by an LPKM operation

    Returns:
        True for input, not-found and name-conflict errors
    """
    return isinstance(exc, CLIENT_ERRORS)
