"""
Key store contract.

A key store is a persistent mapping from name to private key. It enforces
name uniqueness itself; callers never cache names.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from ..identity.keypair import Keypair


class KeyStore(ABC):
    """
    Abstract name -> private key mapping.

    Stores that can apply a rename or a bulk delete atomically set
    `supports_transactions` and override `rename` / `delete_many`.
    """

    supports_transactions = False

    @abstractmethod
    def put(self, name: str, keypair: Keypair):
        """
        Store a key under a new name.

        Raises:
            NameConflictError: If the name is already taken
            StorageError: If the backend fails
        """

    @abstractmethod
    def get(self, name: str) -> Keypair:
        """
        Raises:
            KeyNotFoundError: If no key has that name
        """

    @abstractmethod
    def has(self, name: str) -> bool:
        """Return True if a key with that name exists."""

    @abstractmethod
    def delete(self, name: str):
        """
        Raises:
            KeyNotFoundError: If no key has that name
            StorageError: If the backend fails
        """

    @abstractmethod
    def list(self) -> list[str]:
        """Return all stored names, in no particular order."""

    def rename(self, old_name: str, new_name: str, overwrite: bool = False) -> bool:
        """
        Atomically move a key to a new name.

        Returns:
            True if an existing key under new_name was replaced

        Raises:
            KeyNotFoundError: If old_name does not exist
            NameConflictError: If new_name exists and overwrite is False
        """
        raise NotImplementedError(f"{type(self).__name__} does not support transactional rename")

    def delete_many(self, names: Sequence[str]):
        """
        Atomically delete several keys.

        Raises:
            KeyNotFoundError: If any name does not exist (nothing is deleted)
        """
        raise NotImplementedError(f"{type(self).__name__} does not support transactional delete")

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return len(self.list())
