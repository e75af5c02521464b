"""
Keypair lifecycle manager.

Generates, lists, renames and removes named keys held in a key store.
The reserved name "self" denotes the node's own identity key, which lives
outside the store and is only ever reported, never mutated.
"""

import threading
from contextlib import contextmanager
from functools import partial
from typing import Callable, Iterable, Optional

from .config import SELF_KEY_NAME
from .errors import (
    InputError,
    KeyNotFoundError,
    LPKMError,
    NameConflictError,
    PartialMutationError,
    StorageError,
)
from .identity.keypair import Keypair, validate_key_params
from .invariants import validate_key_name, validate_key_names
from .keystore.base import KeyStore
from .logger import get_logger
from .models import KeyRecord, RenameResult

logger = get_logger(__name__)

# (action, name, apply) steps of a non-transactional mutation
Step = tuple[str, str, Callable[[], None]]


@contextmanager
def _log_rejection(operation: str):
    """Log requests refused for bad input or missing keys at DEBUG, then re-raise."""
    try:
        yield
    except (InputError, KeyNotFoundError, NameConflictError) as e:
        logger.debug(f"{operation} rejected: {e}")
        raise


class KeyManager:
    """
    Orchestrates key operations against a key store.

    Mutating operations are serialized through a single lock, so one
    KeyManager instance is a single writer. Stores that support
    transactions get atomic rename and bulk remove; other stores get the
    stepwise sequence, whose interruption is reported as
    PartialMutationError.
    """

    def __init__(self, keystore: KeyStore, self_identity: str):
        """
        Initialize key manager.

        Args:
            keystore: Backing key store
            self_identity: Identity of the node's own key, reported as "self"
        """
        self.keystore = keystore
        self.self_identity = self_identity
        self._write_lock = threading.RLock()

    def generate(self, name: str, key_type: Optional[str], size: Optional[int] = None) -> str:
        """
        Generate a new keypair and store it under a name.

        Args:
            name: Name for the new key
            key_type: 'rsa' or 'ed25519'
            size: Key size in bits (RSA only, required)

        Returns:
            Identity of the new key

        Raises:
            InputError: If the name is reserved/empty or parameters are invalid
            NameConflictError: If the name is already taken
            StorageError: If the key cannot be stored
        """
        with _log_rejection("generate"):
            validate_key_name(name, "create")
            validate_key_params(key_type, size)

            with self._write_lock:
                if self.keystore.has(name):
                    raise NameConflictError(name)

                keypair = Keypair.generate(key_type, size)
                identity = keypair.get_identity()
                self.keystore.put(name, keypair)

        logger.info(f"generated {key_type} key {name} ({identity})")
        return identity

    def list_keys(self) -> list[KeyRecord]:
        """
        List all keys, "self" first, then stored keys by name.

        Returns:
            Key records

        Raises:
            StorageError: If any stored key cannot be read; no partial list
        """
        records = [KeyRecord(name=SELF_KEY_NAME, identity=self.self_identity)]

        for name in sorted(self.keystore.list()):
            try:
                keypair = self.keystore.get(name)
            except KeyNotFoundError as e:
                raise StorageError(f"key {name} vanished while listing") from e
            records.append(KeyRecord(name=name, identity=keypair.get_identity()))

        return records

    def rename(self, old_name: str, new_name: str, force: bool = False) -> RenameResult:
        """
        Rename a key, optionally replacing an existing key under the new name.

        Args:
            old_name: Current name
            new_name: Desired name
            force: Allow overwriting an existing key named new_name

        Returns:
            RenameResult with the key's identity and whether it overwrote

        Raises:
            InputError: If either name is reserved/empty or they are equal
            KeyNotFoundError: If old_name does not exist
            NameConflictError: If new_name exists and force is False
            PartialMutationError: If a non-transactional rename is interrupted
        """
        with _log_rejection("rename"):
            validate_key_name(old_name, "rename")
            validate_key_name(new_name, "overwrite")
            if old_name == new_name:
                raise InputError(f"cannot rename key {old_name} to itself")

            with self._write_lock:
                keypair = self.keystore.get(old_name)
                identity = keypair.get_identity()

                if self.keystore.supports_transactions:
                    overwrote = self.keystore.rename(old_name, new_name, overwrite=force)
                else:
                    overwrote = self._rename_stepwise(old_name, new_name, keypair, force)

        logger.info(
            f"renamed key {old_name} to {new_name}"
            + (" with overwriting" if overwrote else "")
        )
        return RenameResult(was=old_name, now=new_name, identity=identity, overwrote=overwrote)

    def remove(self, names: Iterable[str]) -> list[KeyRecord]:
        """
        Remove keys by name.

        Every name is validated and resolved before anything is deleted.

        Args:
            names: Names to remove

        Returns:
            Records of the removed keys, in input order

        Raises:
            InputError: If any name is reserved/empty/duplicated
            KeyNotFoundError: If any name does not exist (nothing deleted)
            PartialMutationError: If a non-transactional delete is interrupted
        """
        with _log_rejection("remove"):
            names = validate_key_names(names, "remove")

            with self._write_lock:
                records = []
                for name in names:
                    keypair = self.keystore.get(name)
                    records.append(KeyRecord(name=name, identity=keypair.get_identity()))

                if self.keystore.supports_transactions:
                    self.keystore.delete_many(names)
                else:
                    self._apply_steps(
                        "remove",
                        [("delete", name, partial(self.keystore.delete, name)) for name in names],
                    )

        logger.info(f"removed keys {', '.join(names)}")
        return records

    def _rename_stepwise(self, old_name: str, new_name: str, keypair: Keypair, force: bool) -> bool:
        """
        Rename as read old -> delete target -> put new -> delete old.
        Not atomic; see _apply_steps.
        """
        overwrote = self.keystore.has(new_name)
        if overwrote and not force:
            raise NameConflictError(new_name)

        steps: list[Step] = []
        if overwrote:
            steps.append(("delete", new_name, partial(self.keystore.delete, new_name)))
        steps.append(("put", new_name, partial(self.keystore.put, new_name, keypair)))
        steps.append(("delete", old_name, partial(self.keystore.delete, old_name)))

        self._apply_steps("rename", steps)
        return overwrote

    def _apply_steps(self, operation: str, steps: list[Step]):
        """
        Apply mutation steps in order. A failure on the first step
        propagates unchanged; a later failure leaves earlier steps applied
        and raises PartialMutationError naming the failing entry.
        """
        completed: list[tuple[str, str]] = []

        for action, name, apply in steps:
            try:
                apply()
            except LPKMError as e:
                if not completed:
                    raise
                logger.error(
                    f"{operation} interrupted at {action} {name}; "
                    f"key store partially mutated: {completed}"
                )
                raise PartialMutationError(
                    f"{operation} failed to {action} key {name}: {e} "
                    f"(already applied: {', '.join(f'{a} {n}' for a, n in completed)})",
                    name=name,
                    completed=completed,
                ) from e
            completed.append((action, name))
