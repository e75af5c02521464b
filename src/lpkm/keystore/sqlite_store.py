"""
SQLite-backed key store.
Keys are stored as PKCS#8 DER blobs keyed by name.
"""

import sqlite3
from typing import Sequence

from ..db.connection import DatabaseConnection
from ..db.migrations import initialize_schema
from ..errors import DatabaseError, KeyNotFoundError, KeypairError, NameConflictError, StorageError
from ..identity.keypair import Keypair
from ..utils.time import now
from .base import KeyStore


def _is_unique_violation(error: DatabaseError) -> bool:
    cause = error.__cause__
    return isinstance(cause, sqlite3.IntegrityError) and "UNIQUE" in str(cause)


class SQLiteKeyStore(KeyStore):
    """
    Key store persisted in a SQLite database.
    Rename and bulk delete run inside a single transaction.
    """

    supports_transactions = True

    def __init__(self, db: DatabaseConnection):
        """
        Initialize key store, creating the schema if needed.

        Args:
            db: Database connection
        """
        self.db = db
        initialize_schema(self.db)

    @classmethod
    def open(cls, db_path: str) -> 'SQLiteKeyStore':
        """
        Open (or create) a key store database file.

        Args:
            db_path: Path to SQLite database file

        Returns:
            SQLiteKeyStore instance
        """
        db = DatabaseConnection(db_path)
        db.connect()
        return cls(db)

    def close(self):
        """Close database connection."""
        self.db.close()

    def put(self, name: str, keypair: Keypair):
        try:
            with self.db.transaction():
                self.db.execute(
                    """
                    INSERT INTO keys (name, key_type, key_data, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (name, keypair.key_type, keypair.get_private_der(), now())
                )
        except DatabaseError as e:
            if _is_unique_violation(e):
                raise NameConflictError(name)
            raise StorageError(f"Failed to store key {name}: {e}") from e

    def get(self, name: str) -> Keypair:
        row = self.db.fetch_one(
            "SELECT key_data FROM keys WHERE name = ?",
            (name,)
        )

        if not row:
            raise KeyNotFoundError(name)

        try:
            return Keypair.from_private_der(row['key_data'])
        except KeypairError as e:
            raise StorageError(f"Stored key {name} is corrupt: {e}") from e

    def has(self, name: str) -> bool:
        row = self.db.fetch_one(
            "SELECT 1 FROM keys WHERE name = ? LIMIT 1",
            (name,)
        )
        return row is not None

    def delete(self, name: str):
        with self.db.transaction():
            cursor = self.db.execute("DELETE FROM keys WHERE name = ?", (name,))
            if cursor.rowcount == 0:
                raise KeyNotFoundError(name)

    def list(self) -> list[str]:
        rows = self.db.fetch_all("SELECT name FROM keys")
        return [row['name'] for row in rows]

    def rename(self, old_name: str, new_name: str, overwrite: bool = False) -> bool:
        with self.db.transaction():
            if not self.has(old_name):
                raise KeyNotFoundError(old_name)

            overwrote = False
            if self.has(new_name):
                if not overwrite:
                    raise NameConflictError(new_name)
                self.db.execute("DELETE FROM keys WHERE name = ?", (new_name,))
                overwrote = True

            self.db.execute(
                "UPDATE keys SET name = ? WHERE name = ?",
                (new_name, old_name)
            )

        return overwrote

    def delete_many(self, names: Sequence[str]):
        with self.db.transaction():
            for name in names:
                cursor = self.db.execute("DELETE FROM keys WHERE name = ?", (name,))
                if cursor.rowcount == 0:
                    raise KeyNotFoundError(name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
