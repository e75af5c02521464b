"""
Database connection management for LPKM.
All database operations use parameterized queries to prevent injection.
"""

import sqlite3
from pathlib import Path
from typing import Optional
from contextlib import contextmanager

from ..errors import DatabaseError


class DatabaseConnection:
    """
    Manages a SQLite connection with explicit write transactions.
    """

    def __init__(self, db_path: str):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file, or ':memory:'
        """
        self.db_path = db_path
        self._connection: Optional[sqlite3.Connection] = None
        self._depth = 0

    def connect(self) -> sqlite3.Connection:
        """
        Establish database connection.

        Returns:
            SQLite connection object

        Raises:
            DatabaseError: If connection fails
        """
        if self._connection is not None:
            return self._connection

        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            # Autocommit mode; transactions are opened explicitly below
            conn = sqlite3.connect(
                str(self.db_path),
                isolation_level=None,
                check_same_thread=False,
            )
            conn.execute("PRAGMA busy_timeout = 5000")
            conn.execute("PRAGMA trusted_schema = OFF")
            conn.execute("PRAGMA journal_mode = WAL")
            conn.row_factory = sqlite3.Row

            self._connection = conn
            return conn

        except (sqlite3.Error, OSError) as e:
            raise DatabaseError(f"Failed to connect to database: {e}")

    def close(self):
        """Close database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            self._depth = 0

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """
        Execute a SQL statement with parameters.

        Args:
            sql: SQL statement (use ? for parameters)
            params: Parameter values

        Returns:
            Cursor object

        Raises:
            DatabaseError: If execution fails
        """
        conn = self.connect()
        try:
            return conn.execute(sql, params)
        except sqlite3.Error as e:
            raise DatabaseError(f"SQL execution failed: {e}") from e

    def fetch_one(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute query and fetch one row."""
        return self.execute(sql, params).fetchone()

    def fetch_all(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Execute query and fetch all rows."""
        return self.execute(sql, params).fetchall()

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def transaction(self):
        """
        Context manager for write transactions.
        The outermost block takes the write lock up front (BEGIN IMMEDIATE)
        and commits or rolls back; nested blocks join it.

        Usage:
            with db.transaction():
                db.execute(...)
        """
        conn = self.connect()
        if self._depth > 0:
            self._depth += 1
            try:
                yield conn
            finally:
                self._depth -= 1
            return

        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to begin transaction: {e}") from e

        self._depth = 1
        try:
            yield conn
        except BaseException:
            self._depth = 0
            try:
                conn.execute("ROLLBACK")
            except sqlite3.Error as e:
                raise DatabaseError(f"Rollback failed: {e}") from e
            raise

        self._depth = 0
        try:
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            conn.execute("ROLLBACK")
            raise DatabaseError(f"Commit failed: {e}") from e

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
