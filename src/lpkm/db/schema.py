"""
Database schema definitions for LPKM.
All schema changes must be versioned and migrated.
"""

from ..config import DB_SCHEMA_VERSION


# Schema version tracking
SCHEMA_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL,
    description TEXT NOT NULL
)
"""

# Named private keys. "self" never lives here.
KEYS_TABLE = """
CREATE TABLE IF NOT EXISTS keys (
    name TEXT PRIMARY KEY,
    key_type TEXT NOT NULL,
    key_data BLOB NOT NULL,
    created_at TEXT NOT NULL,
    CHECK(length(name) > 0),
    CHECK(name <> 'self'),
    CHECK(key_type IN ('rsa', 'ed25519'))
)
"""

REQUIRED_TABLES = ('schema_version', 'keys')


def get_schema_statements() -> list[str]:
    """
    Get all schema creation statements in order.

    Returns:
        List of SQL statements to create schema
    """
    return [
        SCHEMA_VERSION_TABLE,
        KEYS_TABLE,
    ]


def get_initial_version_insert() -> tuple[str, tuple]:
    """
    Get the initial schema version insert statement.

    Returns:
        Tuple of (SQL statement, parameters)
    """
    from ..utils.time import now

    sql = """
    INSERT INTO schema_version (version, applied_at, description)
    VALUES (?, ?, ?)
    """
    params = (DB_SCHEMA_VERSION, now(), "Initial keystore schema")
    return sql, params
