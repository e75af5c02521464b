"""
LPKM Repository - a directory holding a node's keys.

Layout:
    <repo>/identity.pem   the node's own "self" key (outside the key store)
    <repo>/keystore.db    SQLite key store with all named keys
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from .config import (
    DEFAULT_REPO_DIR,
    KEY_TYPE_ED25519,
    KEYSTORE_DB_NAME,
    REPO_PATH_ENV,
    SELF_KEY_FILE_NAME,
)
from .db.migrations import verify_schema
from .errors import KeypairError, RepositoryError
from .identity.keypair import Keypair
from .keystore.sqlite_store import SQLiteKeyStore
from .logger import get_logger
from .manager import KeyManager

logger = get_logger(__name__)


def resolve_repo_path(path: Optional[str] = None) -> Path:
    """
    Resolve the repository directory.

    Order: explicit path, then $LPKM_PATH, then ~/.lpkm.
    """
    if not path:
        path = os.environ.get(REPO_PATH_ENV) or DEFAULT_REPO_DIR
    return Path(path).expanduser()


class Repository:
    """
    Opened repository.

    This is the primary interface for:
    - Creating a repository and its self key
    - Reaching the key manager for named keys
    """

    def __init__(self, path: str):
        """
        Open an initialized repository.

        Args:
            path: Repository directory

        Raises:
            RepositoryError: If the repository is not initialized or its
                self key cannot be loaded
        """
        self.path = resolve_repo_path(path)

        if not self.is_initialized(self.path):
            raise RepositoryError(
                f"no repository at {self.path}, run 'lpkm init' first"
            )

        try:
            self.self_keypair = Keypair.load_from_file(str(self.self_key_path))
        except KeypairError as e:
            raise RepositoryError(f"cannot load self key: {e}")

        self.identity = self.self_keypair.get_identity()
        self.keystore = SQLiteKeyStore.open(str(self.keystore_path))
        self.manager = KeyManager(self.keystore, self.identity)

    @classmethod
    def init(
        cls,
        path: str,
        key_type: str = KEY_TYPE_ED25519,
        size: Optional[int] = None,
    ) -> 'Repository':
        """
        Create a new repository with a fresh self key.

        Args:
            path: Repository directory
            key_type: Algorithm of the self key
            size: Key size in bits (RSA only)

        Returns:
            Opened Repository

        Raises:
            RepositoryError: If a repository already exists there
            InputError: If the key parameters are invalid
        """
        repo_path = resolve_repo_path(path)
        if cls.is_initialized(repo_path):
            raise RepositoryError(f"repository at {repo_path} already initialized")

        keypair = Keypair.generate(key_type, size)
        keypair.save_to_file(str(repo_path / SELF_KEY_FILE_NAME))
        logger.info(f"initialized repository at {repo_path} ({keypair.get_identity()})")

        return cls(str(repo_path))

    @staticmethod
    def is_initialized(path: Path) -> bool:
        return (Path(path) / SELF_KEY_FILE_NAME).is_file()

    @property
    def self_key_path(self) -> Path:
        return self.path / SELF_KEY_FILE_NAME

    @property
    def keystore_path(self) -> Path:
        return self.path / KEYSTORE_DB_NAME

    def health_check(self) -> Dict[str, Any]:
        """
        Perform repository health check.

        Returns:
            Health status dictionary
        """
        schema_valid = verify_schema(self.keystore.db)
        return {
            'status': 'healthy' if schema_valid else 'unhealthy',
            'schema_valid': schema_valid,
            'identity': self.identity,
            'keys': len(self.keystore),
        }

    def close(self):
        """Close the key store."""
        self.keystore.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
