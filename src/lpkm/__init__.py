"""
LPKM - Local-First Keypair Manager

Named RSA/Ed25519 keypairs in a local SQLite key store, with peer
identities derived from their public keys.

Main exports:
- KeyManager: Generate / list / rename / remove named keys
- Repository: Directory holding the self key and the key store
- Keypair: RSA and Ed25519 keypair management
- SQLiteKeyStore, MemoryKeyStore: Key store backends
"""

from .manager import KeyManager
from .repo import Repository
from .identity import Keypair, derive_peer_id
from .keystore import KeyStore, MemoryKeyStore, SQLiteKeyStore
from .models import KeyRecord, RenameResult
from .errors import *
from .config import *

__version__ = "0.1.0"

__all__ = [
    'KeyManager',
    'Repository',
    'Keypair',
    'derive_peer_id',
    'KeyStore',
    'MemoryKeyStore',
    'SQLiteKeyStore',
    'KeyRecord',
    'RenameResult',
]
