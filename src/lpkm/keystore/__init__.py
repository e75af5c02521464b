"""Key store backends for LPKM."""

from .base import KeyStore
from .memory_store import MemoryKeyStore
from .sqlite_store import SQLiteKeyStore

__all__ = [
    'KeyStore',
    'MemoryKeyStore',
    'SQLiteKeyStore',
]
