"""
Shared fixtures for LPKM tests.
"""

import os
import tempfile

import pytest

from lpkm import KeyManager, Keypair, MemoryKeyStore, SQLiteKeyStore
from lpkm.errors import StorageError

# Smallest RSA size accepted; keeps key generation fast
TEST_RSA_SIZE = 1024


class FlakyMemoryKeyStore(MemoryKeyStore):
    """
    Memory key store that fails selected operations.

    fail_on holds (action, name) pairs, e.g. ("delete", "b").
    """

    def __init__(self, fail_on=()):
        super().__init__()
        self.fail_on = set(fail_on)

    def put(self, name, keypair):
        if ("put", name) in self.fail_on:
            raise StorageError(f"injected put failure for {name}")
        super().put(name, keypair)

    def delete(self, name):
        if ("delete", name) in self.fail_on:
            raise StorageError(f"injected delete failure for {name}")
        super().delete(name)


@pytest.fixture
def self_keypair():
    return Keypair.generate("ed25519")


@pytest.fixture
def sqlite_store():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = SQLiteKeyStore.open(os.path.join(tmpdir, "keystore.db"))
        yield store
        store.close()


@pytest.fixture(params=["sqlite", "memory"])
def store(request):
    """Each test using this fixture runs against both backends."""
    if request.param == "memory":
        yield MemoryKeyStore()
    else:
        yield request.getfixturevalue("sqlite_store")


@pytest.fixture
def manager(store, self_keypair):
    return KeyManager(store, self_keypair.get_identity())
