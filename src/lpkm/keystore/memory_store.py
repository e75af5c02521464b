"""
In-memory key store.
Holds serialized keys in a dict; nothing survives the process.
"""

from ..errors import KeyNotFoundError, NameConflictError
from ..identity.keypair import Keypair
from .base import KeyStore


class MemoryKeyStore(KeyStore):
    """
    Volatile key store. Not transactional: multi-step operations against
    it are applied one step at a time.
    """

    def __init__(self):
        self._keys: dict[str, bytes] = {}

    def put(self, name: str, keypair: Keypair):
        if name in self._keys:
            raise NameConflictError(name)
        self._keys[name] = keypair.get_private_der()

    def get(self, name: str) -> Keypair:
        try:
            der_data = self._keys[name]
        except KeyError:
            raise KeyNotFoundError(name)
        return Keypair.from_private_der(der_data)

    def has(self, name: str) -> bool:
        return name in self._keys

    def delete(self, name: str):
        if self._keys.pop(name, None) is None:
            raise KeyNotFoundError(name)

    def list(self) -> list[str]:
        return list(self._keys)
