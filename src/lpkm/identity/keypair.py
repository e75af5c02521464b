"""
RSA and Ed25519 keypair generation and management.
Private keys are stored by the key store as unencrypted PKCS#8 DER.
"""

from pathlib import Path
from typing import Optional, Union
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from ..config import (
    KEY_TYPE_ED25519,
    KEY_TYPE_RSA,
    RSA_MIN_KEY_SIZE,
    RSA_PUBLIC_EXPONENT,
    VALID_KEY_TYPES,
)
from ..errors import InputError, KeypairError

PrivateKey = Union[rsa.RSAPrivateKey, Ed25519PrivateKey]
PublicKey = Union[rsa.RSAPublicKey, Ed25519PublicKey]


def validate_key_params(key_type: Optional[str], size: Optional[int] = None):
    """
    Validate key generation parameters without generating anything.

    Args:
        key_type: Key algorithm ('rsa' or 'ed25519')
        size: Key size in bits (RSA only)

    Raises:
        InputError: If the algorithm is missing or unknown, or the size is
            missing, invalid, or not accepted by the algorithm
    """
    if not key_type:
        raise InputError("please specify a key type with --type")

    if key_type not in VALID_KEY_TYPES:
        raise InputError(f"unrecognized key type: {key_type}")

    if key_type == KEY_TYPE_RSA:
        if size is None:
            raise InputError("please specify a key size with --size")
        if size < RSA_MIN_KEY_SIZE:
            raise InputError(f"rsa key size must be at least {RSA_MIN_KEY_SIZE} bits, got {size}")
    elif size is not None:
        raise InputError(f"key type {key_type} does not accept a size")


def key_type_of(key: Union[PrivateKey, PublicKey]) -> str:
    """
    Get the key type name for a private or public key object.

    Raises:
        KeypairError: If the key algorithm is not supported
    """
    if isinstance(key, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
        return KEY_TYPE_RSA
    if isinstance(key, (Ed25519PrivateKey, Ed25519PublicKey)):
        return KEY_TYPE_ED25519
    raise KeypairError(f"Unsupported key type: {type(key).__name__}")


class Keypair:
    """
    RSA or Ed25519 keypair.
    """

    def __init__(self, private_key: PrivateKey):
        """
        Initialize keypair from private key.

        Args:
            private_key: RSA or Ed25519 private key object
        """
        self._key_type = key_type_of(private_key)
        self._private_key = private_key
        self._public_key = private_key.public_key()

    @classmethod
    def generate(cls, key_type: Optional[str], size: Optional[int] = None) -> 'Keypair':
        """
        Generate a new keypair.

        Args:
            key_type: 'rsa' or 'ed25519'
            size: Key size in bits, required for RSA

        Returns:
            New Keypair instance

        Raises:
            InputError: If parameters are invalid
            KeypairError: If the backend fails to generate the key
        """
        validate_key_params(key_type, size)

        try:
            if key_type == KEY_TYPE_RSA:
                private_key = rsa.generate_private_key(
                    public_exponent=RSA_PUBLIC_EXPONENT,
                    key_size=size,
                )
            else:
                private_key = Ed25519PrivateKey.generate()
        except (ValueError, UnsupportedAlgorithm) as e:
            raise KeypairError(f"Failed to generate {key_type} key: {e}")

        return cls(private_key)

    @classmethod
    def from_private_der(cls, der_data: bytes) -> 'Keypair':
        """
        Load keypair from PKCS#8 DER-encoded private key.

        Raises:
            KeypairError: If DER is invalid or holds an unsupported key
        """
        try:
            private_key = serialization.load_der_private_key(der_data, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeypairError(f"Invalid DER data: {e}")
        return cls(private_key)

    @classmethod
    def from_private_pem(cls, pem_data: bytes) -> 'Keypair':
        """
        Load keypair from PEM-encoded private key.

        Raises:
            KeypairError: If PEM is invalid or holds an unsupported key
        """
        try:
            private_key = serialization.load_pem_private_key(pem_data, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeypairError(f"Invalid PEM data: {e}")
        return cls(private_key)

    @classmethod
    def load_from_file(cls, path: str) -> 'Keypair':
        """
        Load keypair from PEM file.

        Raises:
            KeypairError: If file cannot be read
        """
        try:
            pem_data = Path(path).read_bytes()
        except OSError as e:
            raise KeypairError(f"Cannot read key file: {e}")
        return cls.from_private_pem(pem_data)

    def get_private_der(self) -> bytes:
        """
        Export private key as PKCS#8 DER.
        WARNING: Handle with extreme care.
        """
        return self._private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def get_private_pem(self) -> bytes:
        """
        Export private key as PEM.
        WARNING: Handle with extreme care.
        """
        return self._private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def get_identity(self) -> str:
        """
        Derive the peer identity of this keypair's public key.

        Returns:
            Base58 peer ID string
        """
        from .peer_id import derive_peer_id

        return derive_peer_id(self._public_key)

    def save_to_file(self, path: str):
        """
        Save private key to PEM file, readable by the owner only.

        Raises:
            KeypairError: If file cannot be written
        """
        try:
            key_path = Path(path)
            key_path.parent.mkdir(parents=True, exist_ok=True)
            key_path.write_bytes(self.get_private_pem())
            key_path.chmod(0o600)
        except OSError as e:
            raise KeypairError(f"Cannot write key file: {e}")

    @property
    def key_type(self) -> str:
        """Key algorithm name."""
        return self._key_type

    @property
    def size(self) -> Optional[int]:
        """RSA modulus size in bits, None for Ed25519."""
        if self._key_type == KEY_TYPE_RSA:
            return self._private_key.key_size
        return None

    @property
    def private_key(self) -> PrivateKey:
        return self._private_key

    @property
    def public_key(self) -> PublicKey:
        return self._public_key

    def __eq__(self, other):
        if not isinstance(other, Keypair):
            return NotImplemented
        return self.get_private_der() == other.get_private_der()

    def __hash__(self):
        return hash(self.get_private_der())

    def __repr__(self):
        return f"Keypair(type={self._key_type!r}, size={self.size!r})"
