"""
Peer identity derivation.

Identity = base58btc(multihash_sha256(marshal(public_key)))

The public key is marshaled as a protobuf message
    { 1: KeyType (varint), 2: Data (bytes) }
where Data is the PKIX DER encoding for RSA and the raw 32 bytes for Ed25519.
This matches the libp2p peer ID layout, so identities start with "Qm".
"""

import base58
from cryptography.hazmat.primitives import serialization

from ..config import KEY_TYPE_RSA, PROTOBUF_KEY_TYPES
from ..errors import DerivationError, KeypairError
from ..utils.hashing import decode_multihash, multihash_sha256
from .keypair import PublicKey, key_type_of

# Protobuf field tags: (field_number << 3) | wire_type
_TAG_KEY_TYPE = 0x08
_TAG_DATA = 0x12


def _encode_uvarint(value: int) -> bytes:
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def marshal_public_key(public_key: PublicKey) -> bytes:
    """
    Marshal a public key into its protobuf envelope.

    Args:
        public_key: RSA or Ed25519 public key object

    Returns:
        Protobuf-encoded public key bytes

    Raises:
        DerivationError: If the key type is unsupported
    """
    try:
        key_type = key_type_of(public_key)
    except KeypairError as e:
        raise DerivationError(str(e))

    if key_type == KEY_TYPE_RSA:
        data = public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    else:
        data = public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    return (
        bytes([_TAG_KEY_TYPE])
        + _encode_uvarint(PROTOBUF_KEY_TYPES[key_type])
        + bytes([_TAG_DATA])
        + _encode_uvarint(len(data))
        + data
    )


def derive_peer_id(public_key: PublicKey) -> str:
    """
    Derive the peer identity for a public key.
    Deterministic: the same key always yields the same identity.

    Args:
        public_key: RSA or Ed25519 public key object

    Returns:
        Base58-encoded peer ID

    Raises:
        DerivationError: If the identity cannot be computed
    """
    marshaled = marshal_public_key(public_key)
    return base58.b58encode(multihash_sha256(marshaled)).decode('ascii')


def decode_peer_id(peer_id: str) -> bytes:
    """
    Decode a peer ID into its sha2-256 digest.

    Raises:
        DerivationError: If the string is not a valid peer ID
    """
    try:
        return decode_multihash(base58.b58decode(peer_id))
    except ValueError as e:
        raise DerivationError(f"Invalid peer ID {peer_id!r}: {e}")


def matches_public_key(peer_id: str, public_key: PublicKey) -> bool:
    """
    Check whether a peer ID was derived from the given public key.
    """
    return derive_peer_id(public_key) == peer_id
