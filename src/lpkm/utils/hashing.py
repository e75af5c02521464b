"""
Cryptographic hashing utilities.
All hashing is deterministic and uses SHA-256.
"""

import hashlib

from ..config import HASH_ALGORITHM, MULTIHASH_SHA2_256, MULTIHASH_SHA2_256_LENGTH


def digest_bytes(data: bytes) -> bytes:
    """
    Hash bytes using SHA-256.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte raw digest
    """
    if not isinstance(data, bytes):
        raise TypeError(f"Expected bytes, got {type(data)}")

    hasher = hashlib.new(HASH_ALGORITHM)
    hasher.update(data)
    return hasher.digest()


def multihash_sha256(data: bytes) -> bytes:
    """
    Hash bytes into a sha2-256 multihash.

    Layout: <code 0x12><length 0x20><32-byte digest>

    Args:
        data: Raw bytes to hash

    Returns:
        34-byte multihash
    """
    return bytes([MULTIHASH_SHA2_256, MULTIHASH_SHA2_256_LENGTH]) + digest_bytes(data)


def decode_multihash(mh: bytes) -> bytes:
    """
    Extract the digest from a sha2-256 multihash.

    Args:
        mh: Multihash bytes

    Returns:
        32-byte digest

    Raises:
        ValueError: If the multihash is malformed or not sha2-256
    """
    if len(mh) != 2 + MULTIHASH_SHA2_256_LENGTH:
        raise ValueError(f"Invalid multihash length: {len(mh)}")

    if mh[0] != MULTIHASH_SHA2_256 or mh[1] != MULTIHASH_SHA2_256_LENGTH:
        raise ValueError(f"Unsupported multihash prefix: {mh[:2].hex()}")

    return mh[2:]
