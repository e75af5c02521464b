"""Keypairs and identity derivation for LPKM."""

from .keypair import Keypair, validate_key_params, key_type_of
from .peer_id import derive_peer_id, decode_peer_id, marshal_public_key, matches_public_key

__all__ = [
    'Keypair',
    'validate_key_params',
    'key_type_of',
    'derive_peer_id',
    'decode_peer_id',
    'marshal_public_key',
    'matches_public_key',
]
