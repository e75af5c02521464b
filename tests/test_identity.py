"""
Tests for keypair generation and identity derivation.
"""

import pytest
import tempfile
import os

import base58
from cryptography.hazmat.primitives import serialization

from lpkm import Keypair, derive_peer_id
from lpkm.errors import DerivationError, InputError, KeypairError
from lpkm.identity import decode_peer_id, marshal_public_key, matches_public_key
from lpkm.utils.hashing import digest_bytes

from conftest import TEST_RSA_SIZE


class TestKeypairGeneration:
    """Test keypair generation and management."""

    def test_generate_ed25519(self):
        """Test generating an Ed25519 keypair."""
        keypair = Keypair.generate("ed25519")

        assert keypair.key_type == "ed25519"
        assert keypair.size is None

    def test_generate_rsa(self):
        """Test generating an RSA keypair of a given size."""
        keypair = Keypair.generate("rsa", TEST_RSA_SIZE)

        assert keypair.key_type == "rsa"
        assert keypair.size == TEST_RSA_SIZE

    def test_rsa_requires_size(self):
        """Test that RSA without a size is rejected."""
        with pytest.raises(InputError, match="--size"):
            Keypair.generate("rsa")

    def test_rsa_size_too_small(self):
        """Test that tiny RSA keys are rejected."""
        with pytest.raises(InputError):
            Keypair.generate("rsa", 512)

    def test_ed25519_rejects_size(self):
        """Test that Ed25519 takes no size parameter."""
        with pytest.raises(InputError):
            Keypair.generate("ed25519", 2048)

    def test_unknown_type_rejected(self):
        """Test that unrecognized algorithms are rejected."""
        with pytest.raises(InputError, match="unrecognized key type: dsa"):
            Keypair.generate("dsa")

    def test_missing_type_rejected(self):
        """Test that a missing algorithm is rejected."""
        with pytest.raises(InputError, match="--type"):
            Keypair.generate(None)

    def test_der_roundtrip_preserves_identity(self):
        """Test that the stored form reloads to the same key."""
        for keypair in (Keypair.generate("ed25519"), Keypair.generate("rsa", TEST_RSA_SIZE)):
            reloaded = Keypair.from_private_der(keypair.get_private_der())

            assert reloaded == keypair
            assert reloaded.get_identity() == keypair.get_identity()

    def test_invalid_der_rejected(self):
        """Test that garbage key data is rejected."""
        with pytest.raises(KeypairError):
            Keypair.from_private_der(b"not a key")

    def test_save_and_load(self):
        """Test saving and loading keypair from file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            key_path = os.path.join(tmpdir, "identity.pem")

            keypair1 = Keypair.generate("ed25519")
            keypair1.save_to_file(key_path)

            keypair2 = Keypair.load_from_file(key_path)

            assert keypair1.get_identity() == keypair2.get_identity()
            assert os.stat(key_path).st_mode & 0o777 == 0o600

    def test_load_missing_file(self):
        """Test that loading a missing file fails cleanly."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(KeypairError):
                Keypair.load_from_file(os.path.join(tmpdir, "missing.pem"))


class TestPeerIdDerivation:
    """Test identity derivation from public keys."""

    def test_deterministic(self):
        """Test that the same public key always yields the same identity."""
        keypair = Keypair.generate("ed25519")

        assert derive_peer_id(keypair.public_key) == derive_peer_id(keypair.public_key)
        assert keypair.get_identity() == derive_peer_id(keypair.public_key)

    def test_distinct_keys_distinct_identities(self):
        """Test that different keys get different identities."""
        ids = {Keypair.generate("ed25519").get_identity() for _ in range(10)}
        assert len(ids) == 10

    def test_sha256_multihash_prefix(self):
        """Test that identities are base58 sha2-256 multihashes."""
        for keypair in (Keypair.generate("ed25519"), Keypair.generate("rsa", TEST_RSA_SIZE)):
            identity = keypair.get_identity()
            raw = base58.b58decode(identity)

            assert identity.startswith("Qm")
            assert raw[:2] == b"\x12\x20"
            assert len(raw) == 34

    def test_ed25519_marshal_layout(self):
        """Test the protobuf envelope for Ed25519 keys."""
        keypair = Keypair.generate("ed25519")
        raw_public = keypair.public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

        assert marshal_public_key(keypair.public_key) == b"\x08\x01\x12\x20" + raw_public

    def test_rsa_marshal_layout(self):
        """Test the protobuf envelope for RSA keys (multi-byte length)."""
        keypair = Keypair.generate("rsa", TEST_RSA_SIZE)
        der = keypair.public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        marshaled = marshal_public_key(keypair.public_key)

        assert marshaled[:3] == b"\x08\x00\x12"
        assert marshaled.endswith(der)
        assert len(der) > 127

    def test_decode_peer_id(self):
        """Test that decoding yields the digest of the marshaled key."""
        keypair = Keypair.generate("ed25519")
        digest = decode_peer_id(keypair.get_identity())

        assert digest == digest_bytes(marshal_public_key(keypair.public_key))

    def test_decode_invalid_peer_id(self):
        """Test that malformed identities are rejected."""
        with pytest.raises(DerivationError):
            decode_peer_id("Qm")

    def test_matches_public_key(self):
        """Test binding an identity back to its key."""
        keypair1 = Keypair.generate("ed25519")
        keypair2 = Keypair.generate("ed25519")

        assert matches_public_key(keypair1.get_identity(), keypair1.public_key)
        assert not matches_public_key(keypair1.get_identity(), keypair2.public_key)

    def test_unsupported_key_rejected(self):
        """Test that unsupported key types cannot be derived."""
        from cryptography.hazmat.primitives.asymmetric import ec

        ec_key = ec.generate_private_key(ec.SECP256R1())
        with pytest.raises(DerivationError):
            derive_peer_id(ec_key.public_key())
