"""
Configuration constants for LPKM.
These are immutable system constants, not runtime configuration.
"""

# Reserved key names
SELF_KEY_NAME = "self"
RESERVED_KEY_NAMES = frozenset([SELF_KEY_NAME])

# Key types
KEY_TYPE_RSA = "rsa"
KEY_TYPE_ED25519 = "ed25519"
VALID_KEY_TYPES = frozenset([KEY_TYPE_RSA, KEY_TYPE_ED25519])

# RSA parameters
RSA_PUBLIC_EXPONENT = 65537
RSA_MIN_KEY_SIZE = 1024

# Identity derivation (libp2p peer ID layout)
# Protobuf KeyType enum values for marshaled public keys
PROTOBUF_KEY_TYPES = {
    KEY_TYPE_RSA: 0,
    KEY_TYPE_ED25519: 1,
}
MULTIHASH_SHA2_256 = 0x12
MULTIHASH_SHA2_256_LENGTH = 32
HASH_ALGORITHM = "sha256"

# Database constants
DB_SCHEMA_VERSION = 1

# Canonical JSON settings
JSON_SEPARATORS = (',', ':')  # No whitespace
JSON_SORT_KEYS = True
JSON_ENSURE_ASCII = False

# Time constants
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# Repository layout
DEFAULT_REPO_DIR = "~/.lpkm"
REPO_PATH_ENV = "LPKM_PATH"
KEYSTORE_DB_NAME = "keystore.db"
SELF_KEY_FILE_NAME = "identity.pem"

# Logging
LOGGER_NAME = "lpkm"
LOG_LEVEL_ENV = "LPKM_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
