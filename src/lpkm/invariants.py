"""
Key name invariants.
Every operation that accepts a key name validates it here, once per name.
"""

from typing import Iterable

from .config import RESERVED_KEY_NAMES
from .errors import InputError


def validate_key_name(name: str, verb: str = "use"):
    """
    Validate a caller-supplied key name.

    Args:
        name: Key name
        verb: Operation attempted, used in the error message
            ("create", "rename", "overwrite", "remove", ...)

    Raises:
        InputError: If the name is empty, not a string, or reserved
    """
    if not isinstance(name, str):
        raise InputError(f"key name must be a string, got {type(name).__name__}")

    if not name:
        raise InputError(f"cannot {verb} key with an empty name")

    if name in RESERVED_KEY_NAMES:
        raise InputError(f"cannot {verb} key with name '{name}'")


def validate_key_names(names: Iterable[str], verb: str = "use") -> list[str]:
    """
    Validate a batch of key names, rejecting duplicates.

    Args:
        names: Key names in caller order
        verb: Operation attempted

    Returns:
        The names as a list, order preserved

    Raises:
        InputError: If any name is invalid or repeated, or none are given
    """
    names = list(names)
    if not names:
        raise InputError(f"no key names given to {verb}")

    seen = set()
    for name in names:
        validate_key_name(name, verb)
        if name in seen:
            raise InputError(f"key name '{name}' given more than once")
        seen.add(name)

    return names
