"""Type-prefixed unique identifiers.

A UID is 16 lowercase alphanumeric characters: one prefix letter naming the
entity type, 6 base36 characters of the unix time and 9 random characters.

Examples:
    >>> is_uid("p1a2b3c4d5e6f7g8", "p")
    True
    >>> is_uid("p1a2b3c4d5e6f7g8", "f")
    False
"""
from __future__ import annotations

import secrets
import string
import time
from typing import Optional

UID_LENGTH = 16

PHOTO_PREFIX = "p"
FILE_PREFIX = "f"
ALBUM_PREFIX = "a"
LABEL_PREFIX = "l"
USER_PREFIX = "u"

_ALPHABET = string.digits + string.ascii_lowercase


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_ALPHABET[rem])
    return "".join(reversed(out))


def generate_uid(prefix: str, now: Optional[float] = None) -> str:
    """Return a new UID starting with `prefix`."""
    if len(prefix) != 1 or prefix not in string.ascii_lowercase:
        raise ValueError(f"invalid uid prefix: {prefix!r}")
    ts = int(now if now is not None else time.time())
    stamp = _base36(ts).rjust(6, "0")[-6:]
    rand = "".join(secrets.choice(_ALPHABET) for _ in range(UID_LENGTH - 1 - len(stamp)))
    return f"{prefix}{stamp}{rand}"


def is_uid(value: Optional[str], prefix: str) -> bool:
    """Check that `value` is a well-formed UID of the given type."""
    if not value or len(value) != UID_LENGTH:
        return False
    if value[0] != prefix:
        return False
    return all(ch in _ALPHABET for ch in value)


def ensure_uid(obj, attr: str, prefix: str) -> str:
    """Assign a new UID to `obj.<attr>` unless it already holds a valid one."""
    current = getattr(obj, attr, None)
    if is_uid(current, prefix):
        return current
    value = generate_uid(prefix)
    setattr(obj, attr, value)
    return value
