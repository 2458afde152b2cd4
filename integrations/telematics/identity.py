"""Deterministic device identifier derived from the account identifier."""
from __future__ import annotations

import hashlib

from . import DEVICE_ID_PREFIX
from .errors import ParseError

__all__ = ["derive_device_id"]

_INT32_MAX = 0x7FFFFFFF


def derive_device_id(account_identifier: str) -> str:
    """Return ``ACCT<int32>`` for *account_identifier*.

    The integer is the first 8 hex characters of the SHA-256 digest read as a
    signed 32-bit value. Prefixes above ``0x7FFFFFFF`` raise ``ParseError``
    instead of wrapping around.
    """
    digest = hashlib.sha256(account_identifier.encode("utf-8")).hexdigest()
    head = digest[:8]
    value = int(head, 16)
    if value > _INT32_MAX:
        raise ParseError(f"digest prefix {head!r} overflows a signed 32-bit integer")
    return f"{DEVICE_ID_PREFIX}{value}"
