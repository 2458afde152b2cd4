"""
Password encryption for the telematics login.

The password is sent as ``base64(RSA-PKCS1v15(pub, "<password>:<unix seconds>"))``.
The embedded timestamp makes every ciphertext unique, so the server can
reject replayed credentials after decrypting them.
"""
from __future__ import annotations

import base64
import binascii
import time
from typing import Callable

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.serialization import load_der_public_key

from .errors import ClockError, EncryptTooLargeError, KeyParseError
from .schemas import KeyMaterial

__all__ = ["encrypt", "load_public_key", "max_plaintext_size", "PKCS1V15_OVERHEAD"]

# PKCS#1 v1.5 padding needs at least 11 bytes of the modulus
PKCS1V15_OVERHEAD = 11


def load_public_key(encoded: str) -> rsa.RSAPublicKey:
    """
    Decode a base64 DER (SubjectPublicKeyInfo) RSA public key.

    Raises:
        KeyParseError: if the text is not base64, not DER, or not an RSA key
    """
    try:
        der = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise KeyParseError(f"public key is not valid base64: {exc}") from exc

    try:
        key = load_der_public_key(der)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyParseError(f"public key is not a DER public key: {exc}") from exc

    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyParseError(f"expected an RSA public key, got {type(key).__name__}")
    return key


def max_plaintext_size(key: rsa.RSAPublicKey) -> int:
    """Largest plaintext (bytes) PKCS#1 v1.5 can carry under *key*."""
    return (key.key_size + 7) // 8 - PKCS1V15_OVERHEAD


def encrypt(
    secret: str,
    key_material: KeyMaterial,
    *,
    clock: Callable[[], float] = time.time,
) -> str:
    """
    Encrypt *secret* with the fetched public key and the current time.

    Args:
        secret: The account password
        key_material: Key material from the key-fetch call
        clock: Returns seconds since the epoch (injectable for tests)

    Returns:
        Base64 ciphertext, without the version prefix
    """
    key = load_public_key(key_material.public_key)

    now = clock()
    if now < 0:
        raise ClockError(f"system clock is before the epoch: {now}")

    plaintext = f"{secret}:{int(now)}".encode("utf-8")
    capacity = max_plaintext_size(key)
    if len(plaintext) > capacity:
        raise EncryptTooLargeError(
            f"credential is {len(plaintext)} bytes; {key.key_size}-bit key holds at most {capacity}"
        )

    ciphertext = key.encrypt(plaintext, padding.PKCS1v15())
    return base64.b64encode(ciphertext).decode("ascii")
