"""Error taxonomy for the telematics login handshake.

Every failure carries the ``stage`` it happened in so callers can tell which
step of the handshake aborted. Nothing here is retried.
"""
from __future__ import annotations

from typing import Optional

__all__ = [
    "TelematicsAuthError",
    "ConfigError",
    "ParseError",
    "FetchError",
    "FetchNetworkError",
    "FetchHttpError",
    "FetchDecodeError",
    "CryptoError",
    "KeyParseError",
    "EncryptTooLargeError",
    "ClockError",
    "LoginError",
    "LoginNetworkError",
    "LoginHttpError",
    "LoginDecodeError",
]


class TelematicsAuthError(Exception):
    """Base class for every handshake failure."""

    stage: str = "unknown"


class ConfigError(TelematicsAuthError):
    """Required credentials are missing from the environment/secrets."""

    stage = "config"

    def __init__(self, missing: list[str], *, reason: Optional[str] = None) -> None:
        self.missing = list(missing)
        self.reason = reason
        message = f"Missing configuration: {', '.join(self.missing)}"
        super().__init__(f"{message} ({reason})" if reason else message)


class ParseError(TelematicsAuthError):
    """Device id digest prefix does not fit a signed 32-bit integer."""

    stage = "identity"


class _HttpStatusMixin:
    """Carries the status and raw body of a non-success response."""

    def __init__(self, status_code: int, body: str, url: Optional[str] = None) -> None:
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(f"HTTP {status_code} from {url or 'server'}: {body[:200]}")


class FetchError(TelematicsAuthError):
    stage = "key_fetch"


class FetchNetworkError(FetchError):
    pass


class FetchHttpError(_HttpStatusMixin, FetchError):
    pass


class FetchDecodeError(FetchError):
    pass


class CryptoError(TelematicsAuthError):
    stage = "encrypt"


class KeyParseError(CryptoError):
    pass


class EncryptTooLargeError(CryptoError):
    pass


class ClockError(CryptoError):
    pass


class LoginError(TelematicsAuthError):
    stage = "login"


class LoginNetworkError(LoginError):
    pass


class LoginHttpError(_HttpStatusMixin, LoginError):
    """Any non-2xx login response, including rejected credentials."""


class LoginDecodeError(LoginError):
    pass
