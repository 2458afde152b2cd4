"""Startup validation of the account credentials.

Credentials come from ``EMAIL`` / ``PASSWORD``: first the process environment
(after loading ``.env.local`` / ``.env`` without overriding it), then the
JSON secrets document. Missing or empty values raise ``ConfigError`` listing
every absent key, before any network call is made.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from common.secrets import get_secret

from .errors import ConfigError

__all__ = ["Credentials", "load_credentials", "ACCOUNT_KEY", "SECRET_KEY"]

_LOG = logging.getLogger(__name__)

ACCOUNT_KEY = "EMAIL"
SECRET_KEY = "PASSWORD"
_ENV_FILES = (".env.local", ".env")


@dataclass(frozen=True)
class Credentials:
    account_identifier: str
    secret: str = field(repr=False)


def _load_env_file(env_file: Optional[str | Path]) -> None:
    candidates = [Path(env_file)] if env_file else [Path.cwd() / f for f in _ENV_FILES]
    for f in candidates:
        if f.exists():
            load_dotenv(dotenv_path=f, override=False)
            _LOG.debug("loaded env file %s", f)
            break


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def _lookup(key: str) -> Optional[str]:
    value = _clean(os.getenv(key))
    if value is not None:
        return value
    try:
        return _clean(get_secret(key))
    except ValueError as exc:
        # also covers json.JSONDecodeError
        raise ConfigError([key], reason=f"unreadable secrets document: {exc}") from exc


def load_credentials(env_file: Optional[str | Path] = None) -> Credentials:
    """Return the configured credentials or raise ``ConfigError``."""
    _load_env_file(env_file)

    account = _lookup(ACCOUNT_KEY)
    secret = _lookup(SECRET_KEY)
    missing = [k for k, v in ((ACCOUNT_KEY, account), (SECRET_KEY, secret)) if v is None]
    if missing:
        raise ConfigError(missing)
    return Credentials(account_identifier=account, secret=secret)
