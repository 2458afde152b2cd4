"""Exchange the encrypted password for access/refresh tokens."""
from __future__ import annotations

import logging
import time
from contextlib import AsyncExitStack
from typing import Callable, Optional

import httpx
from pydantic import ValidationError

from . import LOGIN_PATH
from .crypto import encrypt
from .errors import LoginDecodeError, LoginHttpError, LoginNetworkError
from .http import TelematicsHTTP
from .identity import derive_device_id
from .schemas import Envelope, KeyMaterial, LoginRequest, LoginResult

__all__ = ["login", "exchange", "prefixed_password"]

_LOG = logging.getLogger(__name__)


def prefixed_password(ciphertext: str, key_material: KeyMaterial) -> str:
    """Tag *ciphertext* with the key generation the server must decrypt it with."""
    return f"{key_material.version_prefix}{ciphertext}"


async def exchange(
    account_identifier: str,
    password: str,
    *,
    http: Optional[TelematicsHTTP] = None,
) -> LoginResult:
    """POST an already encrypted and prefixed *password* to the login endpoint.

    Any non-2xx answer, including rejected credentials, raises
    ``LoginHttpError`` with the status code and body.
    """
    body = LoginRequest(
        device_id=derive_device_id(account_identifier),
        password=password,
        user_id=account_identifier,
    ).to_wire()

    async with AsyncExitStack() as stack:
        if http is None:
            http = await stack.enter_async_context(TelematicsHTTP())
        try:
            resp = await http.post(LOGIN_PATH, json=body)
        except httpx.RequestError as exc:
            raise LoginNetworkError(f"login request failed: {exc!r}") from exc

    if not resp.is_success:
        raise LoginHttpError(resp.status_code, resp.text, str(resp.request.url))

    try:
        envelope = Envelope[LoginResult].model_validate_json(resp.content)
    except ValidationError as exc:
        raise LoginDecodeError(f"unexpected login response: {exc}") from exc
    return envelope.data


async def login(
    account_identifier: str,
    secret: str,
    key_material: KeyMaterial,
    *,
    http: Optional[TelematicsHTTP] = None,
    clock: Callable[[], float] = time.time,
) -> LoginResult:
    """Encrypt *secret* under *key_material* and exchange it for tokens."""
    ciphertext = encrypt(secret, key_material, clock=clock)
    result = await exchange(
        account_identifier, prefixed_password(ciphertext, key_material), http=http
    )
    _LOG.debug("login succeeded user_id=%s temporary_password=%s", result.user_id, result.temporary_password)
    return result
