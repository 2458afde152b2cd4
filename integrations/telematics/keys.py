"""Fetch the per-session RSA public key used to encrypt the password."""
from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from typing import Optional

import httpx
from pydantic import ValidationError

from . import KEY_PATH
from .errors import FetchDecodeError, FetchHttpError, FetchNetworkError
from .http import TelematicsHTTP
from .identity import derive_device_id
from .schemas import Envelope, KeyMaterial, KeyRequest

__all__ = ["fetch_key"]

_LOG = logging.getLogger(__name__)


async def fetch_key(
    account_identifier: str, *, http: Optional[TelematicsHTTP] = None
) -> KeyMaterial:
    """Return fresh key material for one handshake.

    A single GET, no retries. A caller-supplied *http* is left open; otherwise
    a client is created and closed around the call.
    """
    params = KeyRequest(device_id=derive_device_id(account_identifier)).to_wire()

    async with AsyncExitStack() as stack:
        if http is None:
            http = await stack.enter_async_context(TelematicsHTTP())
        try:
            resp = await http.get(KEY_PATH, params=params)
        except httpx.RequestError as exc:
            raise FetchNetworkError(f"key fetch failed: {exc!r}") from exc

    if not resp.is_success:
        raise FetchHttpError(resp.status_code, resp.text, str(resp.request.url))

    try:
        envelope = Envelope[KeyMaterial].model_validate_json(resp.content)
    except ValidationError as exc:
        raise FetchDecodeError(f"unexpected key response: {exc}") from exc

    key = envelope.data
    _LOG.debug("fetched key material version_prefix=%s algorithm=%s", key.version_prefix, key.algorithm)
    return key
