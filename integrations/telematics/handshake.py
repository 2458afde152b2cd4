"""Linear login handshake: fetch key -> encrypt -> exchange for tokens.

States only move forward:

    START -> KEY_FETCHED -> ENCRYPTED -> AUTHENTICATED

A failure in any stage re-raises that stage's error, leaves ``state`` where
it stopped and drops the key material. A handshake object runs once; start
a new one to try again.
"""
from __future__ import annotations

import logging
import time
from contextlib import AsyncExitStack
from enum import Enum
from typing import Callable, Optional

from prometheus_client import Counter

from .crypto import encrypt
from .errors import TelematicsAuthError
from .http import TelematicsHTTP
from .identity import derive_device_id
from .keys import fetch_key
from .schemas import KeyMaterial, LoginResult
from .session import exchange, prefixed_password

__all__ = ["HandshakeState", "Handshake", "authenticate"]

_LOG = logging.getLogger(__name__)

_HANDSHAKES_TOTAL = Counter(
    "telematics_handshakes_total",
    "Login handshakes by outcome and the stage they ended in",
    ["result", "stage"],
)


class HandshakeState(str, Enum):
    START = "start"
    KEY_FETCHED = "key_fetched"
    ENCRYPTED = "encrypted"
    AUTHENTICATED = "authenticated"


class Handshake:
    """One login attempt for one account."""

    def __init__(
        self,
        account_identifier: str,
        secret: str,
        *,
        http: Optional[TelematicsHTTP] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._account_identifier = account_identifier
        self._secret = secret
        self._http = http
        self._clock = clock
        self._key_material: Optional[KeyMaterial] = None
        self._started = False
        self.state = HandshakeState.START

    def _advance(self, state: HandshakeState, device_id: str) -> None:
        self.state = state
        _LOG.info("handshake %s", state.value, extra={"stage": state.value, "device_id": device_id})

    async def run(self) -> LoginResult:
        if self._started:
            raise RuntimeError("handshake already ran; create a new Handshake to retry")
        self._started = True

        try:
            async with AsyncExitStack() as stack:
                http = self._http
                if http is None:
                    http = await stack.enter_async_context(TelematicsHTTP())
                result = await self._run(http)
        except TelematicsAuthError as exc:
            self._key_material = None
            _HANDSHAKES_TOTAL.labels("failure", exc.stage).inc()
            _LOG.warning(
                "handshake failed in %s: %s",
                exc.stage,
                type(exc).__name__,
                extra={"stage": exc.stage},
            )
            raise
        finally:
            self._secret = ""

        _HANDSHAKES_TOTAL.labels("success", self.state.value).inc()
        return result

    async def _run(self, http: TelematicsHTTP) -> LoginResult:
        device_id = derive_device_id(self._account_identifier)

        self._key_material = await fetch_key(self._account_identifier, http=http)
        self._advance(HandshakeState.KEY_FETCHED, device_id)

        ciphertext = encrypt(self._secret, self._key_material, clock=self._clock)
        password = prefixed_password(ciphertext, self._key_material)
        self._advance(HandshakeState.ENCRYPTED, device_id)

        result = await exchange(self._account_identifier, password, http=http)
        self._key_material = None
        self._advance(HandshakeState.AUTHENTICATED, device_id)
        return result


async def authenticate(
    account_identifier: str,
    secret: str,
    *,
    http: Optional[TelematicsHTTP] = None,
    clock: Callable[[], float] = time.time,
) -> LoginResult:
    """Run a full handshake and return the login tokens."""
    return await Handshake(account_identifier, secret, http=http, clock=clock).run()
