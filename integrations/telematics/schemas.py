"""Wire schemas shared by the key-fetch and login calls.

Attributes are snake_case in Python; the vendor expects camelCase on the wire
(``appId``, ``deviceId``, ``publicKey`` ...), so every model serialises and
parses through generated aliases. Both responses wrap their payload in a
top-level ``data`` object, see :class:`Envelope`.
"""
from __future__ import annotations

import datetime as _dt
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from common.datetime import parse_timestamp

from . import APP_ID, LOCALE, SDK_VERSION, USER_ID_TYPE

__all__ = [
    "WireModel",
    "ClientIdentity",
    "KeyRequest",
    "LoginRequest",
    "KeyMaterial",
    "LoginResult",
    "Envelope",
]

T = TypeVar("T")


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ClientIdentity(WireModel):
    """Static client fields sent with every request plus the device id."""

    app_id: str = APP_ID
    locale: str = LOCALE
    sdk_version: str = SDK_VERSION
    device_id: str


class KeyRequest(ClientIdentity):
    """Query parameters of the public-key call."""


class LoginRequest(ClientIdentity):
    """JSON body of the login call."""

    password: str = Field(repr=False)
    user_id: str
    user_id_type: str = USER_ID_TYPE


class KeyMaterial(WireModel):
    """Per-handshake RSA public key and the tag that must prefix the ciphertext."""

    public_key: str = Field(repr=False)
    version_prefix: str
    # informational only
    algorithm: Optional[str] = None
    key_type: Optional[str] = None


class LoginResult(WireModel):
    access_token: str = Field(repr=False)
    refresh_token: str = Field(repr=False)
    access_token_expires_at: Optional[_dt.datetime] = None
    refresh_token_expires_at: Optional[_dt.datetime] = None
    user_id: Optional[str] = None
    partner_id: Optional[str] = None
    temporary_password: bool = False

    @field_validator("access_token_expires_at", "refresh_token_expires_at", mode="before")
    @classmethod
    def _parse_expiry(cls, value):
        # vendor sends either epoch seconds or ISO-8601
        if value is None or value == "":
            return None
        return parse_timestamp(value)

    @field_validator("user_id", "partner_id", mode="before")
    @classmethod
    def _id_to_str(cls, value):
        # ids arrive as strings or bare numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class Envelope(BaseModel, Generic[T]):
    """``{"data": {...}}`` wrapper used by both endpoints."""

    data: T
