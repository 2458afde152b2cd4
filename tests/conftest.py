import base64
import json

import httpx
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from common import secrets as secrets_module
from integrations.telematics.http import TelematicsHTTP
from integrations.telematics.schemas import KeyMaterial


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _secrets(monkeypatch):
    """Empty secrets document and no credentials leaking in from the shell."""

    monkeypatch.delenv("EMAIL", raising=False)
    monkeypatch.delenv("PASSWORD", raising=False)
    secrets_module.secrets.set_override({})
    yield
    secrets_module.secrets.set_override({})


# ---------------------------------------------------------------------------
# RSA fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def public_key_b64(rsa_private_key):
    der = rsa_private_key.public_key().public_bytes(
        Encoding.DER, PublicFormat.SubjectPublicKeyInfo
    )
    return base64.b64encode(der).decode()


@pytest.fixture
def key_material(public_key_b64):
    return KeyMaterial(
        public_key=public_key_b64,
        version_prefix="10_",
        algorithm="RSA",
        key_type="PKCS1",
    )


# ---------------------------------------------------------------------------
# Fake vendor API
# ---------------------------------------------------------------------------


class FakeVendor:
    """Routes requests by path to canned responses and records them."""

    def __init__(self, routes):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(handler):
            return handler(request)
        # fresh copy so a canned response can be served more than once
        return httpx.Response(handler.status_code, headers=handler.headers, content=handler.content)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def json_body(self, index: int) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def make_http():
    """Build a TelematicsHTTP bound to a FakeVendor keyed by URL path."""

    def _make(routes):
        vendor = FakeVendor(routes)
        http = TelematicsHTTP(base_url="https://api.test", transport=httpx.MockTransport(vendor))
        return http, vendor

    return _make
