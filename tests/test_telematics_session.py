import base64
import datetime as _dt

import httpx
import pytest
from cryptography.hazmat.primitives.asymmetric import padding

from integrations.telematics import APP_ID, LOCALE, LOGIN_PATH, SDK_VERSION, USER_AGENT
from integrations.telematics.errors import (
    LoginDecodeError,
    LoginHttpError,
    LoginNetworkError,
)
from integrations.telematics.session import exchange, login

FIXED_NOW = 1_700_000_000

LOGIN_DATA = {
    "accessToken": "acc-token-0123456789",
    "refreshToken": "ref-token-9876543210",
    "accessTokenExpiresAt": "2025-08-27T12:00:00Z",
    "refreshTokenExpiresAt": 1_760_000_000,
    "userId": "u-42",
    "partnerId": "p-7",
    "temporaryPassword": False,
}


@pytest.mark.anyio
async def test_login_posts_prefixed_ciphertext(make_http, key_material, rsa_private_key):
    http, vendor = make_http({LOGIN_PATH: httpx.Response(200, json={"data": LOGIN_DATA})})

    result = await login("bob@example.com", "hunter2", key_material, http=http, clock=lambda: FIXED_NOW)

    assert result.access_token == "acc-token-0123456789"

    (request,) = vendor.requests
    assert request.method == "POST"
    assert request.headers["User-Agent"] == USER_AGENT
    assert request.headers["Content-Type"] == "application/json"

    body = vendor.json_body(0)
    password = body.pop("password")
    assert body == {
        "appId": APP_ID,
        "deviceId": "ACCT1610113215",
        "locale": LOCALE,
        "sdkVersion": SDK_VERSION,
        "userId": "bob@example.com",
        "userIdType": "email",
    }

    assert password.startswith("10_")
    ciphertext = base64.b64decode(password[len("10_"):])
    plaintext = rsa_private_key.decrypt(ciphertext, padding.PKCS1v15()).decode()
    assert plaintext == f"hunter2:{FIXED_NOW}"


@pytest.mark.anyio
async def test_login_result_fields_are_decoded(make_http):
    http, _ = make_http({LOGIN_PATH: httpx.Response(200, json={"data": LOGIN_DATA})})

    result = await exchange("bob@example.com", "10_abc", http=http)

    assert result.refresh_token == "ref-token-9876543210"
    assert result.access_token_expires_at == _dt.datetime(2025, 8, 27, 12, tzinfo=_dt.timezone.utc)
    assert result.refresh_token_expires_at == _dt.datetime.fromtimestamp(1_760_000_000, tz=_dt.timezone.utc)
    assert result.user_id == "u-42"
    assert result.partner_id == "p-7"
    assert result.temporary_password is False


@pytest.mark.anyio
async def test_temporary_password_flag(make_http):
    data = {**LOGIN_DATA, "temporaryPassword": True}
    http, _ = make_http({LOGIN_PATH: httpx.Response(200, json={"data": data})})
    result = await exchange("bob@example.com", "10_abc", http=http)
    assert result.temporary_password is True


def test_tokens_are_not_in_repr():
    from integrations.telematics.schemas import LoginResult

    result = LoginResult.model_validate(LOGIN_DATA)
    assert "acc-token" not in repr(result)
    assert "ref-token" not in repr(result)


@pytest.mark.anyio
async def test_missing_access_token_is_decode_error(make_http):
    data = {k: v for k, v in LOGIN_DATA.items() if k != "accessToken"}
    http, _ = make_http({LOGIN_PATH: httpx.Response(200, json={"data": data})})

    with pytest.raises(LoginDecodeError) as exc_info:
        await exchange("bob@example.com", "10_abc", http=http)
    assert exc_info.value.stage == "login"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body",
    [
        {},
        {"data": {**LOGIN_DATA, "accessTokenExpiresAt": "yesterday-ish"}},
        {"data": {**LOGIN_DATA, "refreshTokenExpiresAt": [1, 2]}},
        {"data": {**LOGIN_DATA, "accessToken": None}},
    ],
)
async def test_malformed_login_body_is_decode_error(make_http, body):
    http, _ = make_http({LOGIN_PATH: httpx.Response(200, json=body)})
    with pytest.raises(LoginDecodeError):
        await exchange("bob@example.com", "10_abc", http=http)


@pytest.mark.anyio
async def test_rejected_credentials_are_plain_http_errors(make_http):
    http, _ = make_http(
        {LOGIN_PATH: httpx.Response(401, json={"code": 1001, "msg": "wrong password"})}
    )

    with pytest.raises(LoginHttpError) as exc_info:
        await exchange("bob@example.com", "10_abc", http=http)

    err = exc_info.value
    assert err.status_code == 401
    assert "wrong password" in err.body


@pytest.mark.anyio
async def test_login_timeout_is_network_error(make_http):
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    http, _ = make_http({LOGIN_PATH: slow})
    with pytest.raises(LoginNetworkError):
        await exchange("bob@example.com", "10_abc", http=http)


@pytest.mark.anyio
async def test_numeric_user_and_partner_ids_are_accepted(make_http):
    data = {"accessToken": "a", "refreshToken": "r", "userId": 12345, "partnerId": 7}
    http, _ = make_http({LOGIN_PATH: httpx.Response(200, json={"data": data})})

    result = await exchange("bob@example.com", "10_abc", http=http)

    assert result.access_token == "a"
    assert result.user_id == "12345"
    assert result.partner_id == "7"
