import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from justoo.api.deps import get_auth_service
from justoo.core.config import settings as app_settings
from justoo.main import app

from tests.fakes import PHONE

AUTH = f"{app_settings.API_V1_STR}/customer/auth"


@pytest_asyncio.fixture
async def client(service):
    app.dependency_overrides[get_auth_service] = lambda: service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def login(client, otp):
    send_res = await client.post(f"{AUTH}/send-otp", json={"phone": PHONE})
    assert send_res.status_code == 200
    return await client.post(f"{AUTH}/verify-otp", json={"phone": PHONE, "otp": otp})


@pytest.mark.asyncio
async def test_send_otp_returns_ok_and_delivers_in_background(client, sms_sender, fixed_otp):
    res = await client.post(f"{AUTH}/send-otp", json={"phone": PHONE})
    assert res.status_code == 200
    assert res.json() == {"ok": True}
    assert sms_sender.sent and fixed_otp in sms_sender.sent[0][1]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"phone": ""}, {"phone": "   "}, {"phone": None}])
async def test_send_otp_without_phone(client, body):
    res = await client.post(f"{AUTH}/send-otp", json=body)
    assert res.status_code == 400
    assert res.json() == {"error": "PHONE_REQUIRED"}


@pytest.mark.asyncio
async def test_send_otp_not_whitelisted(client, store):
    res = await client.post(f"{AUTH}/send-otp", json={"phone": "+15550001111"})
    assert res.status_code == 403
    assert res.json() == {"error": "PHONE_NOT_WHITELISTED"}
    assert store.otps == {}


@pytest.mark.asyncio
async def test_verify_example_flow(client, fixed_otp):
    res = await login(client, fixed_otp)
    assert res.status_code == 200
    data = res.json()
    assert data["token"]
    assert data["customer"]["phone"] == PHONE
    assert data["customer"]["name"] == "Customer 3210"
    assert data["customer"]["email"] is None
    assert "createdAt" in data["customer"]

    replay = await client.post(f"{AUTH}/verify-otp", json={"phone": PHONE, "otp": fixed_otp})
    assert replay.status_code == 401
    assert replay.json() == {"error": "OTP_INVALID"}


@pytest.mark.asyncio
async def test_verify_accepts_numeric_code(client, fixed_otp):
    await client.post(f"{AUTH}/send-otp", json={"phone": PHONE})
    res = await client.post(f"{AUTH}/verify-otp", json={"phone": PHONE, "otp": int(fixed_otp)})
    assert res.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"phone": PHONE}, {"otp": "123456"}, {"phone": " ", "otp": "1"}])
async def test_verify_missing_fields(client, body):
    res = await client.post(f"{AUTH}/verify-otp", json=body)
    assert res.status_code == 400
    assert res.json() == {"error": "PHONE_AND_OTP_REQUIRED"}


@pytest.mark.asyncio
async def test_verify_expired(client, clock, fixed_otp):
    await client.post(f"{AUTH}/send-otp", json={"phone": PHONE})
    clock.advance(minutes=6)
    res = await client.post(f"{AUTH}/verify-otp", json={"phone": PHONE, "otp": fixed_otp})
    assert res.status_code == 401
    assert res.json() == {"error": "OTP_EXPIRED"}


@pytest.mark.asyncio
async def test_verify_token_failure_is_server_error(client, service, fixed_otp):
    service.token_issuer = lambda customer: ""
    res = await login(client, fixed_otp)
    assert res.status_code == 500
    assert res.json() == {"error": "TOKEN_CREATE_FAILED"}


@pytest.mark.asyncio
async def test_logout_is_idempotent(client, store, fixed_otp):
    token = (await login(client, fixed_otp)).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    res = await client.post(f"{AUTH}/logout", headers=headers)
    assert res.status_code == 204
    assert res.content == b""
    assert store.sessions == {}

    replay = await client.post(f"{AUTH}/logout", headers=headers)
    assert replay.status_code == 204


@pytest.mark.asyncio
async def test_revoke_is_an_alias_of_logout(client, store, fixed_otp):
    token = (await login(client, fixed_otp)).json()["token"]
    res = await client.post(f"{AUTH}/revoke", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 204
    assert store.sessions == {}


@pytest.mark.asyncio
async def test_logout_without_token(client):
    res = await client.post(f"{AUTH}/logout")
    assert res.status_code == 401
    assert res.json() == {"error": "TOKEN_REQUIRED"}

    res = await client.post(f"{AUTH}/logout", headers={"Authorization": "Basic abc"})
    assert res.status_code == 401
    assert res.json() == {"error": "TOKEN_REQUIRED"}


@pytest.mark.asyncio
async def test_logout_with_invalid_token(client):
    res = await client.post(f"{AUTH}/logout", headers={"Authorization": "Bearer nope"})
    assert res.status_code == 401
    assert res.json() == {"error": "TOKEN_INVALID"}


@pytest.mark.asyncio
async def test_missing_or_null_body_is_a_validation_error(client):
    json_headers = {"Content-Type": "application/json"}

    cases = [
        (f"{AUTH}/send-otp", "PHONE_REQUIRED"),
        (f"{AUTH}/verify-otp", "PHONE_AND_OTP_REQUIRED"),
    ]
    for url, code in cases:
        no_body = await client.post(url)
        assert no_body.status_code == 400
        assert no_body.json() == {"error": code}

        null_body = await client.post(url, content=b"null", headers=json_headers)
        assert null_body.status_code == 400
        assert null_body.json() == {"error": code}

        list_body = await client.post(url, json=[PHONE])
        assert list_body.status_code == 400
        assert list_body.json() == {"error": code}


@pytest.mark.asyncio
async def test_non_string_fields_are_read_as_text(client, store):
    res = await client.post(f"{AUTH}/send-otp", json={"phone": True})
    assert res.status_code == 403
    assert res.json() == {"error": "PHONE_NOT_WHITELISTED"}

    res = await client.post(f"{AUTH}/verify-otp", json={"phone": True, "otp": "1"})
    assert res.status_code == 401
    assert res.json() == {"error": "OTP_INVALID"}

    store.whitelist.add("919876543210")
    res = await client.post(f"{AUTH}/send-otp", json={"phone": 919876543210})
    assert res.status_code == 200
    assert "919876543210" in store.otps
