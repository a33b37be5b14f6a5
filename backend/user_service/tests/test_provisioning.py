from __future__ import annotations

import pytest

from backend.user_service.errors import ClientError, ServerError
from backend.user_service.models import DEFAULT_PROFILE_PICTURE_URL
from backend.user_service.schemas import SignUpRequest
from backend.user_service.services.provisioning import SignUpStep, provision_account

from fakes import SIGNUP_PATH, USERS_PATH, auth_payload, request_json


def _request(**overrides) -> SignUpRequest:
    data = {
        "email": "a@b.com",
        "password": "pw",
        "username": "alice",
        "subscription_plan": "premium",
    }
    data.update(overrides)
    return SignUpRequest(**data)


@pytest.mark.asyncio
@pytest.mark.parametrize("email,password", [("", "pw"), ("a@b.com", ""), ("", "")])
async def test_empty_credentials_make_no_upstream_calls(
    supabase_client, fake_supabase, email, password
) -> None:
    with pytest.raises(ClientError) as excinfo:
        await provision_account(_request(email=email, password=password), supabase_client)

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Email and password are required"
    assert excinfo.value.step == SignUpStep.VALIDATION.value
    assert fake_supabase.calls == []


@pytest.mark.asyncio
async def test_success_calls_auth_then_database(supabase_client, fake_supabase) -> None:
    fake_supabase.reply_json("POST", SIGNUP_PATH, auth_payload("u1", "t1"))
    fake_supabase.reply_json("POST", USERS_PATH, None, status_code=201)

    result = await provision_account(_request(), supabase_client)

    assert result.user_id == "u1"
    assert result.access_token == "t1"
    assert fake_supabase.call_keys() == [("POST", SIGNUP_PATH), ("POST", USERS_PATH)]

    auth_body = request_json(fake_supabase.calls[0])
    assert auth_body == {
        "email": "a@b.com",
        "password": "pw",
        "data": {"username": "alice"},
    }

    row = request_json(fake_supabase.calls[1])
    assert row["id"] == "u1"
    assert row["email"] == "a@b.com"
    assert row["username"] == "alice"
    assert row["subscription_plan"] == "basic"
    assert row["profile_picture_url"] == DEFAULT_PROFILE_PICTURE_URL
    assert row["last_login"]


@pytest.mark.asyncio
async def test_profile_picture_is_kept_when_given(supabase_client, fake_supabase) -> None:
    fake_supabase.reply_json("POST", SIGNUP_PATH, auth_payload())
    fake_supabase.reply_json("POST", USERS_PATH, None, status_code=201)

    await provision_account(
        _request(profile_picture_url="https://cdn.example/a.png"), supabase_client
    )

    row = request_json(fake_supabase.calls[1])
    assert row["profile_picture_url"] == "https://cdn.example/a.png"


@pytest.mark.asyncio
async def test_empty_profile_picture_is_kept_as_given(supabase_client, fake_supabase) -> None:
    fake_supabase.reply_json("POST", SIGNUP_PATH, auth_payload())
    fake_supabase.reply_json("POST", USERS_PATH, None, status_code=201)

    await provision_account(_request(profile_picture_url=""), supabase_client)

    row = request_json(fake_supabase.calls[1])
    assert row["profile_picture_url"] == ""


@pytest.mark.asyncio
async def test_auth_rejection_passes_body_through_and_stops(
    supabase_client, fake_supabase
) -> None:
    body = '{"code":422,"msg":"User already registered"}'
    fake_supabase.reply_text("POST", SIGNUP_PATH, body, status_code=422)

    with pytest.raises(ClientError) as excinfo:
        await provision_account(_request(), supabase_client)

    assert excinfo.value.message == body
    assert excinfo.value.step == SignUpStep.IDENTITY.value
    assert fake_supabase.call_keys() == [("POST", SIGNUP_PATH)]


@pytest.mark.asyncio
async def test_auth_transport_failure_is_server_error(supabase_client, fake_supabase) -> None:
    fake_supabase.fail_transport("POST", SIGNUP_PATH)

    with pytest.raises(ServerError) as excinfo:
        await provision_account(_request(), supabase_client)

    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "Failed to send sign-up request"
    assert fake_supabase.call_keys() == [("POST", SIGNUP_PATH)]


@pytest.mark.asyncio
async def test_unparseable_auth_response_is_server_error(
    supabase_client, fake_supabase
) -> None:
    # Email-confirmation projects answer with a bare user and no session.
    fake_supabase.reply_json("POST", SIGNUP_PATH, {"id": "u1", "email": "a@b.com"})

    with pytest.raises(ServerError) as excinfo:
        await provision_account(_request(), supabase_client)

    assert excinfo.value.step == SignUpStep.IDENTITY.value
    assert fake_supabase.call_keys() == [("POST", SIGNUP_PATH)]


@pytest.mark.asyncio
async def test_database_failure_leaves_identity_in_place(
    supabase_client, fake_supabase
) -> None:
    fake_supabase.reply_json("POST", SIGNUP_PATH, auth_payload("u1", "t1"))
    fake_supabase.reply_text(
        "POST", USERS_PATH, '{"message":"duplicate key value"}', status_code=409
    )

    with pytest.raises(ServerError) as excinfo:
        await provision_account(_request(), supabase_client)

    assert excinfo.value.message == '{"message":"duplicate key value"}'
    assert excinfo.value.step == SignUpStep.RECORD.value
    # No compensating delete against either resource.
    assert fake_supabase.call_keys() == [("POST", SIGNUP_PATH), ("POST", USERS_PATH)]


@pytest.mark.asyncio
async def test_database_transport_failure_is_server_error(
    supabase_client, fake_supabase
) -> None:
    fake_supabase.reply_json("POST", SIGNUP_PATH, auth_payload())
    fake_supabase.fail_transport("POST", USERS_PATH)

    with pytest.raises(ServerError) as excinfo:
        await provision_account(_request(), supabase_client)

    assert excinfo.value.step == SignUpStep.RECORD.value
    assert "connection refused" in excinfo.value.message
    assert len(fake_supabase.calls) == 2
