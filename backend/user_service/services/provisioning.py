"""Two-step account provisioning.

Sign-up creates a Supabase Auth identity first and then inserts the
matching ``users`` row keyed by the identity id:

    Start -> IdentityCreated -> RecordCreated

Either step can end the flow in Failed.

There is no compensation. When the row insert fails the identity already
exists upstream and stays there; the orphan is logged with its id so it
can be removed by hand. Re-running sign-up for the same email will then be
rejected by Supabase Auth.
"""
from __future__ import annotations

import logging
from enum import Enum

from pydantic import ValidationError

from backend.user_service.clients.supabase import SupabaseClient
from backend.user_service.errors import (
    ClientError,
    ServerError,
    ServiceError,
    UpstreamTransportError,
)
from backend.user_service.models import AuthResponse, UserRecord
from backend.user_service.schemas import ProvisioningResult, SignUpRequest
from backend.user_service.telemetry.metrics import record_signup_outcome

logger = logging.getLogger(__name__)


class SignUpStep(str, Enum):
    VALIDATION = "validation"
    IDENTITY = "identity"
    RECORD = "record"


def _fail(error: ServiceError) -> ServiceError:
    record_signup_outcome("failed", error.step or SignUpStep.VALIDATION.value)
    return error


async def create_identity(request: SignUpRequest, client: SupabaseClient) -> AuthResponse:
    """Step A: register the email/password pair with Supabase Auth."""
    step = SignUpStep.IDENTITY.value
    payload = {
        "email": request.email,
        "password": request.password,
        "data": {"username": request.username},
    }

    try:
        response = await client.sign_up(payload)
    except UpstreamTransportError as exc:
        logger.error("signup_request_send_failed", extra={"error": str(exc)})
        raise _fail(ServerError("Failed to send sign-up request", step=step)) from exc

    if not response.ok:
        logger.error(
            "signup_auth_rejected",
            extra={"status": response.status_code, "body": response.text},
        )
        raise _fail(ClientError(response.text, step=step))

    try:
        return AuthResponse.model_validate_json(response.text)
    except ValidationError as exc:
        logger.error("signup_auth_response_invalid", extra={"error": str(exc)})
        raise _fail(ServerError(str(exc), step=step)) from exc


async def create_record(
    request: SignUpRequest, identity: AuthResponse, client: SupabaseClient
) -> UserRecord:
    """Step B: insert the ``users`` row for a freshly created identity."""
    step = SignUpStep.RECORD.value
    record = UserRecord.for_new_account(
        identity.user_id,
        request.email,
        username=request.username,
        profile_picture_url=request.profile_picture_url,
    )

    try:
        response = await client.insert_user(record.to_row())
    except UpstreamTransportError as exc:
        logger.error(
            "signup_identity_orphaned",
            extra={"user_id": identity.user_id, "error": str(exc)},
        )
        raise _fail(ServerError(str(exc), step=step)) from exc

    if not response.ok:
        logger.error(
            "signup_identity_orphaned",
            extra={
                "user_id": identity.user_id,
                "status": response.status_code,
                "body": response.text,
            },
        )
        raise _fail(ServerError(response.text, step=step))

    return record


async def provision_account(
    request: SignUpRequest, client: SupabaseClient
) -> ProvisioningResult:
    """Create an auth identity and its user record.

    Args:
        request: Sign-up payload from the caller
        client: Upstream client bound to the service settings

    Returns:
        ProvisioningResult with the identity id and access token

    Raises:
        ClientError: Empty email/password, or Supabase Auth rejected the sign-up
        ServerError: Transport failure, unparseable auth response, or the
            row insert failed
    """
    logger.info("signup_received", extra={"email": request.email})

    if not request.email or not request.password:
        logger.error("signup_validation_failed", extra={"reason": "empty_credentials"})
        raise _fail(
            ClientError(
                "Email and password are required",
                step=SignUpStep.VALIDATION.value,
            )
        )

    identity = await create_identity(request, client)
    logger.info("signup_identity_created", extra={"user_id": identity.user_id})

    await create_record(request, identity, client)

    record_signup_outcome("success", SignUpStep.RECORD.value)
    logger.info("signup_succeeded", extra={"user_id": identity.user_id})
    return ProvisioningResult(
        user_id=identity.user_id,
        access_token=identity.access_token,
    )
