"""
HTTP routes for account creation and user record access.
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Response, status

from backend.user_service.clients.supabase import SupabaseClient
from backend.user_service.dependencies import get_supabase_client
from backend.user_service.schemas import SignUpRequest, SignUpResponse
from backend.user_service.services.provisioning import provision_account
from backend.user_service.services.records import fetch_user, update_user

router = APIRouter(tags=["users"])


@router.post(
    "/users",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
async def sign_up_user(
    payload: SignUpRequest,
    client: SupabaseClient = Depends(get_supabase_client),
) -> SignUpResponse:
    """
    Create a Supabase Auth identity, then its ``users`` row.

    Responds 400 for empty credentials or an Auth rejection and 500 for
    transport, parsing or database failures.
    """
    result = await provision_account(payload, client)
    return result.to_response()


@router.get("/users/{user_id}", response_model=None, summary="Fetch a user record")
async def get_user_data(
    user_id: str,
    client: SupabaseClient = Depends(get_supabase_client),
) -> List[Any]:
    return await fetch_user(user_id, client)


@router.put("/users/{user_id}", summary="Update a user record")
async def update_user_data(
    user_id: str,
    patch: Dict[str, Any] = Body(...),
    client: SupabaseClient = Depends(get_supabase_client),
) -> Response:
    await update_user(user_id, patch, client)
    return Response(status_code=status.HTTP_200_OK)
