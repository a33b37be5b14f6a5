"""FastAPI dependencies for settings and the upstream client.

Handlers receive the immutable ``Settings`` captured by ``create_app`` and a
``SupabaseClient`` built on the application's pooled HTTP client.

Usage:
    @router.get("/users/{user_id}")
    async def get_user(
        user_id: str,
        client: SupabaseClient = Depends(get_supabase_client),
    ):
        ...
"""
from __future__ import annotations

from fastapi import Depends, Request

from backend.user_service.clients.supabase import SupabaseClient
from backend.user_service.config import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_supabase_client(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> SupabaseClient:
    return SupabaseClient(settings, request.app.state.http_client)
