from __future__ import annotations

from typing import AsyncIterator, Iterator

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from backend.user_service import main
from backend.user_service.clients.supabase import SupabaseClient
from backend.user_service.config import Settings

from fakes import API_KEY, SUPABASE_URL, FakeSupabase


@pytest.fixture
def settings() -> Settings:
    return Settings(SUPABASE_URL=SUPABASE_URL, SUPABASE_API_KEY=API_KEY)


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest_asyncio.fixture
async def supabase_client(
    settings: Settings, fake_supabase: FakeSupabase
) -> AsyncIterator[SupabaseClient]:
    transport = httpx.MockTransport(fake_supabase.handler)
    async with httpx.AsyncClient(transport=transport) as http:
        yield SupabaseClient(settings, http)


@pytest.fixture
def api(settings: Settings, fake_supabase: FakeSupabase, monkeypatch) -> Iterator[TestClient]:
    """App whose lifespan-owned HTTP client talks to ``fake_supabase``."""

    def build_fake_http_client(_: Settings) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(fake_supabase.handler))

    monkeypatch.setattr(main, "build_http_client", build_fake_http_client)
    with TestClient(main.create_app(settings)) as client:
        yield client
