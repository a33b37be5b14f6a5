"""Supabase REST client for the Auth and PostgREST resource groups.

One ``SupabaseClient`` wraps a shared ``httpx.AsyncClient`` and the
immutable service ``Settings``. It performs exactly one HTTP call per
method invocation:

- never retries and never caches
- returns non-2xx responses to the caller with the body text untouched
- raises ``UpstreamTransportError`` only when no response was received

Security considerations:
- The API key is sent in headers only and never logged.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from backend.user_service.config import Settings
from backend.user_service.errors import UpstreamTransportError
from backend.user_service.telemetry.metrics import observe_upstream_request

logger = logging.getLogger(__name__)

AUTH = "auth"
DATABASE = "database"

USERS_TABLE = "users"


@dataclass(frozen=True)
class UpstreamResponse:
    """Status and raw body of one upstream call."""

    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.text)


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the pooled HTTP client shared by all requests."""
    return httpx.AsyncClient(timeout=settings.SUPABASE_TIMEOUT_SECONDS)


class SupabaseClient:
    def __init__(self, settings: Settings, http: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http

    def _base_url(self, resource: str) -> str:
        if resource == AUTH:
            return self._settings.auth_base_url
        if resource == DATABASE:
            return self._settings.rest_base_url
        raise ValueError(f"Unknown upstream resource: {resource}")

    def _headers(self, *, authorize: bool, prefer: Optional[str]) -> dict[str, str]:
        headers = {
            "apikey": self._settings.SUPABASE_API_KEY,
            "Content-Type": "application/json",
        }
        if authorize:
            headers["Authorization"] = f"Bearer {self._settings.SUPABASE_API_KEY}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def request(
        self,
        resource: str,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, str]] = None,
        authorize: bool = False,
        prefer: Optional[str] = None,
    ) -> UpstreamResponse:
        """Send one request to an upstream resource group.

        Args:
            resource: ``AUTH`` or ``DATABASE``
            method: HTTP method
            path: Path below the resource base URL, e.g. ``/signup``
            json: Optional JSON body, sent as-is
            params: Optional query parameters
            authorize: Add the bearer Authorization header
            prefer: Optional PostgREST ``Prefer`` header value

        Returns:
            UpstreamResponse for any HTTP status

        Raises:
            UpstreamTransportError: If the request could not be completed
        """
        url = f"{self._base_url(resource)}{path}"
        method = method.upper()
        logger.info(
            "upstream_request",
            extra={"resource": resource, "method": method, "path": path},
        )

        start = time.perf_counter()
        try:
            response = await self._http.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._headers(authorize=authorize, prefer=prefer),
            )
        except httpx.HTTPError as exc:
            observe_upstream_request(
                resource, method, "transport_error", time.perf_counter() - start
            )
            logger.error(
                "upstream_request_failed",
                extra={
                    "resource": resource,
                    "method": method,
                    "path": path,
                    "error": str(exc) or exc.__class__.__name__,
                },
            )
            raise UpstreamTransportError(resource, method, path, exc) from exc

        result = UpstreamResponse(status_code=response.status_code, text=response.text)
        duration = time.perf_counter() - start
        if result.ok:
            observe_upstream_request(resource, method, "success", duration)
            logger.info(
                "upstream_request_succeeded",
                extra={
                    "resource": resource,
                    "method": method,
                    "path": path,
                    "status": result.status_code,
                    "duration_ms": duration * 1000,
                },
            )
        else:
            observe_upstream_request(resource, method, "http_error", duration)
            logger.error(
                "upstream_request_failed",
                extra={
                    "resource": resource,
                    "method": method,
                    "path": path,
                    "status": result.status_code,
                    "body": result.text,
                },
            )
        return result

    # Auth

    async def sign_up(self, payload: Mapping[str, Any]) -> UpstreamResponse:
        return await self.request(AUTH, "POST", "/signup", json=payload)

    # Database (PostgREST)

    async def insert_user(self, row: Mapping[str, Any]) -> UpstreamResponse:
        return await self.request(
            DATABASE,
            "POST",
            f"/{USERS_TABLE}",
            json=row,
            authorize=True,
            prefer="return=minimal",
        )

    async def select_users(self, user_id: str) -> UpstreamResponse:
        return await self.request(
            DATABASE,
            "GET",
            f"/{USERS_TABLE}",
            params={"id": f"eq.{user_id}"},
            authorize=True,
        )

    async def update_users(
        self, user_id: str, patch: Mapping[str, Any]
    ) -> UpstreamResponse:
        return await self.request(
            DATABASE,
            "PATCH",
            f"/{USERS_TABLE}",
            json=patch,
            params={"id": f"eq.{user_id}"},
            authorize=True,
        )
