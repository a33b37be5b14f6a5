"""Fake Supabase upstream for tests, served through ``httpx.MockTransport``."""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx

SUPABASE_URL = "https://project.supabase.co"
API_KEY = "service-key"

SIGNUP_PATH = "/auth/v1/signup"
USERS_PATH = "/rest/v1/users"

SIGN_UP_BODY = {"email": "a@b.com", "password": "pw", "subscription_plan": "basic"}

Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response], Exception]


def auth_payload(user_id: str = "u1", access_token: str = "t1") -> Dict[str, Any]:
    """A trimmed-down copy of what GoTrue returns from /signup."""
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": 3600,
        "expires_at": 1700003600,
        "refresh_token": "r1",
        "user": {
            "id": user_id,
            "aud": "authenticated",
            "role": "authenticated",
            "email": "a@b.com",
            "app_metadata": {"provider": "email", "providers": ["email"]},
            "user_metadata": {"email": "a@b.com", "email_verified": False},
            "identities": [],
            "is_anonymous": False,
        },
    }


def request_json(request: httpx.Request) -> Optional[Any]:
    if not request.content:
        return None
    return json.loads(request.content)


class FakeSupabase:
    """Records every request and answers from a (method, path) table."""

    def __init__(self) -> None:
        self.calls: List[httpx.Request] = []
        self._replies: Dict[Tuple[str, str], Reply] = {}

    def reply(self, method: str, path: str, reply: Reply) -> None:
        self._replies[(method.upper(), path)] = reply

    def reply_json(self, method: str, path: str, body: Any, status_code: int = 200) -> None:
        self.reply(method, path, httpx.Response(status_code, json=body))

    def reply_text(self, method: str, path: str, text: str, status_code: int) -> None:
        self.reply(method, path, httpx.Response(status_code, text=text))

    def fail_transport(self, method: str, path: str) -> None:
        self.reply(method, path, httpx.ConnectError("connection refused"))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = (request.method, request.url.path)
        if key not in self._replies:
            raise AssertionError(f"unexpected upstream call: {key}")
        reply = self._replies[key]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    def call_keys(self) -> List[Tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.calls]
