"""Supabase Auth sign-up response.

Only ``user.id`` and ``access_token`` are used downstream. The rest of the
payload is modelled loosely so new fields from GoTrue do not break parsing.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """Identity created by Supabase Auth.

    Attributes:
        id: Identity id (UUID string), reused as the users row key
        email: Email the identity was registered with
        user_metadata: Free-form metadata, holds ``username`` for this service
        app_metadata: Provider information set by Supabase
        identities: Linked provider identities
    """
    model_config = ConfigDict(extra="ignore")

    id: str
    aud: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    email_confirmed_at: Optional[str] = None
    last_sign_in_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_anonymous: Optional[bool] = None
    app_metadata: dict[str, Any] = Field(default_factory=dict)
    user_metadata: dict[str, Any] = Field(default_factory=dict)
    identities: list[dict[str, Any]] = Field(default_factory=list)


class AuthResponse(BaseModel):
    """Session returned by ``POST /auth/v1/signup``."""
    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str
    token_type: Optional[str] = None
    expires_in: Optional[int] = None
    expires_at: Optional[int] = None
    user: AuthUser

    @property
    def user_id(self) -> str:
        return self.user.id
