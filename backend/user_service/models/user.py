"""User record model - mirrors a row in the Supabase ``users`` table.

The row is keyed by the identity id that Supabase Auth assigns at sign-up,
so ``users.id`` always equals ``auth.users.id`` for accounts created here.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

DEFAULT_PROFILE_PICTURE_URL = "default_profile_picture_url"


class SubscriptionPlan(str, Enum):
    """Subscription plan tiers, lowest first."""
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"

    @classmethod
    def lowest(cls) -> "SubscriptionPlan":
        return cls.BASIC


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRecord(BaseModel):
    """Application user row linked to a Supabase auth identity.

    Attributes:
        id: Identity id returned by Supabase Auth
        email: User's email address
        username: Optional display name
        subscription_plan: Plan tier, new rows start on the lowest one
        profile_picture_url: Avatar URL or the sentinel default
        last_login: When the row was written at sign-up
    """
    id: str
    email: str
    username: Optional[str] = None
    subscription_plan: SubscriptionPlan = Field(default_factory=SubscriptionPlan.lowest)
    profile_picture_url: str = DEFAULT_PROFILE_PICTURE_URL
    last_login: datetime = Field(default_factory=_utcnow)

    @classmethod
    def for_new_account(
        cls,
        user_id: str,
        email: str,
        username: Optional[str] = None,
        profile_picture_url: Optional[str] = None,
    ) -> "UserRecord":
        return cls(
            id=user_id,
            email=email,
            username=username,
            profile_picture_url=(
                profile_picture_url
                if profile_picture_url is not None
                else DEFAULT_PROFILE_PICTURE_URL
            ),
        )

    def to_row(self) -> Dict[str, Any]:
        """Serialize for a PostgREST insert."""
        return self.model_dump(mode="json")

    def __repr__(self) -> str:
        return f"<UserRecord(id={self.id}, email={self.email})>"
