"""
Request and response bodies for the user routes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel


class SignUpRequest(BaseModel):
    email: str
    password: str
    username: Optional[str] = None
    # Not copied into the new row; accounts start on the lowest plan.
    subscription_plan: str
    profile_picture_url: Optional[str] = None


class SignUpResponse(BaseModel):
    user_id: str
    access_token: str


@dataclass(frozen=True)
class ProvisioningResult:
    user_id: str
    access_token: str

    def to_response(self) -> SignUpResponse:
        return SignUpResponse(user_id=self.user_id, access_token=self.access_token)
