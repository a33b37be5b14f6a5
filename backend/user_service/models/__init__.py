"""Pydantic models for Supabase payloads handled by the user service.

This module exports all model classes for use throughout the application.
"""
from .auth import AuthResponse, AuthUser
from .user import DEFAULT_PROFILE_PICTURE_URL, SubscriptionPlan, UserRecord

__all__ = [
    # Auth
    "AuthResponse",
    "AuthUser",
    # User
    "DEFAULT_PROFILE_PICTURE_URL",
    "SubscriptionPlan",
    "UserRecord",
]
