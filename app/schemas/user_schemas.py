from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class UserCredentials(BaseModel):
    """Corps de /api/register, /api/users et /api/login_check (présence validée côté service)."""

    email: Optional[str] = None
    password: Optional[str] = None


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str


class UserProfile(UserSummary):
    roles: List[str]


class UserCreatedResponse(BaseModel):
    message: str
    user: UserSummary


class AccountCreatedResponse(BaseModel):
    message: str
    user: UserProfile


class ProfileResponse(BaseModel):
    message: str
    user: UserProfile


class TokenResponse(BaseModel):
    message: str
    token: str


class MessageResponse(BaseModel):
    message: str
