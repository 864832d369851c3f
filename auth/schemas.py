"""
Request / response schemas for the auth routes.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegisterRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50, alias="firstName")
    last_name: str = Field(..., min_length=1, max_length=50, alias="lastName")
    email: str = Field(..., min_length=5, max_length=50)
    password: str = Field(..., min_length=1)
    picture_path: str = Field("", max_length=512, alias="picturePath")
    friends: List[str] = Field(default_factory=list)
    location: Optional[str] = Field(None, max_length=128)
    occupation: Optional[str] = Field(None, max_length=128)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, value: str) -> str:
        return value.strip().lower()


class PublicUser(BaseModel):
    """Everything about a user that may leave the server."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    first_name: str
    last_name: str
    email: str
    picture_path: str = ""
    friends: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    occupation: Optional[str] = None
    viewed_profile: int = 0
    impressions: int = 0
    created_at: Optional[datetime] = None

    @field_validator("user_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> str:
        return str(value)


class LoginResponse(BaseModel):
    token: str
    user: PublicUser
