# zerowaste/schemas/user.py
import uuid
from datetime import datetime

from pydantic import field_validator
from sqlmodel import Field

from zerowaste.schemas.common import CamelModel


class UserRead(CamelModel):
    """Profile returned to the account owner. Never carries the password hash."""

    id: uuid.UUID
    username: str
    email: str
    full_name: str | None = None
    phone: str | None = None
    address: str | None = None
    bio: str = ""
    profile_picture: str | None = None
    profile_picture_url: str | None = None
    role: str = "user"
    is_verified: bool
    created_at: datetime


class SellerSummary(CamelModel):
    """Public seller info embedded in product and order payloads."""

    id: uuid.UUID
    username: str
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None


class ProfileUpdate(CamelModel):
    """
    Partial profile update.

    Only keys present in the payload are written; an empty string clears
    an optional text field. username cannot be blank.
    """

    full_name: str | None = Field(default=None, max_length=100)
    username: str | None = Field(default=None, max_length=50)
    phone: str | None = Field(default=None, max_length=30)
    address: str | None = None
    bio: str | None = None

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty")
        return v


class ProfileUpdateResponse(CamelModel):
    message: str
    user: UserRead


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str = Field(min_length=6)


class ProfilePictureResponse(CamelModel):
    message: str
    profile_picture: str
    profile_picture_url: str | None
