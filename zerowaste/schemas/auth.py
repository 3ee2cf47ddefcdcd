# zerowaste/schemas/auth.py
from pydantic import EmailStr, field_validator
from sqlmodel import Field

from zerowaste.schemas.common import CamelModel
from zerowaste.schemas.user import UserRead


class RegisterRequest(CamelModel):
    """
    Payload for account registration.

    Backend derives:
      - password_hash (bcrypt)
      - is_verified = False + verification token
    """

    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=30)
    address: str | None = None

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty")
        return v


class RegisterResponse(CamelModel):
    success: bool = True
    message: str
    user: UserRead


class LoginRequest(CamelModel):
    """`username` may also be the account email."""

    username: str
    password: str


class LoginResponse(CamelModel):
    success: bool = True
    message: str
    token: str
    user: UserRead


class EmailRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str
    new_password: str = Field(min_length=6)


class AuthProfileResponse(CamelModel):
    message: str
    user: UserRead
