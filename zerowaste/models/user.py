# zerowaste/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """
    Marketplace account: buyer and seller at the same time.

    Credentials:
      - password_hash: bcrypt hash, never serialized to clients
      - verification_token / reset_password_token: one-time tokens sent by
        email, each with its own expiry
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    username: str = Field(
        max_length=50,
        unique=True,
        index=True,
        description="Public handle, unique",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Login / contact email, unique",
    )

    password_hash: str = Field(description="bcrypt hash")

    # Application role; admins are created with `zerowaste-create-admin`
    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin",
    )

    # Profile fields
    full_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=30)
    address: str | None = None
    bio: str = Field(default="")
    profile_picture: str | None = Field(
        default=None,
        description="Relative path of the stored picture (uploads/<file>)",
    )

    # Email verification
    is_verified: bool = Field(default=False)
    verification_token: str | None = Field(default=None, index=True)
    verification_token_expires: datetime | None = None

    # Password reset
    reset_password_token: str | None = Field(default=None, index=True)
    reset_password_expires: datetime | None = None

    created_at: datetime = Field(
        default_factory=utcnow,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(default_factory=utcnow)
