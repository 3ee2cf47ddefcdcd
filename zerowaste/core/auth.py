# zerowaste/core/auth.py
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from sqlmodel import Session

from zerowaste.core.config import get_settings
from zerowaste.core.errors import ApiError
from zerowaste.database import get_session
from zerowaste.models.user import User

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing/malformed Authorization header gives None
#   so we can answer with our own 401 body.
bearer_scheme = HTTPBearer(auto_error=False)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    """
    Issue an HS256 access token for `user`.

    Claims: id, username, email, exp.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    )
    claims = {
        "id": str(user.id),
        "username": user.username,
        "email": user.email,
        "exp": expire,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an access token (signature + exp).

    Raises:
        ApiError(401, TOKEN_EXPIRED): token is past its exp claim.
        ApiError(401, INVALID_TOKEN): bad signature / malformed token.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
        )
    except ExpiredSignatureError:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Not authorized, token expired",
            "TOKEN_EXPIRED",
        )
    except JWTError:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Not authorized, invalid token",
            "INVALID_TOKEN",
        )


def require_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    """
    Resolve the authenticated user from the bearer token.

    Flow:
      1. No / malformed Authorization header => 401.
      2. Decode JWT => extract 'id'.
      3. Load the user; missing => 401.
      4. Unverified email (when verification is required) => 401.

    Returns:
        The authenticated User.
    """
    if credentials is None:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Not authorized, no token provided",
        )

    payload = decode_access_token(credentials.credentials)

    try:
        user_id = uuid.UUID(str(payload.get("id")))
    except ValueError:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Not authorized, invalid token",
            "INVALID_TOKEN",
        )

    user = session.get(User, user_id)
    if user is None:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Not authorized, user not found",
        )

    if settings.REQUIRE_EMAIL_VERIFICATION and not user.is_verified:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Email not verified. Please verify your email before proceeding.",
            "EMAIL_NOT_VERIFIED",
        )

    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Enforce admin role.

    Route is accessible only if:
      - user.role == "admin"

    Raises:
        ApiError(403): if role is not admin.
    """
    if user.role != "admin":
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            "Not authorized as an admin",
            "ADMIN_REQUIRED",
        )
    return user
