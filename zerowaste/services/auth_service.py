# zerowaste/services/auth_service.py
import logging
import secrets
import smtplib
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from zerowaste.core.auth import create_access_token, hash_password, verify_password
from zerowaste.core.config import Settings
from zerowaste.core.email_client import render_action_email, send_email
from zerowaste.core.errors import ApiError
from zerowaste.models.user import User, utcnow
from zerowaste.repositories.user_repo import UserRepository
from zerowaste.schemas.auth import LoginRequest, RegisterRequest, ResetPasswordRequest

logger = logging.getLogger(__name__)


def _is_expired(expires_at: datetime | None) -> bool:
    if expires_at is None:
        return True
    # Drivers hand back naive datetimes for naive columns; values are UTC.
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at < datetime.now(timezone.utc)


class AuthService:
    """
    Account lifecycle: registration, login, email verification and
    password reset.

    Emails are best effort: a delivery failure is logged and the account
    operation still succeeds (the user can ask for a new email).
    """

    def __init__(self, repo: UserRepository, settings: Settings):
        self.repo = repo
        self.settings = settings

    # ----- Helpers -----

    def _deliver(self, to_email: str, subject: str, text_body: str, html_body: str) -> None:
        try:
            send_email(to_email, subject, text_body, html_body)
        except (RuntimeError, smtplib.SMTPException, OSError):
            logger.warning("Could not send '%s' email to %s", subject, to_email, exc_info=True)

    def _issue_verification(self, user: User) -> None:
        user.verification_token = secrets.token_urlsafe(32)
        user.verification_token_expires = utcnow() + timedelta(
            hours=self.settings.VERIFICATION_TOKEN_HOURS
        )

    def _send_verification(self, user: User) -> None:
        link = (
            f"{self.settings.BASE_URL.rstrip('/')}{self.settings.API_PREFIX}"
            f"/auth/verify-email?token={user.verification_token}"
        )
        text_body, html_body = render_action_email(
            f"Hi {user.full_name or user.username},",
            "Please confirm your email address to start using ZeroWaste Market.",
            link,
            "Verify email",
        )
        self._deliver(user.email, "Verify your ZeroWaste Market account", text_body, html_body)

    # ----- Registration & login -----

    def register(self, session: Session, payload: RegisterRequest) -> User:
        """
        Create an unverified account and send the verification email.

        Raises:
            HTTPException(400): username or email already taken.
        """
        if self.repo.get_by_username(session, payload.username):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Username already taken",
            )
        if self.repo.get_by_email(session, payload.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )

        user = User(
            username=payload.username,
            email=payload.email.lower(),
            password_hash=hash_password(payload.password),
            full_name=payload.full_name,
            phone=payload.phone,
            address=payload.address,
        )
        self._issue_verification(user)
        user = self.repo.create(session, user)

        self._send_verification(user)
        return user

    def login(self, session: Session, payload: LoginRequest) -> tuple[str, User]:
        """
        Check credentials and issue an access token.

        Raises:
            HTTPException(401): unknown user or wrong password.
            ApiError(401, EMAIL_NOT_VERIFIED): verification still pending.
        """
        user = self.repo.get_by_login(session, payload.username.strip())
        if user is None or not verify_password(payload.password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid username or password",
            )

        if self.settings.REQUIRE_EMAIL_VERIFICATION and not user.is_verified:
            raise ApiError(
                status.HTTP_401_UNAUTHORIZED,
                "Email not verified. Please verify your email before logging in.",
                "EMAIL_NOT_VERIFIED",
            )

        return create_access_token(user), user

    # ----- Email verification -----

    def verify_email(self, session: Session, token: str) -> User:
        user = self.repo.get_by_verification_token(session, token)
        if user is None or _is_expired(user.verification_token_expires):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired verification token",
            )

        user.is_verified = True
        user.verification_token = None
        user.verification_token_expires = None
        user.updated_at = utcnow()
        return self.repo.update(session, user)

    def resend_verification(self, session: Session, email: str) -> None:
        user = self.repo.get_by_email(session, email)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        if user.is_verified:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email is already verified",
            )

        self._issue_verification(user)
        user = self.repo.update(session, user)
        self._send_verification(user)

    # ----- Password reset -----

    def forgot_password(self, session: Session, email: str) -> None:
        """
        Issue a reset token and email it.

        Unknown emails are ignored silently so the endpoint cannot be used
        to discover which addresses have accounts.
        """
        user = self.repo.get_by_email(session, email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        user.reset_password_token = secrets.token_urlsafe(32)
        user.reset_password_expires = utcnow() + timedelta(
            minutes=self.settings.RESET_TOKEN_MINUTES
        )
        user = self.repo.update(session, user)

        link = (
            f"{self.settings.FRONTEND_URL.rstrip('/')}/reset-password"
            f"?token={user.reset_password_token}"
        )
        text_body, html_body = render_action_email(
            f"Hi {user.full_name or user.username},",
            f"Use the link below to choose a new password. "
            f"It expires in {self.settings.RESET_TOKEN_MINUTES} minutes.",
            link,
            "Reset password",
        )
        self._deliver(user.email, "Reset your ZeroWaste Market password", text_body, html_body)

    def reset_password(self, session: Session, payload: ResetPasswordRequest) -> None:
        user = self.repo.get_by_reset_token(session, payload.token)
        if user is None or _is_expired(user.reset_password_expires):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired reset token",
            )

        user.password_hash = hash_password(payload.new_password)
        user.reset_password_token = None
        user.reset_password_expires = None
        user.updated_at = utcnow()
        self.repo.update(session, user)
