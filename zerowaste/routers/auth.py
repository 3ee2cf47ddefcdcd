# zerowaste/routers/auth.py
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from zerowaste.core.auth import require_auth
from zerowaste.core.config import get_settings
from zerowaste.database import get_session
from zerowaste.models.user import User
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.repositories.user_repo import UserRepository
from zerowaste.schemas.auth import (
    AuthProfileResponse,
    EmailRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
)
from zerowaste.schemas.common import MessageResponse
from zerowaste.services.auth_service import AuthService
from zerowaste.services.presenters import Presenter

router = APIRouter(prefix="/auth", tags=["Auth"])

settings = get_settings()

repo = UserRepository()
service = AuthService(repo, settings)
presenter = Presenter(ProductRepository(), settings.BASE_URL)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
):
    """
    Create an account and email a verification link.
    """
    user = service.register(session, payload)
    return RegisterResponse(
        message="Registration successful. Please check your email to verify your account.",
        user=presenter.user(user),
    )


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
):
    """
    Exchange username (or email) + password for a bearer token.
    """
    token, user = service.login(session, payload)
    return LoginResponse(
        message="Login successful",
        token=token,
        user=presenter.user(user),
    )


@router.get("/verify-email", response_model=MessageResponse)
def verify_email(
    token: str = Query(..., min_length=1),
    session: Session = Depends(get_session),
):
    service.verify_email(session, token)
    return MessageResponse(message="Email verified successfully. You can now log in.")


@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification(
    payload: EmailRequest,
    session: Session = Depends(get_session),
):
    service.resend_verification(session, payload.email)
    return MessageResponse(message="Verification email sent")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: EmailRequest,
    session: Session = Depends(get_session),
):
    """
    Always answers the same way, whether or not the email is known.
    """
    service.forgot_password(session, payload.email)
    return MessageResponse(
        message="If an account exists for that email, a password reset link has been sent."
    )


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    payload: ResetPasswordRequest,
    session: Session = Depends(get_session),
):
    service.reset_password(session, payload)
    return MessageResponse(message="Password has been reset successfully")


@router.get("/profile", response_model=AuthProfileResponse)
def auth_profile(current_user: User = Depends(require_auth)):
    """
    Token check for the frontend: greets the authenticated user.
    """
    return AuthProfileResponse(
        message=f"Welcome, {current_user.username}",
        user=presenter.user(current_user),
    )
