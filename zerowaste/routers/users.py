# zerowaste/routers/users.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from zerowaste.core.auth import require_auth
from zerowaste.core.config import get_settings
from zerowaste.core.storage_utils import Storage, get_storage
from zerowaste.core.uploads import ImageFile, profile_picture
from zerowaste.database import get_session
from zerowaste.models.user import User
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.repositories.user_repo import UserRepository
from zerowaste.schemas.common import MessageResponse
from zerowaste.schemas.product import ProductRead
from zerowaste.schemas.user import (
    ChangePasswordRequest,
    ProfilePictureResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    UserRead,
)
from zerowaste.services.presenters import Presenter
from zerowaste.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

settings = get_settings()

repo = UserRepository()
product_repo = ProductRepository()
presenter = Presenter(product_repo, settings.BASE_URL)
service = UserService(repo, product_repo)


@router.get("/profile", response_model=UserRead)
def read_profile(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile, with profilePictureUrl.
    """
    return presenter.user(current_user)


@router.put("/profile", response_model=ProfileUpdateResponse)
def update_profile(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Partial update: only keys present in the body are written.
    """
    user = service.update_profile(session, current_user, payload)
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=presenter.user(user),
    )


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    service.change_password(session, current_user, payload)
    return MessageResponse(message="Password changed successfully")


@router.post("/profile-picture", response_model=ProfilePictureResponse)
def upload_profile_picture(
    current_user: User = Depends(require_auth),
    images: list[ImageFile] = Depends(profile_picture),
    session: Session = Depends(get_session),
    storage: Storage = Depends(get_storage),
):
    """
    Replace the profile picture (multipart field `profilePicture`, max 5MB).
    """
    user = service.update_profile_picture(session, storage, current_user, images)
    return ProfilePictureResponse(
        message="Profile picture updated successfully",
        profile_picture=user.profile_picture,
        profile_picture_url=presenter.url(user.profile_picture),
    )


@router.get("/products", response_model=list[ProductRead])
def my_products(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    All of the caller's listings, whatever their status.
    """
    products = service.list_my_products(session, current_user)
    images = product_repo.list_images_for_products(session, {p.id for p in products})
    return [
        presenter.product(p, [img.image_path for img in images[p.id]], current_user)
        for p in products
    ]
