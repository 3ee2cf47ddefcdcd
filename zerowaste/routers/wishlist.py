# zerowaste/routers/wishlist.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from zerowaste.core.auth import require_auth
from zerowaste.core.config import get_settings
from zerowaste.database import get_session
from zerowaste.models.user import User
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.repositories.wishlist_repo import WishlistRepository
from zerowaste.schemas.common import MessageResponse
from zerowaste.schemas.wishlist import (
    WishlistAdd,
    WishlistAddResponse,
    WishlistCheck,
    WishlistItemRead,
)
from zerowaste.services.presenters import Presenter
from zerowaste.services.wishlist_service import WishlistService

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])

settings = get_settings()

product_repo = ProductRepository()
service = WishlistService(
    WishlistRepository(),
    product_repo,
    Presenter(product_repo, settings.BASE_URL),
)


@router.get("", response_model=list[WishlistItemRead])
def get_wishlist(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    The caller's wishlist, newest first.
    """
    return service.list_wishlist(session, current_user.id)


@router.post(
    "",
    response_model=WishlistAddResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_to_wishlist(
    payload: WishlistAdd,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    item = service.add(session, current_user.id, payload.product_id)
    return WishlistAddResponse(message="Product added to wishlist", wishlist_item=item)


@router.delete("/{product_id}", response_model=MessageResponse)
def remove_from_wishlist(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    service.remove(session, current_user.id, product_id)
    return MessageResponse(message="Product removed from wishlist")


@router.get("/check/{product_id}", response_model=WishlistCheck)
def check_wishlist(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    return WishlistCheck(in_wishlist=service.is_in_wishlist(session, current_user.id, product_id))
