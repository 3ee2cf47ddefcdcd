# zerowaste/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from zerowaste.core.auth import require_auth
from zerowaste.core.config import get_settings
from zerowaste.database import get_session
from zerowaste.models.user import User
from zerowaste.repositories.cart_repo import CartRepository
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.schemas.cart import CartClearedResponse, CartItemCreate, CartItemUpdate, CartRead
from zerowaste.services.cart_service import CartService
from zerowaste.services.presenters import Presenter

router = APIRouter(prefix="/cart", tags=["Cart"])

settings = get_settings()

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo, Presenter(product_repo, settings.BASE_URL))


@router.get("", response_model=CartRead)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get the current user's cart (created on first access).
    """
    return service.get_cart(session, current_user.id)


@router.post("/add", response_model=CartRead)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Add a product to the cart; adding it again increments the quantity.
    """
    return service.add_to_cart(session, current_user.id, payload)


@router.put("/update", response_model=CartRead)
def update_cart_item(
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Set the quantity of a line; quantity <= 0 removes it.
    """
    return service.update_quantity(session, current_user.id, payload)


@router.delete("/remove/{product_id}", response_model=CartRead)
def remove_cart_item(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    return service.remove_item(session, current_user.id, product_id)


@router.delete("/clear", response_model=CartClearedResponse)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    cart = service.clear_cart(session, current_user.id)
    return CartClearedResponse(message="Cart cleared successfully", cart=cart)
