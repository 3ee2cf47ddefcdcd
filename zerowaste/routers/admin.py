# zerowaste/routers/admin.py
import uuid

from fastapi import APIRouter, Body, Depends, Query
from sqlmodel import Session

from zerowaste.core.auth import require_admin
from zerowaste.core.config import get_settings
from zerowaste.core.storage_utils import Storage, get_storage
from zerowaste.database import get_session
from zerowaste.models.user import User
from zerowaste.repositories.cart_repo import CartRepository
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.repositories.user_repo import UserRepository
from zerowaste.repositories.wishlist_repo import WishlistRepository
from zerowaste.schemas.admin import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminProductDelete,
    AdminProductList,
    UsersCountResponse,
)
from zerowaste.schemas.common import MessageResponse
from zerowaste.schemas.product import ProductQuery, ProductSort
from zerowaste.services.admin_service import AdminService
from zerowaste.services.presenters import Presenter
from zerowaste.services.product_service import ProductService

router = APIRouter(prefix="/admin", tags=["Admin"])

settings = get_settings()

user_repo = UserRepository()
product_repo = ProductRepository()
product_service = ProductService(
    product_repo,
    user_repo,
    CartRepository(),
    WishlistRepository(),
    Presenter(product_repo, settings.BASE_URL),
)
service = AdminService(user_repo, product_repo, product_service, settings)


@router.post("/login", response_model=AdminLoginResponse)
def admin_login(
    payload: AdminLoginRequest,
    session: Session = Depends(get_session),
):
    token, admin = service.login(session, payload)
    return AdminLoginResponse(message="Login successful", admin_id=admin.id, token=token)


@router.get(
    "/products",
    response_model=AdminProductList,
    dependencies=[Depends(require_admin)],
)
def admin_list_products(
    category: str | None = None,
    search: str | None = None,
    sort: ProductSort = "newest",
    limit: int | None = Query(default=None, ge=1, le=50),
    session: Session = Depends(get_session),
):
    """
    Every listing, whatever its status.

    - `category`, `search`, `sort`: same meaning as GET /products
    - `limit`: size of recentProducts (default 5)
    """
    query = ProductQuery(category=category, search=search, sort=sort, status=None)
    return service.list_products(session, query, recent_limit=limit)


@router.delete("/products/{product_id}", response_model=MessageResponse)
def admin_delete_product(
    product_id: uuid.UUID,
    payload: AdminProductDelete | None = Body(None),
    admin: User = Depends(require_admin),
    session: Session = Depends(get_session),
    storage: Storage = Depends(get_storage),
):
    """
    Remove any listing; body {"reason": "..."} is required and is
    emailed to the seller.
    """
    service.delete_product(
        session,
        storage,
        admin,
        product_id,
        payload.reason if payload else None,
    )
    return MessageResponse(message="Product deleted and seller notified")


@router.get(
    "/users/count",
    response_model=UsersCountResponse,
    dependencies=[Depends(require_admin)],
)
def admin_users_count(session: Session = Depends(get_session)):
    return UsersCountResponse(total_users=service.count_users(session))
