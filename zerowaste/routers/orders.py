# zerowaste/routers/orders.py
import uuid
from typing import Literal

from fastapi import APIRouter, Body, Depends, Query
from sqlmodel import Session

from zerowaste.core.auth import require_auth
from zerowaste.core.config import get_settings
from zerowaste.database import get_session
from zerowaste.models.user import User
from zerowaste.repositories.order_repo import OrderRepository
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.repositories.user_repo import UserRepository
from zerowaste.schemas.order import (
    OrderCancel,
    OrderCancelResponse,
    OrderDetailResponse,
    OrderListResponse,
    OrderQuery,
    OrderSort,
    OrderStatsResponse,
    OrderStatus,
)
from zerowaste.services.order_service import OrderService
from zerowaste.services.presenters import Presenter

router = APIRouter(prefix="/orders", tags=["Orders"])

settings = get_settings()

order_repo = OrderRepository()
service = OrderService(
    order_repo,
    UserRepository(),
    Presenter(ProductRepository(), settings.BASE_URL),
)


@router.get("", response_model=OrderListResponse)
def list_my_orders(
    order_status: OrderStatus | Literal["all"] | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort: OrderSort = "newest",
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    The caller's orders as a buyer, paginated.

    `status=all` (or no status) disables the status filter.
    """
    query = OrderQuery(status=order_status, page=page, limit=limit, sort=sort)
    orders, pagination = service.list_orders(session, current_user.id, query)
    return OrderListResponse(orders=orders, pagination=pagination)


# Declared before /{order_id} so "stats" is not parsed as an id
@router.get("/stats", response_model=OrderStatsResponse)
def order_stats(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Count and amount per status, plus total spent (paid + completed).
    """
    return OrderStatsResponse(stats=service.get_stats(session, current_user.id))


@router.get("/{order_id}", response_model=OrderDetailResponse)
def get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    return OrderDetailResponse(order=service.get_order(session, current_user.id, order_id))


@router.put("/{order_id}/cancel", response_model=OrderCancelResponse)
def cancel_order(
    order_id: uuid.UUID,
    payload: OrderCancel | None = Body(None),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Cancel a pending order. The body ({"reason": ...}) is optional.
    """
    reason = payload.reason if payload else None
    order = service.cancel_order(session, current_user.id, order_id, reason)
    return OrderCancelResponse(message="Order cancelled successfully", order=order)
