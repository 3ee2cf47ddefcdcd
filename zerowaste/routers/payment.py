# zerowaste/routers/payment.py
from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlmodel import Session

from zerowaste.core.auth import require_auth
from zerowaste.core.config import get_settings
from zerowaste.core.midtrans_client import MidtransGateway, get_payment_gateway
from zerowaste.database import get_session
from zerowaste.models.user import User
from zerowaste.repositories.order_repo import OrderRepository
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.schemas.payment import (
    CartCheckoutRequest,
    CheckoutResponse,
    NotificationResponse,
    PaymentConfigResponse,
    SingleCheckoutRequest,
    TransactionStatusResponse,
)
from zerowaste.services.payment_service import PaymentService

router = APIRouter(prefix="/payment", tags=["Payment"])

settings = get_settings()

service = PaymentService(OrderRepository(), ProductRepository(), settings.FRONTEND_URL)


@router.post("/create-transaction", response_model=CheckoutResponse)
def create_transaction(
    payload: SingleCheckoutRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    gateway: MidtransGateway = Depends(get_payment_gateway),
):
    """
    Open a Snap checkout for a single product.
    """
    transaction_id, transaction, orders = service.create_single_checkout(
        session, gateway, current_user, payload.product_id, payload.quantity
    )
    return CheckoutResponse(
        message="Transaction created successfully",
        token=transaction.get("token"),
        redirect_url=transaction.get("redirect_url"),
        order_id=transaction_id,
        order_ids=[o.id for o in orders],
    )


@router.post("/create-cart-transaction", response_model=CheckoutResponse)
def create_cart_transaction(
    payload: CartCheckoutRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    gateway: MidtransGateway = Depends(get_payment_gateway),
):
    """
    Open one Snap checkout for several products.

    Creates one pending order per seller, all sharing the returned orderId.
    """
    transaction_id, transaction, orders = service.create_cart_checkout(
        session, gateway, current_user, payload.items
    )
    return CheckoutResponse(
        message="Cart transaction created successfully",
        token=transaction.get("token"),
        redirect_url=transaction.get("redirect_url"),
        order_id=transaction_id,
        order_ids=[o.id for o in orders],
    )


@router.post("/notification", response_model=NotificationResponse)
def payment_notification(
    notification: dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
    gateway: MidtransGateway = Depends(get_payment_gateway),
):
    """
    Midtrans webhook (no auth). The status applied is the one returned by
    the gateway when the notification is verified.
    """
    transaction_id, new_status, updated = service.handle_notification(
        session, gateway, notification
    )
    message = (
        f"Updated {updated} order(s) to {new_status}"
        if new_status
        else "Notification received, no status change"
    )
    return NotificationResponse(
        message=message,
        transaction_id=transaction_id,
        status=new_status,
        updated_orders=updated,
    )


@router.get("/transaction-status/{transaction_id}", response_model=TransactionStatusResponse)
def transaction_status(
    transaction_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    return service.transaction_status(session, current_user, transaction_id)


@router.get("/config", response_model=PaymentConfigResponse)
def payment_config():
    """
    Public Snap settings for the frontend widget.
    """
    return PaymentConfigResponse(
        client_key=settings.MIDTRANS_CLIENT_KEY,
        is_production=settings.MIDTRANS_IS_PRODUCTION,
    )
