# zerowaste/services/payment_service.py
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from fastapi import HTTPException, status
from sqlmodel import Session

from zerowaste.core.midtrans_client import MidtransGateway
from zerowaste.models.order import Order, OrderItem
from zerowaste.models.product import Product
from zerowaste.models.user import User, utcnow
from zerowaste.repositories.order_repo import OrderRepository
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.schemas.payment import CheckoutLine, TransactionOrderStatus, TransactionStatusResponse

logger = logging.getLogger(__name__)

# Midtrans limits
ITEM_NAME_MAX = 50
CUSTOMER_NAME_MAX = 20
CHECKOUT_EXPIRY_MINUTES = 60

# Midtrans expects start_time in Jakarta time
GATEWAY_TZ = timezone(timedelta(hours=7))


def to_gateway_price(price: float) -> int:
    """
    Whole-rupiah unit price sent to the gateway, halves rounded up.
    """
    return int(Decimal(str(price)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass
class CheckoutItem:
    """A product being paid for, priced from the catalogue."""

    product: Product
    quantity: int

    @property
    def price(self) -> float:
        return self.product.price

    @property
    def charged_price(self) -> int:
        return to_gateway_price(self.product.price)

    @property
    def charged_amount(self) -> int:
        return self.charged_price * self.quantity

    @property
    def seller_id(self) -> uuid.UUID:
        return self.product.seller_id


def group_items_by_seller(items: Iterable[CheckoutItem]) -> dict[uuid.UUID, list[CheckoutItem]]:
    """
    Split checkout lines into one bucket per seller.

    Sellers appear in the order of their first line.
    """
    groups: dict[uuid.UUID, list[CheckoutItem]] = {}
    for item in items:
        groups.setdefault(item.seller_id, []).append(item)
    return groups


def map_transaction_status(transaction_status: str | None, fraud_status: str | None = None) -> str | None:
    """
    Gateway transaction status -> order status.

    None means "leave the orders as they are".
    """
    if transaction_status == "capture":
        if fraud_status == "accept":
            return "paid"
        if fraud_status == "challenge":
            return "pending"
        return None
    if transaction_status == "settlement":
        return "paid"
    if transaction_status in ("cancel", "deny", "expire"):
        return "cancelled"
    if transaction_status == "pending":
        return "pending"
    return None


def new_transaction_id(prefix: str, user_id: uuid.UUID) -> str:
    """e.g. CART-1718000000000-3f2a1"""
    return f"{prefix}-{int(time.time() * 1000)}-{str(user_id)[:5]}"


class PaymentService:
    """
    Checkout and webhook handling on top of the Midtrans gateway.

    Responsibilities:
      - price lines from the products, never from the client
      - one pending order per seller, all sharing one transaction id
      - one Snap session per checkout
      - apply verified webhook statuses to every order of a transaction
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        frontend_url: str,
    ):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.frontend_url = frontend_url.rstrip("/")

    # -------- Helpers --------

    def _load_items(self, session: Session, lines: list[CheckoutLine]) -> list[CheckoutItem]:
        items = []
        for line in lines:
            product = self.product_repo.get_by_id(session, line.product_id)
            if not product:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Product with ID {line.product_id} not found",
                )
            items.append(CheckoutItem(product=product, quantity=line.quantity))
        return items

    def build_checkout_parameters(
        self,
        transaction_id: str,
        buyer: User,
        items: list[CheckoutItem],
    ) -> dict[str, Any]:
        """
        Snap request body. gross_amount equals the sum of item_details,
        as the gateway requires.
        """
        item_details = [
            {
                "id": str(item.product.id),
                "price": item.charged_price,
                "quantity": item.quantity,
                "name": item.product.name[:ITEM_NAME_MAX],
            }
            for item in items
        ]
        gross_amount = sum(d["price"] * d["quantity"] for d in item_details)

        return {
            "transaction_details": {
                "order_id": transaction_id,
                "gross_amount": gross_amount,
            },
            "item_details": item_details,
            "customer_details": {
                "first_name": (buyer.full_name or buyer.username or "Customer")[:CUSTOMER_NAME_MAX],
                "email": buyer.email,
                "phone": buyer.phone or "",
            },
            "callbacks": {
                "finish": f"{self.frontend_url}/payment/success",
                "error": f"{self.frontend_url}/payment/error",
                "pending": f"{self.frontend_url}/payment/pending",
            },
            "credit_card": {"secure": True},
            "expiry": {
                "start_time": datetime.now(GATEWAY_TZ).strftime("%Y-%m-%d %H:%M:%S %z"),
                "duration": CHECKOUT_EXPIRY_MINUTES,
                "unit": "minutes",
            },
        }

    def _open_session(
        self,
        session: Session,
        gateway: MidtransGateway,
        transaction_id: str,
        buyer: User,
        items: list[CheckoutItem],
        orders: list[Order],
    ) -> dict[str, Any]:
        """
        Create the Snap session and store its token on the orders.

        Orders are only committed once the gateway accepted the checkout.
        """
        transaction = gateway.create_checkout(
            self.build_checkout_parameters(transaction_id, buyer, items)
        )

        for order in orders:
            order.snap_token = transaction.get("token")
            order.redirect_url = transaction.get("redirect_url")
            self.order_repo.update_order(session, order)
        session.commit()

        logger.info("Checkout %s opened with %d order(s)", transaction_id, len(orders))
        return transaction

    # -------- Checkouts --------

    def create_single_checkout(
        self,
        session: Session,
        gateway: MidtransGateway,
        buyer: User,
        product_id: uuid.UUID,
        quantity: int,
    ) -> tuple[str, dict[str, Any], list[Order]]:
        """
        Pay for one product: one pending single-product order.

        Returns:
            (transaction_id, gateway response, orders)
        """
        items = self._load_items(session, [CheckoutLine(product_id=product_id, quantity=quantity)])
        item = items[0]

        transaction_id = new_transaction_id("ORDER", buyer.id)
        order = self.order_repo.create_order(
            session,
            Order(
                buyer_id=buyer.id,
                seller_id=item.seller_id,
                product_id=item.product.id,
                product_name=item.product.name,
                quantity=item.quantity,
                total_amount=item.charged_amount,
                transaction_id=transaction_id,
            ),
        )

        transaction = self._open_session(session, gateway, transaction_id, buyer, items, [order])
        return transaction_id, transaction, [order]

    def create_cart_checkout(
        self,
        session: Session,
        gateway: MidtransGateway,
        buyer: User,
        lines: list[CheckoutLine],
    ) -> tuple[str, dict[str, Any], list[Order]]:
        """
        Pay for several products at once.

        One pending cart order per seller, each totalling only its own
        lines; a single Snap session covers everything.

        Raises:
            HTTPException(400): no lines.
            HTTPException(404): a product does not exist.
        """
        if not lines:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart items required and must be a non-empty array",
            )

        items = self._load_items(session, lines)
        transaction_id = new_transaction_id("CART", buyer.id)

        orders = []
        for seller_id, seller_items in group_items_by_seller(items).items():
            order = self.order_repo.create_order(
                session,
                Order(
                    buyer_id=buyer.id,
                    seller_id=seller_id,
                    quantity=sum(it.quantity for it in seller_items),
                    total_amount=sum(it.charged_amount for it in seller_items),
                    transaction_id=transaction_id,
                ),
            )
            self.order_repo.create_items(
                session,
                [
                    OrderItem(
                        order_id=order.id,
                        product_id=it.product.id,
                        product_name=it.product.name,
                        quantity=it.quantity,
                        price=it.charged_price,
                    )
                    for it in seller_items
                ],
            )
            orders.append(order)

        transaction = self._open_session(session, gateway, transaction_id, buyer, items, orders)
        return transaction_id, transaction, orders

    # -------- Webhook --------

    def handle_notification(
        self,
        session: Session,
        gateway: MidtransGateway,
        notification: dict[str, Any],
    ) -> tuple[str, str | None, int]:
        """
        Apply a gateway notification.

        The posted body is only used to name the transaction; the status
        acted on comes from the gateway's own verification response.

        Returns:
            (transaction_id, new status or None, number of orders updated)
        """
        if not notification.get("order_id"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Notification is missing order_id",
            )

        verified = gateway.verify_notification(notification)
        transaction_id = verified.get("order_id") or notification["order_id"]
        transaction_status = verified.get("transaction_status")
        fraud_status = verified.get("fraud_status")

        logger.info(
            "Notification for %s: status=%s fraud=%s",
            transaction_id,
            transaction_status,
            fraud_status,
        )

        orders = self.order_repo.list_by_transaction(session, transaction_id)
        if not orders:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Orders not found for this transaction ID",
            )

        new_status = map_transaction_status(transaction_status, fraud_status)
        if new_status is None:
            logger.info("Status %s leaves %s unchanged", transaction_status, transaction_id)
            return transaction_id, None, 0

        now = utcnow()
        for order in orders:
            order.status = new_status
            order.payment_type = verified.get("payment_type") or order.payment_type
            if new_status == "paid" and order.paid_at is None:
                order.paid_at = now
            if new_status == "cancelled" and order.cancelled_at is None:
                order.cancelled_at = now
            order.updated_at = now
            self.order_repo.update_order(session, order)
        session.commit()

        logger.info("Updated %d order(s) of %s to %s", len(orders), transaction_id, new_status)
        return transaction_id, new_status, len(orders)

    # -------- Lookups --------

    def transaction_status(
        self,
        session: Session,
        buyer: User,
        transaction_id: str,
    ) -> TransactionStatusResponse:
        """
        Local status of a transaction's orders, visible to its buyer only.
        """
        orders = [
            o
            for o in self.order_repo.list_by_transaction(session, transaction_id)
            if o.buyer_id == buyer.id
        ]
        if not orders:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Transaction not found",
            )

        return TransactionStatusResponse(
            transaction_id=transaction_id,
            status=orders[0].status,
            total_amount=sum(o.total_amount for o in orders),
            orders=[
                TransactionOrderStatus(id=o.id, status=o.status, total_amount=o.total_amount)
                for o in orders
            ],
        )
