# zerowaste/schemas/payment.py
import uuid

from sqlmodel import Field

from zerowaste.schemas.common import CamelModel
from zerowaste.schemas.order import OrderStatus


class SingleCheckoutRequest(CamelModel):
    product_id: uuid.UUID
    quantity: int = Field(default=1, ge=1)


class CheckoutLine(CamelModel):
    product_id: uuid.UUID
    quantity: int = Field(default=1, ge=1)


class CartCheckoutRequest(CamelModel):
    """
    Lines to pay for. Prices are always taken from the products,
    never from the client.
    """

    items: list[CheckoutLine]


class CheckoutResponse(CamelModel):
    success: bool = True
    message: str
    token: str
    redirect_url: str | None = None
    order_id: str = Field(description="Gateway transaction id")
    order_ids: list[uuid.UUID] = []


class NotificationResponse(CamelModel):
    success: bool = True
    message: str
    transaction_id: str
    status: OrderStatus | None = None
    updated_orders: int = 0


class TransactionOrderStatus(CamelModel):
    id: uuid.UUID
    status: OrderStatus
    total_amount: float


class TransactionStatusResponse(CamelModel):
    success: bool = True
    transaction_id: str
    status: OrderStatus
    total_amount: float
    orders: list[TransactionOrderStatus]


class PaymentConfigResponse(CamelModel):
    client_key: str | None
    is_production: bool
