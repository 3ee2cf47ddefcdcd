# zerowaste/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from sqlmodel import Field

from zerowaste.schemas.common import CamelModel
from zerowaste.schemas.product import ProductSummary
from zerowaste.schemas.user import SellerSummary

OrderStatus = Literal[
    "pending",
    "paid",
    "processing",
    "shipped",
    "delivered",
    "completed",
    "cancelled",
]
ORDER_STATUSES: tuple[str, ...] = OrderStatus.__args__

OrderSort = Literal["newest", "oldest", "amount-high", "amount-low"]


class OrderQuery(CamelModel):
    """
    Buyer order-history filters.

    status="all" (or None) disables the status filter.
    """

    status: OrderStatus | Literal["all"] | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    sort: OrderSort = "newest"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class OrderLineRead(CamelModel):
    """
    Representation of a single order line item.
    """

    product_id: uuid.UUID
    product_name: str | None = None
    product: ProductSummary | None = None
    quantity: int
    price: float
    line_total: float


class OrderRead(CamelModel):
    """
    Order as shown in the buyer's history.

    order_type:
      - single: created by /payment/create-transaction (product_id set)
      - cart: created by /payment/create-cart-transaction
    items is filled for both shapes.
    """

    id: uuid.UUID
    buyer_id: uuid.UUID
    seller_id: uuid.UUID
    seller: SellerSummary | None = None
    order_type: Literal["single", "cart"]
    product_id: uuid.UUID | None = None
    product: ProductSummary | None = None
    quantity: int
    items: list[OrderLineRead]
    total_amount: float
    status: OrderStatus
    transaction_id: str
    payment_method: str
    payment_type: str | None = None
    notes: str | None = None
    paid_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancel_reason: str | None = None
    created_at: datetime
    updated_at: datetime


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_orders: int
    has_next_page: bool
    has_prev_page: bool
    limit: int


class OrderListResponse(CamelModel):
    success: bool = True
    orders: list[OrderRead]
    pagination: Pagination


class OrderDetailResponse(CamelModel):
    success: bool = True
    order: OrderRead


class StatusStats(CamelModel):
    count: int = 0
    total_amount: float = 0.0


class OrderStats(CamelModel):
    total_orders: int
    total_spent: float
    by_status: dict[str, StatusStats]


class OrderStatsResponse(CamelModel):
    success: bool = True
    stats: OrderStats


class OrderCancel(CamelModel):
    reason: str | None = Field(default=None, max_length=200)


class OrderCancelResponse(CamelModel):
    success: bool = True
    message: str
    order: OrderRead
