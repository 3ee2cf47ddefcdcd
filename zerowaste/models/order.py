# zerowaste/models/order.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from zerowaste.models.user import utcnow


class Order(SQLModel, table=True):
    """
    Purchase from a single seller.

    Two shapes:
      - single-product order: product_id + quantity, no OrderItem rows
      - cart order: OrderItem rows, product_id is NULL

    A cart checkout creates one Order per seller; all of them share the
    same transaction_id (the gateway's order_id).
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    buyer_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    seller_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # Single-product orders only
    # Not a foreign key: order history outlives deleted listings.
    product_id: uuid.UUID | None = Field(default=None, index=True)
    product_name: str | None = None
    quantity: int = Field(default=1, ge=1)

    total_amount: float = Field(
        ge=0,
        description="Sum of this order's own lines",
    )

    # pending | paid | processing | shipped | delivered | completed | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    transaction_id: str = Field(
        index=True,
        description="Gateway order_id, shared by orders of one checkout",
    )

    payment_method: str = Field(default="midtrans")
    payment_type: str | None = None
    snap_token: str | None = None
    redirect_url: str | None = None

    notes: str | None = Field(default=None, max_length=500)

    paid_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancel_reason: str | None = Field(default=None, max_length=200)

    created_at: datetime = Field(
        default_factory=utcnow,
        index=True,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(default_factory=utcnow)


class OrderItem(SQLModel, table=True):
    """
    Line item inside a cart order.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        index=True,
    )

    product_name: str | None = Field(
        default=None,
        description="Product name at checkout time",
    )

    quantity: int = Field(
        ge=1,
        description="Quantity ordered (>=1)",
    )

    price: float = Field(
        description="Unit price at checkout time",
    )
