# zerowaste/models/cart.py
import uuid
from datetime import datetime
from typing import Iterable, Protocol

from sqlmodel import SQLModel, Field

from zerowaste.models.user import utcnow


class PricedLine(Protocol):
    price: float
    quantity: int


def compute_total(lines: Iterable[PricedLine]) -> float:
    """Sum of price * quantity over cart or order lines."""
    return float(sum(line.price * line.quantity for line in lines))


class Cart(SQLModel, table=True):
    """
    One cart per user, created lazily on first access.

    total_amount is derived from the items and recomputed on every save
    (see CartRepository.save).
    """

    __tablename__ = "carts"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        unique=True,
        index=True,
    )

    total_amount: float = Field(default=0.0)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class CartItem(SQLModel, table=True):
    """
    Line inside a cart.
    One cart cannot have 2 rows for the same product.
    """

    __tablename__ = "cart_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    cart_id: uuid.UUID = Field(
        foreign_key="carts.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    quantity: int = Field(
        ge=1,
        description="Must be >= 1",
    )

    price: float = Field(
        description="Product price when the line was added",
    )
