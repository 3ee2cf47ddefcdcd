# zerowaste/schemas/cart.py
import uuid
from datetime import datetime

from sqlmodel import Field

from zerowaste.schemas.common import CamelModel
from zerowaste.schemas.product import ProductSummary


class CartItemCreate(CamelModel):
    """
    Payload for adding to cart.
    """

    product_id: uuid.UUID
    quantity: int = 1


class CartItemUpdate(CamelModel):
    """
    Payload for setting the quantity of a cart line.
    quantity <= 0 removes the line.
    """

    product_id: uuid.UUID
    quantity: int


class CartItemRead(CamelModel):
    """
    Read model for a single cart line, including line_total.
    product is None when the product was deleted after being added.
    """

    id: uuid.UUID
    product_id: uuid.UUID
    product: ProductSummary | None = None
    quantity: int
    price: float
    line_total: float


class CartRead(CamelModel):
    """
    Full cart response model with totals.
    """

    id: uuid.UUID
    user_id: uuid.UUID
    items: list[CartItemRead]
    total_quantity: int
    total_amount: float = Field(description="Sum of price * quantity")
    created_at: datetime
    updated_at: datetime


class CartClearedResponse(CamelModel):
    success: bool = True
    message: str
    cart: CartRead
