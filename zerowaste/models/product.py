# zerowaste/models/product.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from zerowaste.models.user import utcnow


class Product(SQLModel, table=True):
    """
    Listing posted by a seller.

      - condition: new | used
      - type: Sell | Donation | Swap
      - status: active | sold | inactive (only active listings are public)
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    seller_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
        description="Owner of the listing",
    )

    name: str = Field(
        max_length=200,
        index=True,
        description="Display name of the item",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    price: float = Field(
        ge=0,
        description="Unit price (IDR)",
    )

    category: str = Field(
        max_length=50,
        index=True,
    )

    stock: int = Field(
        default=1,
        ge=0,
        description="How many units are available",
    )

    condition: str = Field(description="new | used")

    type: str = Field(description="Sell | Donation | Swap")

    status: str = Field(
        default="active",
        index=True,
        description="active | sold | inactive",
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        index=True,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(default_factory=utcnow)


class ProductImage(SQLModel, table=True):
    """
    Uploaded image of a product, stored as a relative path.
    """

    __tablename__ = "product_images"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
        description="FK to products.id",
    )

    image_path: str = Field(
        description="Relative path, e.g. uploads/<uuid>.png",
    )

    sort_order: int = Field(
        default=0,
        ge=0,
        description="Ordering index within the gallery",
    )
