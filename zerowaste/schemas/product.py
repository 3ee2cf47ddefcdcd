# zerowaste/schemas/product.py
import uuid
from datetime import datetime
from typing import Literal

from sqlmodel import Field

from zerowaste.schemas.common import CamelModel
from zerowaste.schemas.user import SellerSummary

ProductCondition = Literal["new", "used"]
ProductType = Literal["Sell", "Donation", "Swap"]
ProductStatus = Literal["active", "sold", "inactive"]
ProductSort = Literal["newest", "price-asc", "price-desc"]


class ProductQuery(CamelModel):
    """
    Listing filters, passed as one object down to the repository.

    - category / search: case-insensitive substring match
      (search looks at name and description)
    - status: None = any status
    """

    category: str | None = None
    search: str | None = None
    sort: ProductSort = "newest"
    seller_id: uuid.UUID | None = None
    status: ProductStatus | None = "active"
    limit: int | None = Field(default=None, ge=1, le=200)


class ProductCreate(CamelModel):
    """
    Fields for a new listing (images arrive separately as uploads).
    """

    name: str = Field(max_length=200)
    description: str | None = None
    price: float = Field(ge=0)
    category: str = Field(max_length=50)
    stock: int = Field(default=1, ge=0)
    condition: ProductCondition
    type: ProductType


class ProductUpdate(CamelModel):
    """
    Partial update: only fields present in model_fields_set are written.
    """

    name: str | None = Field(default=None, max_length=200)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, max_length=50)
    stock: int | None = Field(default=None, ge=0)
    condition: ProductCondition | None = None
    type: ProductType | None = None
    status: ProductStatus | None = None


class ProductRead(CamelModel):
    """
    Product representation for clients.

    images holds the stored relative paths; image_urls the absolute links
    rendered from BASE_URL at read time.
    """

    id: uuid.UUID
    seller_id: uuid.UUID
    seller: SellerSummary | None = None
    name: str
    description: str | None = None
    price: float
    category: str
    stock: int
    condition: ProductCondition
    type: ProductType
    status: ProductStatus
    images: list[str]
    image_urls: list[str]
    image_url: str | None = None
    created_at: datetime
    updated_at: datetime


class ProductSummary(CamelModel):
    """Compact product info embedded in cart, wishlist and order lines."""

    id: uuid.UUID
    name: str
    price: float
    category: str
    condition: ProductCondition
    type: ProductType
    status: ProductStatus
    images: list[str]
    image_urls: list[str]
    image_url: str | None = None


class ProductResponse(CamelModel):
    success: bool = True
    message: str
    product: ProductRead
