# zerowaste/schemas/wishlist.py
import uuid
from datetime import datetime

from zerowaste.schemas.common import CamelModel
from zerowaste.schemas.product import ProductSummary


class WishlistAdd(CamelModel):
    product_id: uuid.UUID


class WishlistItemRead(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    product_id: uuid.UUID
    product: ProductSummary | None = None
    created_at: datetime


class WishlistAddResponse(CamelModel):
    success: bool = True
    message: str
    wishlist_item: WishlistItemRead


class WishlistCheck(CamelModel):
    in_wishlist: bool
