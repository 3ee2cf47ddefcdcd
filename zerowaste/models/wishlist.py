# zerowaste/models/wishlist.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from zerowaste.models.user import utcnow


class WishlistItem(SQLModel, table=True):
    """
    (user, product) bookmark.

    Uniqueness of the pair is checked by WishlistService before insert.
    """

    __tablename__ = "wishlist_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    created_at: datetime = Field(default_factory=utcnow)
