# zerowaste/schemas/admin.py
import uuid

from zerowaste.schemas.common import CamelModel
from zerowaste.schemas.product import ProductRead


class AdminLoginRequest(CamelModel):
    username: str
    password: str


class AdminLoginResponse(CamelModel):
    success: bool = True
    message: str
    admin_id: uuid.UUID
    token: str


class AdminProductList(CamelModel):
    """
    Dashboard listing.

    - products: every listing matching the filters, any status
    - recent_products: newest listings regardless of filters
    """

    success: bool = True
    total_products: int
    products: list[ProductRead]
    recent_products: list[ProductRead]


class AdminProductDelete(CamelModel):
    """Reason is mandatory; it is forwarded to the seller."""

    reason: str | None = None


class UsersCountResponse(CamelModel):
    success: bool = True
    total_users: int
