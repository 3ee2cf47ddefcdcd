# zerowaste/services/admin_service.py
import logging
import smtplib
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from zerowaste.core.auth import create_access_token, hash_password, verify_password
from zerowaste.core.config import Settings
from zerowaste.core.email_client import render_action_email, send_email
from zerowaste.core.storage_utils import Storage
from zerowaste.models.user import User, utcnow
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.repositories.user_repo import UserRepository
from zerowaste.schemas.admin import AdminLoginRequest, AdminProductList
from zerowaste.schemas.product import ProductQuery
from zerowaste.services.product_service import ProductService

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
CUSTOMER_ROLE = "user"

RECENT_PRODUCTS_DEFAULT = 5


class AdminService:
    """
    Moderation tools for the admin dashboard.

    Admins are regular accounts with role="admin"; they sign in through
    their own endpoint so customer credentials never open the dashboard.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        product_repo: ProductRepository,
        product_service: ProductService,
        settings: Settings,
    ):
        self.user_repo = user_repo
        self.product_repo = product_repo
        self.product_service = product_service
        self.settings = settings

    # ----- Accounts -----

    def login(self, session: Session, payload: AdminLoginRequest) -> tuple[str, User]:
        """
        Raises:
            HTTPException(401): unknown user, wrong password or not an admin.
        """
        user = self.user_repo.get_by_username(session, payload.username.strip())
        if (
            user is None
            or user.role != ADMIN_ROLE
            or not verify_password(payload.password, user.password_hash)
        ):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid username or password",
            )

        logger.info("Admin %s signed in", user.username)
        return create_access_token(user), user

    def create_admin(self, session: Session, username: str, email: str, password: str) -> User:
        """
        Create a verified admin account, or promote the existing account
        with that username and reset its password.
        """
        user = self.user_repo.get_by_username(session, username)
        if user is None:
            user = User(username=username, email=email.lower(), password_hash="")

        user.password_hash = hash_password(password)
        user.role = ADMIN_ROLE
        user.is_verified = True
        user.updated_at = utcnow()
        return self.user_repo.update(session, user)

    def count_users(self, session: Session) -> int:
        """Customer accounts only; admins are not counted."""
        return self.user_repo.count_by_role(session, CUSTOMER_ROLE)

    # ----- Products -----

    def list_products(
        self,
        session: Session,
        query: ProductQuery,
        recent_limit: int | None = None,
    ) -> AdminProductList:
        products = self.product_repo.search(session, query)
        recent = self.product_repo.search(
            session,
            ProductQuery(status=None, limit=recent_limit or RECENT_PRODUCTS_DEFAULT),
        )
        return AdminProductList(
            total_products=self.product_repo.count(session),
            products=self.product_service.present_many(session, products),
            recent_products=self.product_service.present_many(session, recent),
        )

    def delete_product(
        self,
        session: Session,
        storage: Storage,
        admin: User,
        product_id: uuid.UUID,
        reason: str | None,
    ) -> None:
        """
        Remove any listing and tell its seller why.

        Raises:
            HTTPException(400): no reason given.
            HTTPException(404): product not found.
        """
        if not reason or not reason.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A reason for deletion is required",
            )
        reason = reason.strip()

        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )

        seller = self.user_repo.get_by_id(session, product.seller_id)
        product_name = product.name

        self.product_service.remove_product(session, storage, product)
        logger.info("Admin %s deleted product %s: %s", admin.username, product_id, reason)

        if seller is not None:
            self._notify_seller(seller, product_name, reason)

    def _notify_seller(self, seller: User, product_name: str, reason: str) -> None:
        text_body, html_body = render_action_email(
            f"Hi {seller.full_name or seller.username},",
            f'Your listing "{product_name}" was removed by an administrator. Reason: {reason}',
            f"{self.settings.FRONTEND_URL.rstrip('/')}/profile",
            "View your listings",
        )
        try:
            send_email(seller.email, "Your listing was removed", text_body, html_body)
        except (RuntimeError, smtplib.SMTPException, OSError):
            logger.warning("Could not notify %s about removed listing", seller.email, exc_info=True)
