# zerowaste/services/wishlist_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from zerowaste.core.errors import ApiError
from zerowaste.models.wishlist import WishlistItem
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.repositories.wishlist_repo import WishlistRepository
from zerowaste.schemas.wishlist import WishlistItemRead
from zerowaste.services.presenters import Presenter


class WishlistService:
    """
    Business logic for the (user, product) wishlist.
    """

    def __init__(
        self,
        repo: WishlistRepository,
        product_repo: ProductRepository,
        presenter: Presenter,
    ):
        self.repo = repo
        self.product_repo = product_repo
        self.presenter = presenter

    def _read_many(self, session: Session, items: list[WishlistItem]) -> list[WishlistItemRead]:
        products = self.presenter.product_summaries(session, {it.product_id for it in items})
        return [
            WishlistItemRead(
                id=it.id,
                user_id=it.user_id,
                product_id=it.product_id,
                product=products.get(it.product_id),
                created_at=it.created_at,
            )
            for it in items
        ]

    def list_wishlist(self, session: Session, user_id: uuid.UUID) -> list[WishlistItemRead]:
        """Entries newest first, each with its product summary."""
        return self._read_many(session, self.repo.list_for_user(session, user_id))

    def add(self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID) -> WishlistItemRead:
        """
        Raises:
            HTTPException(404): unknown product.
            ApiError(409, ALREADY_IN_WISHLIST): the pair already exists.
        """
        if not self.product_repo.get_by_id(session, product_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )

        if self.repo.get(session, user_id, product_id):
            raise ApiError(
                status.HTTP_409_CONFLICT,
                "Product already in wishlist",
                "ALREADY_IN_WISHLIST",
            )

        item = self.repo.create(session, WishlistItem(user_id=user_id, product_id=product_id))
        return self._read_many(session, [item])[0]

    def remove(self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID) -> None:
        item = self.repo.get(session, user_id, product_id)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found in wishlist",
            )
        self.repo.delete(session, item)

    def is_in_wishlist(self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID) -> bool:
        return self.repo.get(session, user_id, product_id) is not None
