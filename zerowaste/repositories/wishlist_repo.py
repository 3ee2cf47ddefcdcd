# zerowaste/repositories/wishlist_repo.py
import uuid

from sqlmodel import Session, select, col

from zerowaste.models.wishlist import WishlistItem


class WishlistRepository:
    """
    Data access layer for wishlist_items.
    """

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[WishlistItem]:
        stmt = (
            select(WishlistItem)
            .where(WishlistItem.user_id == user_id)
            .order_by(col(WishlistItem.created_at).desc())
        )
        return session.exec(stmt).all()

    def get(
        self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> WishlistItem | None:
        stmt = select(WishlistItem).where(
            WishlistItem.user_id == user_id,
            WishlistItem.product_id == product_id,
        )
        return session.exec(stmt).first()

    def create(self, session: Session, item: WishlistItem) -> WishlistItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: WishlistItem) -> None:
        session.delete(item)
        session.commit()

    def delete_for_product(self, session: Session, product_id: uuid.UUID) -> None:
        """Stage removal of every entry pointing at a product; the caller commits."""
        stmt = select(WishlistItem).where(WishlistItem.product_id == product_id)
        for item in session.exec(stmt).all():
            session.delete(item)
