# zerowaste/repositories/cart_repo.py
import uuid

from sqlmodel import Session, select

from zerowaste.models.cart import Cart, CartItem, compute_total
from zerowaste.models.user import utcnow


class CartRepository:
    """
    Data access layer for carts and cart_items.

    Item methods only stage changes; save() flushes them, recomputes the
    cart total from the persisted lines and commits.
    """

    def get_for_user(self, session: Session, user_id: uuid.UUID) -> Cart | None:
        stmt = select(Cart).where(Cart.user_id == user_id)
        return session.exec(stmt).first()

    def create(self, session: Session, user_id: uuid.UUID) -> Cart:
        cart = Cart(user_id=user_id)
        session.add(cart)
        session.commit()
        session.refresh(cart)
        return cart

    def list_items(self, session: Session, cart_id: uuid.UUID) -> list[CartItem]:
        stmt = select(CartItem).where(CartItem.cart_id == cart_id)
        return session.exec(stmt).all()

    def get_item(
        self, session: Session, cart_id: uuid.UUID, product_id: uuid.UUID
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.cart_id == cart_id, CartItem.product_id == product_id
        )
        return session.exec(stmt).first()

    def add_item(self, session: Session, item: CartItem) -> None:
        session.add(item)

    def delete_item(self, session: Session, item: CartItem) -> None:
        session.delete(item)

    def clear_items(self, session: Session, cart_id: uuid.UUID) -> None:
        for item in self.list_items(session, cart_id):
            session.delete(item)

    def save(self, session: Session, cart: Cart) -> Cart:
        """
        Persist staged item changes and the recomputed total.
        """
        session.flush()
        cart.total_amount = compute_total(self.list_items(session, cart.id))
        cart.updated_at = utcnow()
        session.add(cart)
        session.commit()
        session.refresh(cart)
        return cart

    def delete_items_for_product(
        self, session: Session, product_id: uuid.UUID
    ) -> set[uuid.UUID]:
        """
        Stage removal of a product from every cart.

        Returns:
            ids of the carts that lost a line (their totals need a recompute).
        """
        stmt = select(CartItem).where(CartItem.product_id == product_id)
        cart_ids: set[uuid.UUID] = set()
        for item in session.exec(stmt).all():
            cart_ids.add(item.cart_id)
            session.delete(item)
        return cart_ids

    def recompute_totals(self, session: Session, cart_ids: set[uuid.UUID]) -> None:
        """Stage fresh totals for the given carts; the caller commits."""
        session.flush()
        for cart_id in cart_ids:
            cart = session.get(Cart, cart_id)
            if cart is None:
                continue
            cart.total_amount = compute_total(self.list_items(session, cart_id))
            cart.updated_at = utcnow()
            session.add(cart)
