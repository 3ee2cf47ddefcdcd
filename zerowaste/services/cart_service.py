# zerowaste/services/cart_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from zerowaste.models.cart import Cart, CartItem
from zerowaste.repositories.cart_repo import CartRepository
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.schemas.cart import CartItemCreate, CartItemRead, CartItemUpdate, CartRead
from zerowaste.services.presenters import Presenter


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - lazily create the user's cart
      - validate product existence
      - snapshot Product.price when a line is created
      - recompute the cart total on every save (see CartRepository.save)
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        presenter: Presenter,
    ):
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.presenter = presenter

    # ---- internal helpers ----

    def _get_or_create_cart(self, session: Session, user_id: uuid.UUID) -> Cart:
        cart = self.cart_repo.get_for_user(session, user_id)
        if cart is None:
            cart = self.cart_repo.create(session, user_id)
        return cart

    def _get_existing_cart(self, session: Session, user_id: uuid.UUID) -> Cart:
        cart = self.cart_repo.get_for_user(session, user_id)
        if cart is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cart not found",
            )
        return cart

    def _read(self, session: Session, cart: Cart) -> CartRead:
        """
        Re-read the lines and attach product summaries.
        """
        items = self.cart_repo.list_items(session, cart.id)
        products = self.presenter.product_summaries(session, {it.product_id for it in items})

        return CartRead(
            id=cart.id,
            user_id=cart.user_id,
            items=[
                CartItemRead(
                    id=it.id,
                    product_id=it.product_id,
                    product=products.get(it.product_id),
                    quantity=it.quantity,
                    price=it.price,
                    line_total=it.price * it.quantity,
                )
                for it in items
            ],
            total_quantity=sum(it.quantity for it in items),
            total_amount=cart.total_amount,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )

    # ---- public operations ----

    def get_cart(self, session: Session, user_id: uuid.UUID) -> CartRead:
        return self._read(session, self._get_or_create_cart(session, user_id))

    def add_to_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemCreate,
    ) -> CartRead:
        """
        Add a product to the user's cart.

        Rules:
          - quantity must be >= 1
          - product must exist
          - an existing line is incremented; a new line snapshots the price
        """
        if payload.quantity < 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Quantity must be at least 1",
            )

        product = self.product_repo.get_by_id(session, payload.product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )

        cart = self._get_or_create_cart(session, user_id)
        existing = self.cart_repo.get_item(session, cart.id, product.id)

        if existing:
            existing.quantity += payload.quantity
            self.cart_repo.add_item(session, existing)
        else:
            self.cart_repo.add_item(
                session,
                CartItem(
                    cart_id=cart.id,
                    product_id=product.id,
                    quantity=payload.quantity,
                    price=product.price,
                ),
            )

        return self._read(session, self.cart_repo.save(session, cart))

    def update_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartRead:
        """
        Set the quantity of a line; quantity <= 0 removes it.
        """
        cart = self._get_existing_cart(session, user_id)
        item = self.cart_repo.get_item(session, cart.id, payload.product_id)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found in cart",
            )

        if payload.quantity <= 0:
            self.cart_repo.delete_item(session, item)
        else:
            item.quantity = payload.quantity
            self.cart_repo.add_item(session, item)

        return self._read(session, self.cart_repo.save(session, cart))

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
    ) -> CartRead:
        """
        Remove a product from the cart (if present).
        """
        cart = self._get_existing_cart(session, user_id)
        item = self.cart_repo.get_item(session, cart.id, product_id)
        if item:
            self.cart_repo.delete_item(session, item)

        return self._read(session, self.cart_repo.save(session, cart))

    def clear_cart(self, session: Session, user_id: uuid.UUID) -> CartRead:
        cart = self._get_existing_cart(session, user_id)
        self.cart_repo.clear_items(session, cart.id)
        return self._read(session, self.cart_repo.save(session, cart))
