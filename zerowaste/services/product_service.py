# zerowaste/services/product_service.py
import json
import uuid
from typing import Any

from fastapi import HTTPException, status
from sqlmodel import Session

from zerowaste.core.storage_utils import (
    Storage,
    delete_quietly,
    extract_relative_path,
    generate_filename,
)
from zerowaste.core.uploads import ImageFile
from zerowaste.models.product import Product, ProductImage
from zerowaste.models.user import User, utcnow
from zerowaste.repositories.cart_repo import CartRepository
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.repositories.user_repo import UserRepository
from zerowaste.repositories.wishlist_repo import WishlistRepository
from zerowaste.schemas.product import ProductCreate, ProductQuery, ProductRead, ProductUpdate
from zerowaste.services.presenters import Presenter

# Form fields a new listing cannot do without
REQUIRED_FIELDS = ("name", "price", "category", "condition", "type")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_images_to_delete(raw: str | None) -> list[str]:
    """
    Decode the imagesToDelete form field: a JSON array of stored paths
    or absolute image URLs.
    """
    if _is_blank(raw):
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="imagesToDelete must be a JSON array of image paths",
        )
    return value


class ProductService:
    """
    Business logic for Product & ProductImage.

    Responsibilities:
      - required-field checks for multipart forms
      - ownership checks (only the seller edits or deletes a listing)
      - image upload/delete orchestration with Storage
      - cleanup of carts and wishlists when a listing disappears
    """

    def __init__(
        self,
        repo: ProductRepository,
        user_repo: UserRepository,
        cart_repo: CartRepository,
        wishlist_repo: WishlistRepository,
        presenter: Presenter,
    ):
        self.repo = repo
        self.user_repo = user_repo
        self.cart_repo = cart_repo
        self.wishlist_repo = wishlist_repo
        self.presenter = presenter

    # ----- Helpers -----

    @staticmethod
    def build_create_payload(fields: dict[str, Any]) -> ProductCreate:
        """
        Turn raw form values into a ProductCreate.

        Raises:
            HTTPException(400): with the list of missing fields.
        """
        missing = [name for name in REQUIRED_FIELDS if _is_blank(fields.get(name))]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Missing required fields", "missing": missing},
            )

        values = {k: v for k, v in fields.items() if v is not None}
        values["name"] = values["name"].strip()
        values["category"] = values["category"].strip()
        return ProductCreate(**values)

    @staticmethod
    def _ensure_owner(product: Product, user: User, action: str) -> None:
        if product.seller_id != user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not authorized to {action} this product",
            )

    @staticmethod
    def _store_images(
        storage: Storage,
        product_id: uuid.UUID,
        images: list[ImageFile],
        start: int = 0,
    ) -> list[ProductImage]:
        """
        Upload files under random names and build their rows.

        Path pattern:
            uploads/<uuid>.<ext>
        """
        rows = []
        for idx, image in enumerate(images):
            path = storage.upload(generate_filename(image.ext), image.data, image.content_type)
            rows.append(
                ProductImage(
                    product_id=product_id,
                    image_path=path,
                    sort_order=start + idx,
                )
            )
        return rows

    def _present(self, session: Session, product: Product, with_seller: bool = False) -> ProductRead:
        images = self.repo.list_images_for_product(session, product.id)
        seller = self.user_repo.get_by_id(session, product.seller_id) if with_seller else None
        return self.presenter.product(product, [img.image_path for img in images], seller)

    def present_many(self, session: Session, products: list[Product]) -> list[ProductRead]:
        """Render a listing with two extra queries (images, sellers)."""
        images = self.repo.list_images_for_products(session, {p.id for p in products})
        sellers = self.user_repo.get_by_ids(session, {p.seller_id for p in products})
        return [
            self.presenter.product(
                p,
                [img.image_path for img in images[p.id]],
                sellers.get(p.seller_id),
            )
            for p in products
        ]

    def _get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    # ----- Products -----

    def list_products(self, session: Session, query: ProductQuery) -> list[ProductRead]:
        return self.present_many(session, self.repo.search(session, query))

    def get_product(self, session: Session, product_id: uuid.UUID) -> ProductRead:
        product = self._get_product(session, product_id)
        return self._present(session, product, with_seller=True)

    def create_product(
        self,
        session: Session,
        storage: Storage,
        seller: User,
        payload: ProductCreate,
        images: list[ImageFile],
    ) -> ProductRead:
        """
        Create a listing owned by `seller` with its uploaded images.

        Raises:
            HTTPException(400): no image was uploaded.
        """
        if not images:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="At least one image is required",
            )

        product = self.repo.create(
            session,
            Product(seller_id=seller.id, **payload.model_dump()),
        )
        self.repo.add_images(session, self._store_images(storage, product.id, images))
        product = self.repo.update(session, product)

        return self._present(session, product, with_seller=True)

    def update_product(
        self,
        session: Session,
        storage: Storage,
        user: User,
        product_id: uuid.UUID,
        payload: ProductUpdate,
        images_to_delete: list[str],
        new_images: list[ImageFile],
    ) -> ProductRead:
        """
        Explicit patch of a listing.

        - only fields present in the payload are written
        - images_to_delete (paths or URLs) are removed from rows and Storage
        - new_images are appended after the kept ones

        Raises:
            HTTPException(403): caller is not the seller.
            HTTPException(400): the listing would be left without images.
        """
        product = self._get_product(session, product_id)
        self._ensure_owner(product, user, "update")

        for field, value in payload.model_dump(exclude_unset=True).items():
            if field in ("name", "category"):
                value = value.strip()
                if not value:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"Product {field} cannot be empty",
                    )
            setattr(product, field, value)

        existing = self.repo.list_images_for_product(session, product.id)
        targets = {
            extract_relative_path(self.presenter.base_url, value)
            for value in images_to_delete
        }
        removed = [img for img in existing if img.image_path in targets]
        kept = [img for img in existing if img.image_path not in targets]

        if not kept and not new_images:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product must have at least one image",
            )

        for image in removed:
            self.repo.delete_image(session, image)

        start = max((img.sort_order for img in kept), default=-1) + 1
        self.repo.add_images(
            session, self._store_images(storage, product.id, new_images, start)
        )

        product.updated_at = utcnow()
        product = self.repo.update(session, product)

        for image in removed:
            delete_quietly(storage, image.image_path)

        return self._present(session, product, with_seller=True)

    def delete_product(
        self,
        session: Session,
        storage: Storage,
        user: User,
        product_id: uuid.UUID,
    ) -> None:
        """Seller-side delete: only the owner may remove a listing."""
        product = self._get_product(session, product_id)
        self._ensure_owner(product, user, "delete")
        self.remove_product(session, storage, product)

    def remove_product(self, session: Session, storage: Storage, product: Product) -> None:
        """
        Delete a listing together with everything that points at it:
        cart lines (cart totals are recomputed), wishlist entries, image
        rows and, best effort, the image files.
        """
        images = self.repo.list_images_for_product(session, product.id)

        cart_ids = self.cart_repo.delete_items_for_product(session, product.id)
        self.cart_repo.recompute_totals(session, cart_ids)
        self.wishlist_repo.delete_for_product(session, product.id)
        for image in images:
            self.repo.delete_image(session, image)

        self.repo.delete(session, product)

        for image in images:
            delete_quietly(storage, image.image_path)
