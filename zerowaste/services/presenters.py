# zerowaste/services/presenters.py
import uuid

from sqlmodel import Session

from zerowaste.core.storage_utils import build_public_url
from zerowaste.models.product import Product
from zerowaste.models.user import User
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.schemas.product import ProductRead, ProductSummary
from zerowaste.schemas.user import SellerSummary, UserRead


class Presenter:
    """
    Builds response DTOs that need derived display fields.

    base_url comes from settings and is passed in explicitly; stored
    documents only ever hold relative paths.
    """

    def __init__(self, product_repo: ProductRepository, base_url: str):
        self.product_repo = product_repo
        self.base_url = base_url

    def url(self, path: str | None) -> str | None:
        return build_public_url(self.base_url, path)

    def image_urls(self, paths: list[str]) -> list[str]:
        return [self.url(p) for p in paths]

    # ----- Users -----

    def user(self, user: User) -> UserRead:
        return UserRead(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            phone=user.phone,
            address=user.address,
            bio=user.bio,
            profile_picture=user.profile_picture,
            profile_picture_url=self.url(user.profile_picture),
            role=user.role,
            is_verified=user.is_verified,
            created_at=user.created_at,
        )

    @staticmethod
    def seller(user: User | None) -> SellerSummary | None:
        if user is None:
            return None
        return SellerSummary(
            id=user.id,
            username=user.username,
            full_name=user.full_name,
            email=user.email,
            phone=user.phone,
        )

    # ----- Products -----

    def product(
        self,
        product: Product,
        image_paths: list[str],
        seller: User | None = None,
    ) -> ProductRead:
        urls = self.image_urls(image_paths)
        return ProductRead(
            id=product.id,
            seller_id=product.seller_id,
            seller=self.seller(seller),
            name=product.name,
            description=product.description,
            price=product.price,
            category=product.category,
            stock=product.stock,
            condition=product.condition,
            type=product.type,
            status=product.status,
            images=image_paths,
            image_urls=urls,
            image_url=urls[0] if urls else None,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    def product_summary(self, product: Product, image_paths: list[str]) -> ProductSummary:
        urls = self.image_urls(image_paths)
        return ProductSummary(
            id=product.id,
            name=product.name,
            price=product.price,
            category=product.category,
            condition=product.condition,
            type=product.type,
            status=product.status,
            images=image_paths,
            image_urls=urls,
            image_url=urls[0] if urls else None,
        )

    def product_summaries(
        self,
        session: Session,
        product_ids: set[uuid.UUID],
    ) -> dict[uuid.UUID, ProductSummary]:
        """
        Load products + images in two queries and render summaries.
        Ids of deleted products are simply absent from the result.
        """
        products = self.product_repo.get_by_ids(session, product_ids)
        images = self.product_repo.list_images_for_products(session, set(products))
        return {
            pid: self.product_summary(p, [img.image_path for img in images[pid]])
            for pid, p in products.items()
        }
