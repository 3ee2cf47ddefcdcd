# zerowaste/repositories/product_repo.py
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select, col

from zerowaste.models.product import Product, ProductImage
from zerowaste.schemas.product import ProductQuery

# sort key -> ORDER BY clause
PRODUCT_SORTS = {
    "newest": col(Product.created_at).desc(),
    "price-asc": col(Product.price).asc(),
    "price-desc": col(Product.price).desc(),
}


def like_pattern(term: str) -> str:
    """Substring ILIKE pattern with % and _ matched literally."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ProductRepository:
    """
    Data access layer for Product & ProductImage.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_by_ids(
        self,
        session: Session,
        product_ids: set[uuid.UUID],
    ) -> dict[uuid.UUID, Product]:
        if not product_ids:
            return {}
        stmt = select(Product).where(col(Product.id).in_(product_ids))
        return {p.id: p for p in session.exec(stmt).all()}

    def search(self, session: Session, query: ProductQuery) -> list[Product]:
        stmt = select(Product)

        if query.status is not None:
            stmt = stmt.where(Product.status == query.status)

        if query.seller_id is not None:
            stmt = stmt.where(Product.seller_id == query.seller_id)

        if query.category:
            stmt = stmt.where(col(Product.category).ilike(like_pattern(query.category), escape="\\"))

        if query.search:
            pattern = like_pattern(query.search)
            stmt = stmt.where(
                or_(
                    col(Product.name).ilike(pattern, escape="\\"),
                    col(Product.description).ilike(pattern, escape="\\"),
                )
            )

        stmt = stmt.order_by(PRODUCT_SORTS[query.sort])

        if query.limit:
            stmt = stmt.limit(query.limit)

        return session.exec(stmt).all()

    def count(self, session: Session) -> int:
        return session.exec(select(func.count()).select_from(Product)).one()

    def create(self, session: Session, product: Product) -> Product:
        """
        Insert without committing; images are added in the same transaction.
        """
        session.add(product)
        session.flush()
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        # Staged child deletions go out first so foreign keys hold.
        session.flush()
        session.delete(product)
        session.commit()

    # ----- Product images -----

    def list_images_for_product(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> list[ProductImage]:
        stmt = (
            select(ProductImage)
            .where(ProductImage.product_id == product_id)
            .order_by(ProductImage.sort_order)
        )
        return session.exec(stmt).all()

    def list_images_for_products(
        self,
        session: Session,
        product_ids: set[uuid.UUID],
    ) -> dict[uuid.UUID, list[ProductImage]]:
        """Images grouped by product id, each list in gallery order."""
        grouped: dict[uuid.UUID, list[ProductImage]] = {pid: [] for pid in product_ids}
        if not product_ids:
            return grouped
        stmt = (
            select(ProductImage)
            .where(col(ProductImage.product_id).in_(product_ids))
            .order_by(ProductImage.sort_order)
        )
        for image in session.exec(stmt).all():
            grouped[image.product_id].append(image)
        return grouped

    def add_images(self, session: Session, images: list[ProductImage]) -> None:
        """Stage image rows; the caller commits."""
        session.add_all(images)

    def delete_image(self, session: Session, image: ProductImage) -> None:
        """Stage an image row deletion; the caller commits."""
        session.delete(image)
