# zerowaste/routers/products.py
import uuid

from fastapi import APIRouter, Depends, Form, Query, status
from sqlmodel import Session

from zerowaste.core.auth import require_auth
from zerowaste.core.config import get_settings
from zerowaste.core.storage_utils import Storage, get_storage
from zerowaste.core.uploads import ImageFile, product_images
from zerowaste.database import get_session
from zerowaste.models.user import User
from zerowaste.repositories.cart_repo import CartRepository
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.repositories.user_repo import UserRepository
from zerowaste.repositories.wishlist_repo import WishlistRepository
from zerowaste.schemas.common import MessageResponse
from zerowaste.schemas.product import (
    ProductCondition,
    ProductQuery,
    ProductRead,
    ProductResponse,
    ProductSort,
    ProductStatus,
    ProductType,
    ProductUpdate,
)
from zerowaste.services.presenters import Presenter
from zerowaste.services.product_service import ProductService, parse_images_to_delete

router = APIRouter(prefix="/products", tags=["Products"])

settings = get_settings()

repo = ProductRepository()
presenter = Presenter(repo, settings.BASE_URL)
service = ProductService(
    repo,
    UserRepository(),
    CartRepository(),
    WishlistRepository(),
    presenter,
)


# -------- Public endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    category: str | None = None,
    search: str | None = None,
    sort: ProductSort = "newest",
    limit: int | None = Query(default=None, ge=1, le=200),
    session: Session = Depends(get_session),
):
    """
    List active products.

    - `category`, `search`: case-insensitive substring match
      (search looks at name and description)
    - `sort`: newest | price-asc | price-desc
    """
    query = ProductQuery(category=category, search=search, sort=sort, limit=limit)
    return service.list_products(session, query)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single product by id, with its seller.
    """
    return service.get_product(session, product_id)


# -------- Seller endpoints --------


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
@router.post(
    "/upload",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    name: str | None = Form(None, max_length=200),
    price: float | None = Form(None, ge=0),
    category: str | None = Form(None, max_length=50),
    condition: ProductCondition | None = Form(None),
    product_type: ProductType | None = Form(None, alias="type"),
    description: str | None = Form(None),
    stock: int | None = Form(None, ge=0),
    current_user: User = Depends(require_auth),
    images: list[ImageFile] = Depends(product_images),
    session: Session = Depends(get_session),
    storage: Storage = Depends(get_storage),
):
    """
    Create a listing (multipart form).

    Up to 5 images in field `images`, at least one required.
    Also served at /upload, where existing web clients post.
    """
    payload = service.build_create_payload(
        {
            "name": name,
            "price": price,
            "category": category,
            "condition": condition,
            "type": product_type,
            "description": description,
            "stock": stock,
        }
    )
    product = service.create_product(session, storage, current_user, payload, images)
    return ProductResponse(message="Product created successfully", product=product)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: uuid.UUID,
    name: str | None = Form(None, max_length=200),
    price: float | None = Form(None, ge=0),
    category: str | None = Form(None, max_length=50),
    condition: ProductCondition | None = Form(None),
    product_type: ProductType | None = Form(None, alias="type"),
    description: str | None = Form(None),
    stock: int | None = Form(None, ge=0),
    product_status: ProductStatus | None = Form(None, alias="status"),
    images_to_delete: str | None = Form(None, alias="imagesToDelete"),
    current_user: User = Depends(require_auth),
    images: list[ImageFile] = Depends(product_images),
    session: Session = Depends(get_session),
    storage: Storage = Depends(get_storage),
):
    """
    Update a listing (owner only).

    Only the fields sent are changed. `imagesToDelete` is a JSON array of
    image paths or URLs; new files in `images` are appended.
    """
    fields = {
        "name": name,
        "price": price,
        "category": category,
        "condition": condition,
        "type": product_type,
        "description": description,
        "stock": stock,
        "status": product_status,
    }
    payload = ProductUpdate(**{k: v for k, v in fields.items() if v is not None})

    product = service.update_product(
        session,
        storage,
        current_user,
        product_id,
        payload,
        parse_images_to_delete(images_to_delete),
        images,
    )
    return ProductResponse(message="Product updated successfully", product=product)


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_auth),
):
    """
    Delete a listing (owner only), its images and any cart/wishlist references.
    """
    service.delete_product(session, storage, current_user, product_id)
    return MessageResponse(message="Product deleted successfully")
