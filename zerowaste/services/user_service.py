# zerowaste/services/user_service.py
from fastapi import HTTPException, status
from sqlmodel import Session

from zerowaste.core.auth import hash_password, verify_password
from zerowaste.core.storage_utils import Storage, delete_quietly, generate_filename
from zerowaste.core.uploads import ImageFile
from zerowaste.models.product import Product
from zerowaste.models.user import User, utcnow
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.repositories.user_repo import UserRepository
from zerowaste.schemas.product import ProductQuery
from zerowaste.schemas.user import ChangePasswordRequest, ProfileUpdate

# Optional text fields that an empty string clears
CLEARABLE_FIELDS = ("full_name", "phone", "address")


class UserService:
    """
    Business logic for the signed-in user's own account.

    Responsibilities:
      - explicit patch of profile fields (username stays unique)
      - password change
      - profile picture replacement in Storage
    """

    def __init__(self, repo: UserRepository, product_repo: ProductRepository):
        self.repo = repo
        self.product_repo = product_repo

    # ----- Self profile -----

    def update_profile(
        self,
        session: Session,
        current_user: User,
        payload: ProfileUpdate,
    ) -> User:
        """
        Write only the keys the client actually sent.

        Raises:
            HTTPException(400): the new username belongs to another account.
        """
        changes = payload.model_dump(exclude_unset=True)

        username = changes.pop("username", None)
        if username is not None and username != current_user.username:
            if self.repo.get_by_username(session, username):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Username already taken",
                )
            current_user.username = username

        for field, value in changes.items():
            if field in CLEARABLE_FIELDS and value == "":
                value = None
            if field == "bio" and value is None:
                value = ""
            setattr(current_user, field, value)

        current_user.updated_at = utcnow()
        return self.repo.update(session, current_user)

    def change_password(
        self,
        session: Session,
        current_user: User,
        payload: ChangePasswordRequest,
    ) -> None:
        if not verify_password(payload.current_password, current_user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect",
            )

        current_user.password_hash = hash_password(payload.new_password)
        current_user.updated_at = utcnow()
        self.repo.update(session, current_user)

    # ----- Profile picture -----

    def update_profile_picture(
        self,
        session: Session,
        storage: Storage,
        current_user: User,
        images: list[ImageFile],
    ) -> User:
        """
        Store the new picture, then drop the previous file (best effort).

        Raises:
            HTTPException(400): no file was sent.
        """
        if not images:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No file uploaded",
            )

        image = images[0]
        old_path = current_user.profile_picture

        current_user.profile_picture = storage.upload(
            generate_filename(image.ext), image.data, image.content_type
        )
        current_user.updated_at = utcnow()
        user = self.repo.update(session, current_user)

        if old_path and old_path != user.profile_picture:
            delete_quietly(storage, old_path)

        return user

    # ----- Own listings -----

    def list_my_products(self, session: Session, current_user: User) -> list[Product]:
        """Every listing of the caller, whatever its status, newest first."""
        query = ProductQuery(seller_id=current_user.id, status=None)
        return self.product_repo.search(session, query)
