# zerowaste/create_admin.py
import argparse
import getpass

from sqlmodel import Session

from zerowaste.core.config import get_settings
from zerowaste.database import create_db_and_tables, engine
from zerowaste.repositories.cart_repo import CartRepository
from zerowaste.repositories.product_repo import ProductRepository
from zerowaste.repositories.user_repo import UserRepository
from zerowaste.repositories.wishlist_repo import WishlistRepository
from zerowaste.services.admin_service import AdminService
from zerowaste.services.presenters import Presenter
from zerowaste.services.product_service import ProductService


def build_service() -> AdminService:
    settings = get_settings()
    user_repo = UserRepository()
    product_repo = ProductRepository()
    product_service = ProductService(
        product_repo,
        user_repo,
        CartRepository(),
        WishlistRepository(),
        Presenter(product_repo, settings.BASE_URL),
    )
    return AdminService(user_repo, product_repo, product_service, settings)


def main():
    parser = argparse.ArgumentParser(
        description="Create a ZeroWaste Market admin, or promote an existing account"
    )
    parser.add_argument("username")
    parser.add_argument("--email", help="Required when the account does not exist yet")
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Admin password: ")
    if len(password) < 6:
        parser.error("password must be at least 6 characters")

    service = build_service()
    create_db_and_tables()
    with Session(engine) as session:
        existing = service.user_repo.get_by_username(session, args.username)
        if existing is None and not args.email:
            parser.error("--email is required for a new account")
        admin = service.create_admin(
            session,
            args.username,
            args.email or existing.email,
            password,
        )

    print(f"Admin '{admin.username}' is ready (id {admin.id}).")


if __name__ == "__main__":
    main()
