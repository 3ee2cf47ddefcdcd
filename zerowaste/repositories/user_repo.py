# zerowaste/repositories/user_repo.py
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select, col

from zerowaste.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_ids(self, session: Session, user_ids: set[uuid.UUID]) -> dict[uuid.UUID, User]:
        if not user_ids:
            return {}
        stmt = select(User).where(col(User.id).in_(user_ids))
        return {u.id: u for u in session.exec(stmt).all()}

    def count_by_role(self, session: Session, role: str) -> int:
        stmt = select(func.count()).select_from(User).where(User.role == role)
        return session.exec(stmt).one()

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by email (case-insensitive), or None if not found."""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return session.exec(stmt).first()

    def get_by_username(self, session: Session, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        return session.exec(stmt).first()

    def get_by_login(self, session: Session, login: str) -> User | None:
        """Look a user up by username or email."""
        stmt = select(User).where(
            or_(User.username == login, func.lower(User.email) == login.lower())
        )
        return session.exec(stmt).first()

    def get_by_verification_token(self, session: Session, token: str) -> User | None:
        stmt = select(User).where(User.verification_token == token)
        return session.exec(stmt).first()

    def get_by_reset_token(self, session: Session, token: str) -> User | None:
        stmt = select(User).where(User.reset_password_token == token)
        return session.exec(stmt).first()

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
