# app/repositories/user_repo.py
import uuid

from sqlmodel import Session, select

from app.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_many(
        self, session: Session, user_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, User]:
        """Batch lookup keyed by id, used to resolve cart owners."""
        if not user_ids:
            return {}
        stmt = select(User).where(User.id.in_(set(user_ids)))
        return {u.id: u for u in session.exec(stmt).all()}

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
