# shopapi/repositories/user_repo.py
from sqlmodel import Session, select

from shopapi.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (lookups + provisioning)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        return session.exec(stmt).first()

    def save(self, session: Session, user: User) -> User:
        """Insert or update a User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
