from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.models.user_models import User


class UserRepository:
    """Data Access Layer for User."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def find_by_email(self, email: str) -> Optional[User]:
        """Recherche exacte (sensible à la casse)."""
        return self.db.query(User).filter(User.email == email).first()

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.flush()
