from __future__ import annotations

from datetime import datetime, timezone
from typing import List, TYPE_CHECKING

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base

if TYPE_CHECKING:
    from app.models.cart_models import CartItem
    from app.models.order_models import Order

DEFAULT_ROLE = "ROLE_USER"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # unique, sensible à la casse tel que stocké
    email: Mapped[str] = mapped_column(String(180), unique=True, nullable=False, index=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    roles: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=lambda: [DEFAULT_ROLE])
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)

    cart_items: Mapped[List["CartItem"]] = relationship(
        back_populates="user", cascade="all, delete"
    )
    orders: Mapped[List["Order"]] = relationship(
        back_populates="user", cascade="all, delete"
    )

    def get_roles(self) -> List[str]:
        """Rôles effectifs : ROLE_USER est toujours garanti."""
        roles = list(self.roles or [])
        if DEFAULT_ROLE not in roles:
            roles.append(DEFAULT_ROLE)
        return roles

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "roles": self.get_roles()}
