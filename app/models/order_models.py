from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List

from sqlalchemy import DateTime, Float, ForeignKey, Integer, Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base
from app.models.product_models import Product
from app.models.user_models import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, Enum):
    PENDING = "en_attente"
    PAID = "payé"
    SHIPPED = "expédié"
    DELIVERED = "livré"
    CANCELLED = "annulé"


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    total: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    status: Mapped[OrderStatus] = mapped_column(
        SqlEnum(
            OrderStatus,
            name="order_status",
            native_enum=False,
            length=50,
            values_callable=lambda e: [m.value for m in e],
        ),
        default=OrderStatus.PENDING,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)

    user: Mapped[User] = relationship(back_populates="orders")
    items: Mapped[List["OrderItem"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )

    def calculate_total(self) -> float:
        """Somme des sous-totaux (prix unitaire figé x quantité)."""
        return sum(item.unit_price * item.quantity for item in self.items)

    def update_total(self) -> "Order":
        self.total = self.calculate_total()
        return self


class OrderItem(Base):
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    # copie du prix produit au moment de la commande
    unit_price: Mapped[float] = mapped_column(Float, nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")
    product: Mapped[Product] = relationship(back_populates="order_items")

    @property
    def total_price(self) -> float:
        return self.unit_price * self.quantity
