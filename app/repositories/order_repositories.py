from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.order_models import Order, OrderItem, OrderStatus


class OrderRepository:
    """Data Access Layer for Order and OrderItem models."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, order_id: int) -> Optional[Order]:
        """Get an order by its ID."""
        return self.db.query(Order).filter(Order.id == order_id).first()

    def find_by_user(self, user_id: int, limit: Optional[int] = None) -> List[Order]:
        """Commandes d'un utilisateur, les plus récentes d'abord."""
        query = (
            self.db.query(Order)
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def find_by_user_and_id(self, user_id: int, order_id: int) -> Optional[Order]:
        """None si la commande n'existe pas OU appartient à un autre utilisateur."""
        return (
            self.db.query(Order)
            .filter(Order.user_id == user_id, Order.id == order_id)
            .first()
        )

    def find_by_user_and_status(self, user_id: int, status: OrderStatus) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.user_id == user_id, Order.status == status)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def find_recent_by_user(self, user_id: int, limit: int = 10) -> List[Order]:
        return self.find_by_user(user_id, limit=limit)

    def count_by_user(self, user_id: int) -> int:
        return self.db.query(func.count(Order.id)).filter(Order.user_id == user_id).scalar() or 0

    def get_total_by_user(self, user_id: int) -> float:
        result = self.db.query(func.sum(Order.total)).filter(Order.user_id == user_id).scalar()
        return float(result or 0.0)

    # ---------- OrderItem ----------
    def find_items(self, order_id: int) -> List[OrderItem]:
        return (
            self.db.query(OrderItem)
            .filter(OrderItem.order_id == order_id)
            .order_by(OrderItem.id.asc())
            .all()
        )

    def count_items(self, order_id: int) -> int:
        return (
            self.db.query(func.count(OrderItem.id)).filter(OrderItem.order_id == order_id).scalar()
            or 0
        )

    def get_items_total(self, order_id: int) -> float:
        """Total recalculé à partir des lignes (unit_price * quantity)."""
        result = (
            self.db.query(func.sum(OrderItem.unit_price * OrderItem.quantity))
            .filter(OrderItem.order_id == order_id)
            .scalar()
        )
        return float(result or 0.0)

    def add(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()
        return order

    def delete(self, order: Order) -> None:
        self.db.delete(order)
        self.db.flush()
