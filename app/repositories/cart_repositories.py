from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session, joinedload

from app.models.cart_models import CartItem
from app.models.product_models import Product


class CartItemRepository:
    """Data Access Layer for CartItem."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_user(self, user_id: int, for_update: bool = False) -> List[CartItem]:
        """
        Articles du panier, les plus récents d'abord.
        `for_update` verrouille les lignes ; le produit n'est alors pas chargé par jointure.
        """
        query = self.db.query(CartItem).filter(CartItem.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        else:
            query = query.options(joinedload(CartItem.product))
        return query.order_by(CartItem.created_at.desc(), CartItem.id.desc()).all()

    def find_by_user_and_product(
        self, user_id: int, product_id: int, for_update: bool = False
    ) -> Optional[CartItem]:
        query = self.db.query(CartItem).filter(
            CartItem.user_id == user_id, CartItem.product_id == product_id
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def count_by_user(self, user_id: int) -> int:
        return (
            self.db.query(func.count(CartItem.id)).filter(CartItem.user_id == user_id).scalar()
            or 0
        )

    def get_total_by_user(self, user_id: int) -> float:
        """SUM(quantity * price) sur le panier ; 0.0 si vide."""
        result = (
            self.db.query(func.sum(CartItem.quantity * Product.price))
            .join(Product, CartItem.product_id == Product.id)
            .filter(CartItem.user_id == user_id)
            .scalar()
        )
        return float(result or 0.0)

    def add(self, item: CartItem) -> CartItem:
        self.db.add(item)
        self.db.flush()
        return item

    def increment_quantity(self, item: CartItem, quantity: int) -> CartItem:
        """Incrément atomique côté base (quantity = quantity + :q), pas d'écrasement."""
        self.db.execute(
            update(CartItem)
            .where(CartItem.id == item.id)
            .values(
                quantity=CartItem.quantity + quantity,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        self.db.flush()
        self.db.refresh(item)
        return item

    def remove(self, item: CartItem) -> None:
        self.db.delete(item)
        self.db.flush()

    def clear_by_user(self, user_id: int) -> int:
        """Supprime tout le panier en une requête ; retourne le nombre de lignes supprimées."""
        removed = (
            self.db.query(CartItem)
            .filter(CartItem.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.expire_all()
        return removed
