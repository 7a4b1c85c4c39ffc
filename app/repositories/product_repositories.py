from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.order_models import OrderItem
from app.models.product_models import Product

SORTABLE_FIELDS = ("name", "price", "created_at", "stock_quantity")


class ProductRepository:
    """Data Access Layer for Product. Lecture seule hormis add/delete."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int, for_update: bool = False) -> Optional[Product]:
        query = self.db.query(Product).filter(Product.id == product_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    def list(
        self,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        order_by: str = "created_at",
        direction: str = "desc",
    ) -> List[Product]:
        """
        Liste filtrée du catalogue.
        Ex: filters={"name": "mac", "category": "laptop", "min_price": 10, "max_stock": 5}
        """
        query = self.db.query(Product)
        filters = filters or {}

        if filters.get("name"):
            query = query.filter(Product.name.ilike(f"%{filters['name']}%"))
        if filters.get("category") is not None:
            query = query.filter(Product.category == filters["category"])
        if filters.get("min_price") is not None:
            query = query.filter(Product.price >= filters["min_price"])
        if filters.get("max_price") is not None:
            query = query.filter(Product.price <= filters["max_price"])
        if filters.get("min_stock") is not None:
            query = query.filter(Product.stock_quantity >= filters["min_stock"])
        if filters.get("max_stock") is not None:
            query = query.filter(Product.stock_quantity <= filters["max_stock"])

        column = getattr(Product, order_by if order_by in SORTABLE_FIELDS else "created_at")
        column = column.asc() if direction == "asc" else column.desc()
        return query.order_by(column, Product.id).offset(skip).limit(limit).all()

    def find_all(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.id).all()

    def find_in_stock(self) -> List[Product]:
        return self.db.query(Product).filter(Product.stock_quantity > 0).all()

    def find_recently_created(self, limit: int = 5) -> List[Product]:
        return (
            self.db.query(Product)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .limit(limit)
            .all()
        )

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Nombre de produits ; `filters` = égalité sur colonnes (comme findBy)."""
        query = self.db.query(func.count(Product.id))
        for key, value in (filters or {}).items():
            if hasattr(Product, key):
                query = query.filter(getattr(Product, key) == value)
        return query.scalar() or 0

    def average_price(self) -> float:
        return float(self.db.query(func.avg(Product.price)).scalar() or 0.0)

    def most_ordered(self, limit: int = 10) -> List[dict]:
        """Produits les plus commandés (somme des quantités des lignes de commande)."""
        total_qty = func.sum(OrderItem.quantity).label("total_quantity")
        rows = (
            self.db.query(Product.id, Product.name, total_qty)
            .join(OrderItem, OrderItem.product_id == Product.id)
            .group_by(Product.id, Product.name)
            .order_by(total_qty.desc(), Product.id)
            .limit(limit)
            .all()
        )
        return [
            {"id": r.id, "name": r.name, "total_quantity": int(r.total_quantity)} for r in rows
        ]

    def add(self, product: Product) -> Product:
        self.db.add(product)
        self.db.flush()
        return product

    def delete(self, product: Product) -> None:
        self.db.delete(product)
        self.db.flush()
