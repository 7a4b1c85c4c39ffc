# app/services/cart_services.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from app.core.db import UnitOfWork
from app.core.errors import (
    Conflict,
    InsufficientStock,
    InvalidArgument,
    NotFound,
    Unauthenticated,
)
from app.core.validation import validate_quantity
from app.models.cart_models import CartItem
from app.models.product_models import Product
from app.models.user_models import User
from app.repositories.cart_repositories import CartItemRepository
from app.repositories.product_repositories import ProductRepository

logger = logging.getLogger(__name__)


@dataclass
class CartSnapshot:
    items: List[CartItem] = field(default_factory=list)
    total_items: int = 0
    total_price: float = 0.0


def _require(user: Optional[User], action: str) -> User:
    if user is None:
        raise Unauthenticated(f"Vous devez être connecté pour {action}")
    return user


class CartService:
    """
    Couche métier du panier.
    Une ligne par (user, product) : un ajout sur un produit déjà présent incrémente la quantité.
    Le stock est contrôlé sur la quantité cumulée, jamais sur le seul delta.
    """

    def __init__(
        self,
        cart_repository: CartItemRepository,
        product_repository: ProductRepository,
        uow: UnitOfWork,
    ):
        self.cart_repository = cart_repository
        self.product_repository = product_repository
        self.uow = uow

    # ==========================================================
    # === Lecture ==============================================
    # ==========================================================

    def snapshot(self, user: User) -> CartSnapshot:
        items = self.cart_repository.find_by_user(user.id)
        total = self.cart_repository.get_total_by_user(user.id)
        return CartSnapshot(items=items, total_items=len(items), total_price=round(total, 2))

    def get_cart(self, user: Optional[User]) -> CartSnapshot:
        user = _require(user, "accéder au panier")
        return self.snapshot(user)

    # ==========================================================
    # === Écriture =============================================
    # ==========================================================

    def add_to_cart(
        self, user: Optional[User], product_id: int, quantity: int
    ) -> Tuple[CartSnapshot, Product, int]:
        user = _require(user, "ajouter au panier")

        if quantity is None or quantity <= 0:
            raise InvalidArgument("La quantité doit être positive")

        product = self.product_repository.get(product_id, for_update=True)
        if not product:
            logger.debug("produit introuvable", extra={"product_id": product_id})
            raise NotFound("Produit non trouvé")

        if product.stock_quantity < quantity:
            raise InsufficientStock(
                f"Stock insuffisant. Disponible: {product.stock_quantity}",
                available=product.stock_quantity,
            )

        existing = self.cart_repository.find_by_user_and_product(
            user.id, product.id, for_update=True
        )

        if existing:
            new_quantity = existing.quantity + quantity
            if product.stock_quantity < new_quantity:
                raise InsufficientStock(
                    "Stock insuffisant pour cette quantité totale. "
                    f"Disponible: {product.stock_quantity}",
                    available=product.stock_quantity,
                )
            validate_quantity(new_quantity).unwrap()

            self.cart_repository.increment_quantity(existing, quantity)
            logger.info(
                "[cart.add] quantité incrémentée",
                extra={"user_id": user.id, "product_id": product.id, "quantity": new_quantity},
            )
        else:
            validate_quantity(quantity).unwrap()
            try:
                self.cart_repository.add(CartItem(user=user, product=product, quantity=quantity))
            except IntegrityError:
                # insertion concurrente sur le même (user, product)
                self.uow.rollback()
                logger.warning(
                    "[cart.add] conflit d'insertion",
                    extra={"user_id": user.id, "product_id": product.id},
                )
                raise Conflict("Le panier a été modifié simultanément, veuillez réessayer")
            logger.info(
                "[cart.add] nouvel article",
                extra={"user_id": user.id, "product_id": product.id, "quantity": quantity},
            )

        self.uow.commit()
        return self.snapshot(user), product, quantity

    def remove_from_cart(self, user: Optional[User], product_id: int) -> Tuple[CartSnapshot, Product]:
        user = _require(user, "modifier le panier")

        product = self.product_repository.get(product_id)
        if not product:
            raise NotFound("Produit non trouvé")

        item = self.cart_repository.find_by_user_and_product(user.id, product.id)
        if not item:
            raise NotFound("Ce produit n'est pas dans votre panier")

        self.cart_repository.remove(item)
        self.uow.commit()

        logger.info("[cart.remove] article retiré", extra={"user_id": user.id, "product_id": product.id})
        return self.snapshot(user), product

    def clear_cart(self, user: Optional[User]) -> int:
        """Vide le panier ; idempotent (0 si déjà vide)."""
        user = _require(user, "vider le panier")

        removed = self.cart_repository.clear_by_user(user.id)
        self.uow.commit()

        logger.info("[cart.clear] panier vidé", extra={"user_id": user.id, "removed": removed})
        return removed
