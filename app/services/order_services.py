# app/services/order_services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from app.core.config import settings
from app.core.db import UnitOfWork
from app.core.errors import Conflict, InsufficientStock, InvalidArgument, NotFound, Unauthenticated
from app.core.validation import validate_order_item, validate_status
from app.models.order_models import Order, OrderItem, OrderStatus
from app.models.user_models import User
from app.repositories.cart_repositories import CartItemRepository
from app.repositories.order_repositories import OrderRepository
from app.repositories.product_repositories import ProductRepository

logger = logging.getLogger(__name__)


@dataclass
class OrderDetail:
    order: Order
    items: List[OrderItem]
    calculated_total: float


def _require(user: Optional[User]) -> User:
    if user is None:
        raise Unauthenticated("Vous devez être connecté pour accéder à vos commandes")
    return user


class OrderService:
    """
    Couche métier pour les commandes.
    - Lecture : toujours restreinte aux commandes de l'utilisateur courant.
    - Checkout : transforme le panier en commande dans une seule unit of work.
    """

    def __init__(
        self,
        repository: OrderRepository,
        uow: UnitOfWork,
        cart_repository: Optional[CartItemRepository] = None,
        product_repository: Optional[ProductRepository] = None,
    ):
        self.repository = repository
        self.uow = uow
        self.cart_repository = cart_repository
        self.product_repository = product_repository

    # ==========================================================
    # === Lecture ==============================================
    # ==========================================================

    def list_orders(self, user: Optional[User]) -> Tuple[List[Order], int, float]:
        user = _require(user)
        orders = self.repository.find_by_user(user.id)
        total_spent = self.repository.get_total_by_user(user.id)
        return orders, len(orders), round(total_spent, 2)

    def get_order(self, user: Optional[User], order_id: int) -> OrderDetail:
        user = _require(user)
        # inexistante ou appartenant à un autre utilisateur : même réponse
        order = self.repository.find_by_user_and_id(user.id, order_id)
        if not order:
            logger.debug("order introuvable", extra={"order_id": order_id, "user_id": user.id})
            raise NotFound("Commande non trouvée ou vous n'avez pas accès à cette commande")

        items = self.repository.find_items(order.id)
        calculated = round(self.repository.get_items_total(order.id), 2)
        if round(order.total or 0.0, 2) != calculated:
            logger.warning(
                "total stocké différent du total recalculé",
                extra={"order_id": order.id, "stored": order.total, "calculated": calculated},
            )
        return OrderDetail(order=order, items=items, calculated_total=calculated)

    def list_by_status(self, user: Optional[User], status: str) -> List[Order]:
        user = _require(user)
        result = validate_status(status)
        if not result.ok:
            raise InvalidArgument(result.errors[0].message)
        return self.repository.find_by_user_and_status(user.id, OrderStatus(status))

    def list_recent(self, user: Optional[User], limit: Optional[int] = None) -> List[Order]:
        user = _require(user)
        limit = settings.RECENT_ORDERS_LIMIT if limit is None else limit
        if limit <= 0:
            raise InvalidArgument("La limite doit être positive")
        return self.repository.find_recent_by_user(user.id, limit)

    # ==========================================================
    # === Checkout =============================================
    # ==========================================================

    def checkout(self, user: Optional[User]) -> OrderDetail:
        """
        Panier -> commande `en_attente` :
        prix unitaires figés, stock décrémenté, total calculé, panier vidé.
        Tout ou rien : la moindre ligne en rupture annule l'opération.
        """
        user = _require(user)
        if self.cart_repository is None or self.product_repository is None:
            raise RuntimeError("checkout requires cart and product repositories")

        # lignes verrouillées : un checkout concurrent attend puis voit un panier vide
        cart_items = self.cart_repository.find_by_user(user.id, for_update=True)
        if not cart_items:
            raise InvalidArgument("Le panier est vide")

        order = Order(user=user, status=OrderStatus.PENDING)
        for cart_item in cart_items:
            product = self.product_repository.get(cart_item.product_id, for_update=True)
            if not product:
                raise NotFound("Produit non trouvé")
            if product.stock_quantity < cart_item.quantity:
                raise InsufficientStock(
                    f"Stock insuffisant pour '{product.name}'. Disponible: {product.stock_quantity}",
                    available=product.stock_quantity,
                )
            validate_order_item(cart_item.quantity, product.price).unwrap()

            order.items.append(
                OrderItem(product=product, quantity=cart_item.quantity, unit_price=product.price)
            )
            product.stock_quantity -= cart_item.quantity

        order.update_total()
        self.repository.add(order)
        removed = self.cart_repository.clear_by_user(user.id)
        if removed != len(cart_items):
            # panier modifié ou déjà commandé par une autre requête
            self.uow.rollback()
            logger.warning(
                "[order.checkout] panier modifié pendant la commande",
                extra={"user_id": user.id, "expected": len(cart_items), "removed": removed},
            )
            raise Conflict("Le panier a été modifié simultanément, veuillez réessayer")
        self.uow.commit()

        logger.info(
            "[order.checkout] commande créée",
            extra={"order_id": order.id, "user_id": user.id, "total": order.total, "lines": removed},
        )
        return OrderDetail(order=order, items=list(order.items), calculated_total=round(order.total, 2))
