from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from app.core.db import UnitOfWork, get_uow
from app.core.errors import AppError, InternalError
from app.repositories.cart_repositories import CartItemRepository
from app.repositories.order_repositories import OrderRepository
from app.repositories.product_repositories import ProductRepository
from app.schemas.order_schemas import (
    OrderDetailResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderRecentResponse,
    OrderResponse,
    OrderStatusListResponse,
)
from app.security.security import AuthContext, require_user
from app.services.order_services import OrderDetail, OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])
logger = logging.getLogger(__name__)

ORDERS_ERROR_MSG = "Une erreur est survenue lors de la récupération des commandes"


# ---------- Dependency injection ----------
def get_order_service(uow: UnitOfWork = Depends(get_uow)) -> OrderService:
    """Construit un OrderService avec repos + unit of work de la requête."""
    return OrderService(
        OrderRepository(uow.session),
        uow,
        cart_repository=CartItemRepository(uow.session),
        product_repository=ProductRepository(uow.session),
    )


def _detail_payload(detail: OrderDetail) -> dict:
    return {
        "order": OrderResponse.model_validate(detail.order),
        "order_items": [OrderItemResponse.model_validate(i) for i in detail.items],
        "calculated_total": detail.calculated_total,
        "items_count": len(detail.items),
    }


# ---------- Endpoints ----------
@router.get("", response_model=OrderListResponse)
def list_orders(auth: AuthContext = Depends(require_user), svc: OrderService = Depends(get_order_service)):
    """Commandes de l'utilisateur connecté, nombre et montant total dépensé."""
    try:
        orders, count, total_spent = svc.list_orders(auth.user)
    except AppError:
        raise
    except Exception:
        logger.exception("Error listing orders")
        raise InternalError(ORDERS_ERROR_MSG)
    return OrderListResponse(
        message="Commandes récupérées avec succès",
        orders=[OrderResponse.model_validate(o) for o in orders],
        total_orders=count,
        total_spent=total_spent,
    )


@router.get("/recent", response_model=OrderRecentResponse)
def list_recent_orders(
    auth: AuthContext = Depends(require_user), svc: OrderService = Depends(get_order_service)
):
    try:
        orders = svc.list_recent(auth.user)
    except AppError:
        raise
    except Exception:
        logger.exception("Error listing recent orders")
        raise InternalError("Une erreur est survenue lors de la récupération des commandes récentes")
    return OrderRecentResponse(
        message="Commandes récentes récupérées avec succès",
        orders=[OrderResponse.model_validate(o) for o in orders],
        count=len(orders),
    )


@router.get("/status/{order_status}", response_model=OrderStatusListResponse)
def list_orders_by_status(
    order_status: str,
    auth: AuthContext = Depends(require_user),
    svc: OrderService = Depends(get_order_service),
):
    """Statuts valides : en_attente, payé, expédié, livré, annulé."""
    try:
        orders = svc.list_by_status(auth.user, order_status)
    except AppError:
        raise
    except Exception:
        logger.exception("Error listing orders by status")
        raise InternalError(ORDERS_ERROR_MSG)
    return OrderStatusListResponse(
        message=f"Commandes avec le statut '{order_status}' récupérées avec succès",
        orders=[OrderResponse.model_validate(o) for o in orders],
        status=order_status,
        count=len(orders),
    )


@router.post("/checkout", response_model=OrderDetailResponse, status_code=status.HTTP_201_CREATED)
def checkout(auth: AuthContext = Depends(require_user), svc: OrderService = Depends(get_order_service)):
    """Transforme le panier courant en commande `en_attente`."""
    try:
        detail = svc.checkout(auth.user)
    except AppError:
        raise
    except Exception:
        logger.exception("Error during checkout")
        raise InternalError("Une erreur est survenue lors de la validation de la commande")
    return OrderDetailResponse(message="Commande créée avec succès", **_detail_payload(detail))


@router.get("/{order_id}", response_model=OrderDetailResponse)
def get_order(
    order_id: int,
    auth: AuthContext = Depends(require_user),
    svc: OrderService = Depends(get_order_service),
):
    """Détail d'une commande de l'utilisateur (404 si absente ou appartenant à un autre)."""
    try:
        detail = svc.get_order(auth.user, order_id)
    except AppError:
        raise
    except Exception:
        logger.exception("Error fetching order")
        raise InternalError("Une erreur est survenue lors de la récupération de la commande")
    return OrderDetailResponse(message="Commande récupérée avec succès", **_detail_payload(detail))
