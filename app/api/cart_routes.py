from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.core.db import UnitOfWork, get_uow
from app.core.errors import AppError, InternalError
from app.repositories.cart_repositories import CartItemRepository
from app.repositories.product_repositories import ProductRepository
from app.schemas.cart_schemas import (
    CartAddRequest,
    CartAddResponse,
    CartClearResponse,
    CartItemResponse,
    CartRemoveRequest,
    CartRemoveResponse,
    CartResponse,
    ProductRef,
)
from app.security.security import AuthContext, require_user
from app.services.cart_services import CartService, CartSnapshot

router = APIRouter(prefix="/api/cart", tags=["cart"])
logger = logging.getLogger(__name__)


# ---------- Dependency injection ----------
def get_cart_service(uow: UnitOfWork = Depends(get_uow)) -> CartService:
    """Construit un CartService avec repos + unit of work de la requête."""
    return CartService(CartItemRepository(uow.session), ProductRepository(uow.session), uow)


def _cart_payload(snapshot: CartSnapshot) -> dict:
    return {
        "cart_items": [CartItemResponse.model_validate(i) for i in snapshot.items],
        "total_items": snapshot.total_items,
        "total_price": snapshot.total_price,
    }


# ---------- Endpoints ----------
@router.get("", response_model=CartResponse)
def get_cart(auth: AuthContext = Depends(require_user), svc: CartService = Depends(get_cart_service)):
    """Panier de l'utilisateur connecté (plus récents d'abord) avec total."""
    try:
        snapshot = svc.get_cart(auth.user)
    except AppError:
        raise
    except Exception:
        logger.exception("Error fetching cart")
        raise InternalError("Une erreur est survenue lors de la récupération du panier")
    return CartResponse(message="Panier récupéré avec succès", **_cart_payload(snapshot))


@router.post("/add", response_model=CartAddResponse)
def add_to_cart(
    body: CartAddRequest,
    auth: AuthContext = Depends(require_user),
    svc: CartService = Depends(get_cart_service),
):
    """Ajoute `quantity` du produit ; incrémente la ligne existante le cas échéant."""
    try:
        snapshot, product, quantity = svc.add_to_cart(auth.user, body.product_id, body.quantity)
    except AppError:
        raise
    except Exception:
        logger.exception("Error adding to cart")
        raise InternalError("Une erreur est survenue lors de l'ajout au panier")
    return CartAddResponse(
        message="Produit ajouté au panier avec succès",
        added_product=ProductRef(id=product.id, name=product.name, quantity=quantity),
        **_cart_payload(snapshot),
    )


@router.post("/remove", response_model=CartRemoveResponse)
def remove_from_cart(
    body: CartRemoveRequest,
    auth: AuthContext = Depends(require_user),
    svc: CartService = Depends(get_cart_service),
):
    try:
        snapshot, product = svc.remove_from_cart(auth.user, body.product_id)
    except AppError:
        raise
    except Exception:
        logger.exception("Error removing from cart")
        raise InternalError("Une erreur est survenue lors de la suppression du panier")
    return CartRemoveResponse(
        message="Produit retiré du panier avec succès",
        removed_product=ProductRef(id=product.id, name=product.name),
        **_cart_payload(snapshot),
    )


@router.post("/clear", response_model=CartClearResponse)
def clear_cart(auth: AuthContext = Depends(require_user), svc: CartService = Depends(get_cart_service)):
    try:
        removed = svc.clear_cart(auth.user)
    except AppError:
        raise
    except Exception:
        logger.exception("Error clearing cart")
        raise InternalError("Une erreur est survenue lors du vidage du panier")
    return CartClearResponse(
        message="Panier vidé avec succès",
        cart_items=[],
        total_items=0,
        total_price=0,
        removed_items=removed,
    )
