from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from app.core.db import UnitOfWork, get_uow
from app.core.errors import AppError, InternalError
from app.infra.storage.local import LocalFileStorage
from app.repositories.product_repositories import ProductRepository
from app.schemas.product_schemas import (
    ProductEnvelope,
    ProductListResponse,
    ProductResponse,
    ProductStatsResponse,
)
from app.schemas.user_schemas import MessageResponse
from app.security.security import require_product_write
from app.services.product_services import ImageUpload, ProductService

router = APIRouter(prefix="/api/products", tags=["products"])
logger = logging.getLogger(__name__)


# ---------- Dependency injection ----------
def get_storage() -> LocalFileStorage:
    return LocalFileStorage()


def get_product_service(
    uow: UnitOfWork = Depends(get_uow), storage: LocalFileStorage = Depends(get_storage)
) -> ProductService:
    """Construit un ProductService avec repo + unit of work + stockage d'images."""
    return ProductService(ProductRepository(uow.session), uow, storage)


def _image(upload: Optional[UploadFile]) -> Optional[ImageUpload]:
    if upload is None or not upload.filename:
        return None
    return ImageUpload(stream=upload.file, filename=upload.filename)


# ---------- Lecture (publique) ----------
@router.get("", response_model=ProductListResponse)
def list_products(
    name: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    min_stock: Optional[int] = None,
    max_stock: Optional[int] = None,
    order_by: Literal["name", "price", "created_at", "stock_quantity"] = "created_at",
    direction: Literal["asc", "desc"] = "desc",
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    svc: ProductService = Depends(get_product_service),
):
    """Catalogue filtrable (nom partiel, catégorie exacte, plages de prix / stock)."""
    filters = {
        "name": name,
        "category": category,
        "min_price": min_price,
        "max_price": max_price,
        "min_stock": min_stock,
        "max_stock": max_stock,
    }
    try:
        products = svc.list_products(
            skip=skip, limit=limit, filters=filters, order_by=order_by, direction=direction
        )
    except AppError:
        raise
    except Exception:
        logger.exception("Error listing products")
        raise InternalError("Une erreur est survenue lors de la récupération des produits")
    return ProductListResponse(
        message="Produits récupérés avec succès",
        products=[ProductResponse.from_product(p) for p in products],
        count=len(products),
    )


@router.get("/stats", response_model=ProductStatsResponse)
def product_stats(svc: ProductService = Depends(get_product_service)):
    try:
        stats = svc.stats()
    except AppError:
        raise
    except Exception:
        logger.exception("Error computing product stats")
        raise InternalError("Une erreur est survenue lors du calcul des statistiques")
    return ProductStatsResponse(message="Statistiques des produits", **stats)


@router.get("/{product_id}", response_model=ProductEnvelope)
def get_product(product_id: int, svc: ProductService = Depends(get_product_service)):
    try:
        product = svc.get_product(product_id)
    except AppError:
        raise
    except Exception:
        logger.exception("Error fetching product")
        raise InternalError("Une erreur est survenue lors de la récupération du produit")
    return ProductEnvelope(message="Produit récupéré avec succès", product=ProductResponse.from_product(product))


# ---------- Écriture (vendeurs) ----------
@router.post(
    "",
    response_model=ProductEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_product_write)],
)
def create_product(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    stock_quantity: Optional[int] = Form(None, alias="stockQuantity"),
    category: Optional[str] = Form(None),
    image_file: Optional[UploadFile] = File(None, alias="imageFile"),
    svc: ProductService = Depends(get_product_service),
):
    """Création (multipart) : name, price et stockQuantity obligatoires, image optionnelle."""
    data = {
        "name": name,
        "description": description,
        "price": price,
        "stock_quantity": stock_quantity,
        "category": category,
    }
    try:
        product = svc.create_product(data, _image(image_file))
    except AppError:
        raise
    except Exception:
        logger.exception("Error creating product")
        raise InternalError("Erreur lors de la création du produit")
    return ProductEnvelope(message="Produit créé avec succès", product=ProductResponse.from_product(product))


@router.put("/{product_id}", response_model=ProductEnvelope, dependencies=[Depends(require_product_write)])
def update_product(
    product_id: int,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    stock_quantity: Optional[int] = Form(None, alias="stockQuantity"),
    category: Optional[str] = Form(None),
    image_file: Optional[UploadFile] = File(None, alias="imageFile"),
    svc: ProductService = Depends(get_product_service),
):
    """Mise à jour partielle : seuls les champs fournis sont modifiés."""
    data = {
        "name": name,
        "description": description,
        "price": price,
        "stock_quantity": stock_quantity,
        "category": category,
    }
    try:
        product = svc.update_product(product_id, data, _image(image_file))
    except AppError:
        raise
    except Exception:
        logger.exception("Error updating product")
        raise InternalError("Erreur lors de la mise à jour du produit")
    return ProductEnvelope(
        message="Produit mis à jour avec succès", product=ProductResponse.from_product(product)
    )


@router.delete("/{product_id}", response_model=MessageResponse, dependencies=[Depends(require_product_write)])
def delete_product(product_id: int, svc: ProductService = Depends(get_product_service)):
    try:
        logger.info("Deleting product %s", product_id)
        svc.delete_product(product_id)
    except AppError:
        raise
    except Exception:
        logger.exception("Error deleting product")
        raise InternalError("Erreur lors de la suppression du produit")
    return MessageResponse(message="Produit supprimé avec succès")
