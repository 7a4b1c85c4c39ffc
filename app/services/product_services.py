# app/services/product_services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, List, Optional

from app.core.db import UnitOfWork
from app.core.errors import InvalidArgument, NotFound
from app.core.validation import validate_product
from app.infra.storage.contracts import FileStorage
from app.models.product_models import Product
from app.repositories.product_repositories import ProductRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "description", "price", "stock_quantity", "category")


@dataclass
class ImageUpload:
    stream: BinaryIO
    filename: str


class ProductService:
    """Catalogue : lecture publique, mutations réservées (contrôle fait en amont par authorize)."""

    def __init__(self, repository: ProductRepository, uow: UnitOfWork, storage: FileStorage):
        self.repository = repository
        self.uow = uow
        self.storage = storage

    # ---------- Lecture ----------
    def get_product(self, product_id: int) -> Product:
        product = self.repository.get(product_id)
        if not product:
            logger.debug("produit introuvable", extra={"product_id": product_id})
            raise NotFound("Produit non trouvé")
        return product

    def list_products(
        self,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        order_by: str = "created_at",
        direction: str = "desc",
    ) -> List[Product]:
        return self.repository.list(
            skip=skip, limit=limit, filters=filters, order_by=order_by, direction=direction
        )

    def stats(self, recent: int = 5, top: int = 5) -> dict:
        return {
            "total_products": self.repository.count(),
            "in_stock_products": len(self.repository.find_in_stock()),
            "recent_products": len(self.repository.find_recently_created(recent)),
            "average_price": round(self.repository.average_price(), 2),
            "most_ordered": self.repository.most_ordered(top),
        }

    # ---------- Écriture ----------
    def _store_image(self, image: Optional[ImageUpload]) -> Optional[str]:
        if image is None:
            return None
        try:
            return self.storage.save(image.stream, image.filename)
        except ValueError as e:
            raise InvalidArgument("Erreurs de validation", details=[{"field": "imageFile", "message": str(e)}])

    def create_product(self, data: Dict[str, Any], image: Optional[ImageUpload] = None) -> Product:
        fields = {k: data.get(k) for k in EDITABLE_FIELDS}
        validate_product(fields).unwrap("Erreurs de validation")

        product = Product(**fields)
        product.image_name = self._store_image(image)

        try:
            self.repository.add(product)
            self.uow.commit()
        except Exception:
            self.storage.delete(product.image_name)
            raise

        logger.info("[product.create] produit créé", extra={"product_id": product.id})
        return product

    def update_product(
        self, product_id: int, data: Dict[str, Any], image: Optional[ImageUpload] = None
    ) -> Product:
        """Mise à jour partielle : seuls les champs non None sont appliqués."""
        product = self.get_product(product_id)

        changes = {k: v for k, v in data.items() if k in EDITABLE_FIELDS and v is not None}
        merged = {k: getattr(product, k) for k in EDITABLE_FIELDS}
        merged.update(changes)
        validate_product(merged).unwrap("Erreurs de validation")

        for key, value in changes.items():
            setattr(product, key, value)

        old_image = product.image_name
        new_image = self._store_image(image)
        if new_image:
            product.image_name = new_image

        self.uow.commit()
        self.uow.refresh(product)
        if new_image and old_image:
            self.storage.delete(old_image)

        logger.info(
            "[product.update] produit mis à jour",
            extra={"product_id": product.id, "fields": sorted(changes)},
        )
        return product

    def delete_product(self, product_id: int) -> None:
        """Supprime le produit et, par cascade, les lignes de panier / commande qui le référencent."""
        product = self.get_product(product_id)
        image_name = product.image_name

        self.repository.delete(product)
        self.uow.commit()
        self.storage.delete(image_name)

        logger.info("[product.delete] produit supprimé", extra={"product_id": product_id})
