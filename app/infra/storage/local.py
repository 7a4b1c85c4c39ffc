from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


class LocalFileStorage:
    """Stocke les images produit dans un dossier local (UPLOAD_DIR)."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR)

    def save(self, stream: BinaryIO, filename: str) -> str:
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValueError(f"Extension d'image non supportée: {ext or '(aucune)'}")

        self.base_dir.mkdir(parents=True, exist_ok=True)
        name = f"{Path(filename).stem[:50]}-{uuid.uuid4().hex[:12]}{ext}"
        with (self.base_dir / name).open("wb") as out:
            shutil.copyfileobj(stream, out)

        logger.info("[storage] image enregistrée", extra={"image_name": name})
        return name

    def delete(self, name: Optional[str]) -> None:
        if not name:
            return
        path = self.base_dir / name
        if path.exists():
            path.unlink()
            logger.info("[storage] image supprimée", extra={"image_name": name})
