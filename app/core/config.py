# app/core/config.py (Shop API)

from __future__ import annotations

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _get_list(name: str, default: str) -> list[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


class Settings:
    """
    Configuration unique de l'app (stateless).
    - DB: privilégie DATABASE_URL, sinon compose avec POSTGRES_* ou fallback SQLite.
    - Sécurité: jetons JWT signés par l'API (HS256) + hash bcrypt.
    - Catalogue: rôles autorisés à modifier les produits, dossier des images.
    - Logs: JSON par défaut.
    """

    def __init__(self) -> None:
        # ---------- Métadonnées ----------
        self.ENV = os.getenv("ENV", "dev")
        self.APP_NAME = os.getenv("APP_NAME", "shop-api")
        self.APP_TITLE = os.getenv("APP_TITLE", "Shop API - Click & Ship")
        self.APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
        self.APP_DESCRIPTION = os.getenv(
            "APP_DESCRIPTION", "API e-commerce : comptes, catalogue, panier, commandes"
        )

        # ---------- Base de données ----------
        self.DATABASE_URL = os.getenv("DATABASE_URL") or self._compose_db_url()
        self.DB_ECHO = _get_bool("DB_ECHO", False)

        # ---------- Sécurité ----------
        self.JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_TTL_SECONDS = _get_int("JWT_TTL_SECONDS", 3600)
        self.BCRYPT_ROUNDS = _get_int("BCRYPT_ROUNDS", 12)
        self.PRODUCT_WRITE_OPEN = _get_bool("PRODUCT_WRITE_OPEN", False)
        self.PRODUCT_WRITE_ROLES = _get_list("PRODUCT_WRITE_ROLES", "ROLE_SELLER,ROLE_ADMIN")

        # ---------- Stockage des images ----------
        self.UPLOAD_DIR = os.getenv("UPLOAD_DIR", "public/images/products")

        # ---------- Commandes ----------
        self.RECENT_ORDERS_LIMIT = _get_int("RECENT_ORDERS_LIMIT", 5)

        # ---------- Logging ----------
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_FORMAT = os.getenv("LOG_FORMAT", "json")

        # ---------- CORS ----------
        self.CORS_ALLOW_ORIGINS = _get_list("CORS_ALLOW_ORIGINS", "*")
        self.CORS_ALLOW_CREDENTIALS = _get_bool("CORS_ALLOW_CREDENTIALS", True)
        self.CORS_ALLOW_METHODS = os.getenv("CORS_ALLOW_METHODS", "*")
        self.CORS_ALLOW_HEADERS = os.getenv("CORS_ALLOW_HEADERS", "*")

    # -------- Helpers internes --------
    def _compose_db_url(self) -> str:
        pg_host = os.getenv("POSTGRES_HOST")
        pg_db = os.getenv("POSTGRES_DB")
        pg_user = os.getenv("POSTGRES_USER")
        pg_pwd = os.getenv("POSTGRES_PASSWORD", "")
        pg_port = os.getenv("POSTGRES_PORT", "5432")

        if pg_host and pg_db and pg_user:
            return f"postgresql+psycopg2://{pg_user}:{pg_pwd}@{pg_host}:{pg_port}/{pg_db}"

        sqlite_path = os.getenv("SQLITE_PATH", "data/shop.db")
        path = Path(sqlite_path)
        if path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{path.as_posix()}"


settings = Settings()
