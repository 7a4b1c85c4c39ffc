from __future__ import annotations

import logging
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from app.core.config import settings

logger = logging.getLogger(__name__)

_connect_args = (
    {"check_same_thread": False} if str(settings.DATABASE_URL).startswith("sqlite") else {}
)

# --- Engine SQLAlchemy ---
engine = create_engine(
    str(settings.DATABASE_URL),
    future=True,
    pool_pre_ping=True,
    echo=getattr(settings, "DB_ECHO", False),
    connect_args=_connect_args,
)

# --- Session factory ---
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)

# --- Base déclarative ---
Base = declarative_base()


def init_db() -> None:
    """
    Enregistre tous les modèles et crée les tables manquantes.
    IMPORTANT: il faut importer les modèles avant d’appeler create_all().
    """
    from app.models import cart_models, order_models, product_models, user_models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("[shop-api] DB init: tables ensured")


class UnitOfWork:
    """
    Périmètre transactionnel d'une requête.
    Les services écrivent via leurs repositories puis appellent `commit()` une seule fois ;
    toute exception remonte après `rollback()`.
    """

    def __init__(self, session: Session):
        self.session = session

    def flush(self) -> None:
        self.session.flush()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def refresh(self, obj) -> None:
        self.session.refresh(obj)

    def close(self) -> None:
        self.session.close()


def get_uow() -> Iterator[UnitOfWork]:
    """Fournit une unit of work par requête HTTP (rollback si exception)."""
    uow = UnitOfWork(SessionLocal())
    try:
        yield uow
    except Exception:
        uow.rollback()
        logger.debug("[shop-api] unit of work rolled back")
        raise
    finally:
        uow.close()
