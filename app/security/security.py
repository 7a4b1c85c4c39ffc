from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.db import UnitOfWork, get_uow
from app.core.errors import Forbidden, Unauthenticated
from app.models.user_models import User
from app.repositories.user_repositories import UserRepository

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)

ROLE_ADMIN = "ROLE_ADMIN"
PRODUCT_WRITE = "product:write"
USER_DELETE = "user:delete"


@dataclass
class AuthContext:
    user: User
    email: str
    roles: List[str] = field(default_factory=list)


# ---------- Mots de passe ----------
def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # hash stocké illisible ou mot de passe > 72 octets
        return False


# ---------- Jetons ----------
class _Verifier:
    def __init__(self, secret: str, algorithm: str):
        if not secret or not algorithm:
            raise RuntimeError("JWT_SECRET/JWT_ALGORITHM manquants")
        self.secret = secret
        self.algorithm = algorithm

    def encode(self, claims: dict) -> str:
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        return jwt.decode(
            token,
            self.secret,
            algorithms=[self.algorithm],
            options={"require": ["exp", "sub"]},
        )


_verifier: Optional[_Verifier] = None


def _get_verifier() -> _Verifier:
    global _verifier
    if _verifier is None:
        _verifier = _Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    return _verifier


def create_access_token(user: User) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user.email,
        "uid": user.id,
        "roles": user.get_roles(),
        "iat": now,
        "exp": now + timedelta(seconds=settings.JWT_TTL_SECONDS),
    }
    return _get_verifier().encode(claims)


def decode_access_token(token: str) -> dict:
    return _get_verifier().decode(token)


# ---------- Dépendances FastAPI ----------
def require_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    uow: UnitOfWork = Depends(get_uow),
) -> AuthContext:
    """Bearer JWT -> utilisateur persistant, sinon 401."""
    if creds is None or not creds.credentials:
        raise Unauthenticated("Vous devez être connecté pour accéder à cette ressource")

    try:
        payload = decode_access_token(creds.credentials)
    except jwt.PyJWTError as e:
        logger.warning("JWT invalide: %s", e)
        raise Unauthenticated("Jeton invalide ou expiré")

    user = UserRepository(uow.session).find_by_email(payload["sub"])
    if user is None:
        logger.warning("JWT valide mais utilisateur inconnu", extra={"email": payload["sub"]})
        raise Unauthenticated("Utilisateur introuvable")

    return AuthContext(user=user, email=user.email, roles=user.get_roles())


def authorize(user: User, action: str) -> bool:
    """Vérification de capacité explicite avant toute mutation protégée."""
    roles = set(user.get_roles())
    if ROLE_ADMIN in roles:
        return True
    if action == PRODUCT_WRITE:
        return settings.PRODUCT_WRITE_OPEN or bool(roles & set(settings.PRODUCT_WRITE_ROLES))
    return False


def require_product_write(auth: AuthContext = Depends(require_user)) -> AuthContext:
    if not authorize(auth.user, PRODUCT_WRITE):
        raise Forbidden("Seuls les vendeurs peuvent modifier le catalogue")
    return auth


def require_admin(auth: AuthContext = Depends(require_user)) -> AuthContext:
    if not authorize(auth.user, USER_DELETE):
        raise Forbidden("Action réservée aux administrateurs")
    return auth
