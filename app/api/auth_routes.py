from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from app.core.db import UnitOfWork, get_uow
from app.core.errors import AppError, InternalError
from app.repositories.cart_repositories import CartItemRepository
from app.repositories.order_repositories import OrderRepository
from app.repositories.user_repositories import UserRepository
from app.schemas.user_schemas import (
    ProfileResponse,
    TokenResponse,
    UserCreatedResponse,
    UserCredentials,
    UserProfile,
    UserSummary,
)
from app.security.security import AuthContext, require_user
from app.services.user_services import UserService

router = APIRouter(prefix="/api", tags=["auth"])
logger = logging.getLogger(__name__)


# ---------- Dependency injection ----------
def get_user_service(uow: UnitOfWork = Depends(get_uow)) -> UserService:
    """Construit un UserService sur l'unit of work de la requête."""
    return UserService(
        UserRepository(uow.session),
        uow,
        CartItemRepository(uow.session),
        OrderRepository(uow.session),
    )


@router.post("/register", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
def register(body: UserCredentials, svc: UserService = Depends(get_user_service)):
    """Inscription : email + mot de passe requis, email unique."""
    try:
        user = svc.register(body.email, body.password)
    except AppError:
        raise
    except Exception:
        logger.exception("Error registering user")
        raise InternalError("Une erreur est survenue lors de l'inscription")
    return UserCreatedResponse(
        message="Utilisateur créé avec succès", user=UserSummary.model_validate(user)
    )


@router.post("/login_check", response_model=TokenResponse)
def login(body: UserCredentials, svc: UserService = Depends(get_user_service)):
    """Échange email / mot de passe contre un jeton Bearer."""
    try:
        token = svc.authenticate(body.email, body.password)
    except AppError:
        raise
    except Exception:
        logger.exception("Error authenticating user")
        raise InternalError("Une erreur est survenue lors de l'authentification")
    return TokenResponse(message="Authentification réussie", token=token)


@router.get("/profile", response_model=ProfileResponse)
def profile(auth: AuthContext = Depends(require_user)):
    """Profil de l'utilisateur connecté."""
    return ProfileResponse(
        message="Profil récupéré avec succès",
        user=UserProfile(id=auth.user.id, email=auth.email, roles=auth.roles),
    )
