from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from app.api.auth_routes import get_user_service
from app.core.errors import AppError, InternalError
from app.schemas.user_schemas import AccountCreatedResponse, MessageResponse, UserCredentials, UserProfile
from app.security.security import require_admin
from app.services.user_services import UserService

router = APIRouter(prefix="/api/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.post("", response_model=AccountCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCredentials, svc: UserService = Depends(get_user_service)):
    """Création de compte avec contrôle du format d'email et de la longueur du mot de passe."""
    try:
        user = svc.create_user(body.email, body.password)
    except AppError:
        raise
    except Exception:
        logger.exception("Error creating user")
        raise InternalError("Une erreur est survenue lors de la création de l'utilisateur")
    return AccountCreatedResponse(
        message="Utilisateur créé avec succès", user=UserProfile.model_validate(user.to_dict())
    )


@router.delete("/{user_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_user(user_id: int, svc: UserService = Depends(get_user_service)):
    """Supprime un compte et tout ce qui lui appartient. Réservé aux administrateurs."""
    try:
        logger.info("Deleting user %s", user_id)
        svc.delete_user(user_id)
    except AppError:
        raise
    except Exception:
        logger.exception("Error deleting user")
        raise InternalError("Une erreur est survenue lors de la suppression de l'utilisateur")
    return MessageResponse(message="Utilisateur supprimé avec succès")
