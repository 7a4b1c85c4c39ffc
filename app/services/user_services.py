# app/services/user_services.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from app.core.db import UnitOfWork
from app.core.errors import Conflict, InvalidArgument, NotFound, Unauthenticated
from app.core.validation import validate_account, validate_registration
from app.models.user_models import DEFAULT_ROLE, User
from app.repositories.cart_repositories import CartItemRepository
from app.repositories.order_repositories import OrderRepository
from app.repositories.user_repositories import UserRepository
from app.security.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MSG = "Un utilisateur avec cet email existe déjà"


class UserService:
    """Inscription, authentification et suppression de comptes."""

    def __init__(
        self,
        repository: UserRepository,
        uow: UnitOfWork,
        cart_repository: CartItemRepository,
        order_repository: OrderRepository,
    ):
        self.repository = repository
        self.uow = uow
        self.cart_repository = cart_repository
        self.order_repository = order_repository

    def _persist(self, email: str, password: str) -> User:
        if self.repository.find_by_email(email):
            raise Conflict(DUPLICATE_EMAIL_MSG)

        user = User(email=email, password=hash_password(password), roles=[DEFAULT_ROLE])
        try:
            self.repository.add(user)
            self.uow.commit()
        except IntegrityError:
            self.uow.rollback()
            raise Conflict(DUPLICATE_EMAIL_MSG)

        logger.info("[user.create] compte créé", extra={"user_id": user.id})
        return user

    def register(self, email: str | None, password: str | None) -> User:
        """POST /api/register : présence des champs puis unicité de l'email."""
        result = validate_registration(email, password)
        if not result.ok:
            raise InvalidArgument("Email et mot de passe requis", details=[e.to_dict() for e in result.errors])
        email, password = result.value
        return self._persist(email, password)

    def create_user(self, email: str | None, password: str | None) -> User:
        """POST /api/users : format d'email et longueur du mot de passe contrôlés avant l'unicité."""
        email, password = validate_account(email, password).unwrap()
        return self._persist(email, password)

    def authenticate(self, email: str | None, password: str | None) -> str:
        if not email or not password:
            raise InvalidArgument("Email et mot de passe requis")

        user = self.repository.find_by_email(email.strip())
        if not user or not verify_password(password, user.password):
            logger.info("[auth] identifiants invalides", extra={"email": email})
            raise Unauthenticated("Identifiants invalides")
        return create_access_token(user)

    def delete_user(self, user_id: int) -> None:
        """Suppression explicite : panier, commandes (et leurs lignes), puis le compte."""
        user = self.repository.get(user_id)
        if not user:
            raise NotFound("Utilisateur non trouvé")

        removed_items = self.cart_repository.clear_by_user(user.id)
        orders = self.order_repository.find_by_user(user.id)
        for order in orders:
            self.order_repository.delete(order)
        self.repository.delete(user)
        self.uow.commit()

        logger.info(
            "[user.delete] compte supprimé",
            extra={"user_id": user_id, "cart_items": removed_items, "orders": len(orders)},
        )
