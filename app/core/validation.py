from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from app.core.errors import InvalidArgument

T = TypeVar("T")

PRICE_MAX = 999999.99
STOCK_MAX = 999999
QUANTITY_MIN = 1
QUANTITY_MAX = 999
NAME_MIN = 2
NAME_MAX = 255
PASSWORD_MIN = 6
# bcrypt ignore tout au-delà de 72 octets
PASSWORD_MAX_BYTES = 72

ORDER_STATUSES = ("en_attente", "payé", "expédié", "livré", "annulé")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class Result(Generic[T]):
    """Valeur validée ou liste d'erreurs par champ."""

    value: Optional[T] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self, message: str = "Données invalides") -> T:
        """Retourne la valeur ou lève InvalidArgument avec le détail des champs."""
        if self.errors:
            raise InvalidArgument(message, details=[e.to_dict() for e in self.errors])
        return self.value  # type: ignore[return-value]


def _check_quantity(quantity, field_name: str, errors: List[FieldError]) -> None:
    if quantity is None:
        errors.append(FieldError(field_name, "La quantité est obligatoire"))
    elif quantity < QUANTITY_MIN:
        errors.append(FieldError(field_name, "La quantité doit être positive"))
    elif quantity > QUANTITY_MAX:
        errors.append(
            FieldError(field_name, f"La quantité doit être entre {QUANTITY_MIN} et {QUANTITY_MAX}")
        )


def validate_quantity(quantity: Optional[int], field_name: str = "quantity") -> Result[int]:
    errors: List[FieldError] = []
    _check_quantity(quantity, field_name, errors)
    return Result(value=quantity, errors=errors)


def validate_product(data: dict) -> Result[dict]:
    """
    Contrôle l'état complet d'un produit (création ou après mise à jour partielle).
    `data` contient au minimum name, price, stock_quantity.
    """
    errors: List[FieldError] = []

    name = data.get("name")
    if name is None or not str(name).strip():
        errors.append(FieldError("name", "Le nom du produit est obligatoire"))
    elif not NAME_MIN <= len(name) <= NAME_MAX:
        errors.append(
            FieldError("name", f"Le nom doit contenir entre {NAME_MIN} et {NAME_MAX} caractères")
        )

    price = data.get("price")
    if price is None:
        errors.append(FieldError("price", "Le prix est obligatoire"))
    elif price <= 0:
        errors.append(FieldError("price", "Le prix doit être positif"))
    elif price > PRICE_MAX:
        errors.append(FieldError("price", f"Le prix doit être entre 0 et {PRICE_MAX}"))

    stock = data.get("stock_quantity")
    if stock is None:
        errors.append(FieldError("stock_quantity", "La quantité en stock est obligatoire"))
    elif stock < 0:
        errors.append(
            FieldError("stock_quantity", "La quantité en stock doit être positive ou nulle")
        )
    elif stock > STOCK_MAX:
        errors.append(
            FieldError("stock_quantity", f"La quantité doit être entre 0 et {STOCK_MAX}")
        )

    category = data.get("category")
    if category is not None and len(category) > NAME_MAX:
        errors.append(FieldError("category", f"La catégorie ne peut pas dépasser {NAME_MAX} caractères"))

    return Result(value=data, errors=errors)


def validate_order_item(quantity: Optional[int], unit_price: Optional[float]) -> Result[tuple]:
    errors: List[FieldError] = []
    _check_quantity(quantity, "quantity", errors)
    if unit_price is None or unit_price <= 0:
        errors.append(FieldError("unit_price", "Le prix unitaire doit être positif"))
    return Result(value=(quantity, unit_price), errors=errors)


def validate_status(status: str) -> Result[str]:
    if status not in ORDER_STATUSES:
        return Result(
            errors=[
                FieldError(
                    "status",
                    "Statut invalide. Statuts valides: " + ", ".join(ORDER_STATUSES),
                )
            ]
        )
    return Result(value=status)


def validate_registration(email: Optional[str], password: Optional[str]) -> Result[tuple]:
    """Variante /api/register : présence des champs uniquement."""
    email = email.strip() if email else email
    errors: List[FieldError] = []
    if not email:
        errors.append(FieldError("email", "L'email est obligatoire"))
    if not password:
        errors.append(FieldError("password", "Le mot de passe est obligatoire"))
    elif len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        errors.append(FieldError("password", "Le mot de passe est trop long"))
    return Result(value=(email, password), errors=errors)


def validate_account(email: Optional[str], password: Optional[str]) -> Result[tuple]:
    """Variante /api/users : présence, format d'email et longueur du mot de passe."""
    result = validate_registration(email, password)
    if not result.ok:
        return result

    email, password = result.value
    errors: List[FieldError] = []
    if not _EMAIL_RE.match(email):
        errors.append(FieldError("email", "Format d'email invalide"))
    if len(password) < PASSWORD_MIN:
        errors.append(
            FieldError("password", f"Le mot de passe doit contenir au moins {PASSWORD_MIN} caractères")
        )
    return Result(value=(email, password), errors=errors)
