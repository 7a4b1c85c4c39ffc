from __future__ import annotations

from typing import Any, List, Optional


class AppError(Exception):
    """Erreur métier attendue, rendue en JSON `{"error": ..., "details": [...]}`."""

    status_code = 500

    def __init__(self, message: str, details: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body: dict = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidArgument(AppError):
    status_code = 400


class InsufficientStock(AppError):
    status_code = 400

    def __init__(self, message: str, available: int):
        super().__init__(message)
        self.available = available


class Unauthenticated(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class Conflict(AppError):
    status_code = 409


class InternalError(AppError):
    status_code = 500
