from __future__ import annotations

from typing import BinaryIO, Optional, Protocol


class FileStorage(Protocol):
    def save(self, stream: BinaryIO, filename: str) -> str:
        """
        Contrat minimal pour tout stockage d'images produit.
        Retourne le nom sous lequel le fichier a été enregistré.
        """
        ...

    def delete(self, name: Optional[str]) -> None:
        """
        Supprime un fichier précédemment enregistré (no-op si absent).
        """
        ...
