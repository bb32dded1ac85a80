"""Interface du client de dépôt (Dataverse) consommée par le pipeline d'ingest."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import httpx

from dataverse_ingest.core.http_constants import (
    HTTP_STATUS_SERVER_ERROR_MIN,
    MAX_BODY_EXCERPT,
)


class RepositoryError(RuntimeError):
    """Échec d'un appel au dépôt distant."""

    retryable = True

    def details(self) -> dict:
        return {"error": str(self)}


class RepositoryNetworkError(RepositoryError):
    """Erreur de transport (connexion, timeout)."""


class RepositoryHTTPError(RepositoryError):
    """Réponse non 2xx du dépôt (avec code et extrait du corps)."""

    def __init__(self, status_code: int, body: str = "", message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body[:MAX_BODY_EXCERPT]
        super().__init__(message or f"repository http error: {status_code}")

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code >= HTTP_STATUS_SERVER_ERROR_MIN

    def details(self) -> dict:
        return {"error": str(self), "status_code": self.status_code, "body": self.body}


class RepositoryClient(ABC):
    """Opérations distantes utilisées par l'ingest.

    Chaque méthode retourne la réponse HTTP (2xx) ou lève `RepositoryError`.
    """

    @abstractmethod
    def create_dataset(self, dataset_json: str, dataverse: str = "root") -> httpx.Response:
        """Crée un nouveau dataset dans la collection `dataverse`."""
        ...

    @abstractmethod
    def import_dataset(
        self,
        dataset_json: str,
        pid: str,
        keep_draft: bool = True,
        dataverse: str = "root",
    ) -> httpx.Response:
        """Importe un dataset sous un identifiant persistant existant (`doi:...`)."""
        ...

    @abstractmethod
    def add_file(self, dataset_id: str, file: Path, metadata_json: str) -> httpx.Response:
        """Ajoute un fichier au dataset `dataset_id` avec ses métadonnées JSON."""
        ...

    @abstractmethod
    def publish(self, dataset_id: str, version_type: str = "major") -> httpx.Response:
        """Publie la version draft du dataset."""
        ...

    @abstractmethod
    def delete_draft(self, dataset_id: str) -> httpx.Response:
        """Supprime la version draft du dataset."""
        ...
