"""Taxonomie des échecs du pipeline d'ingest.

Chaque étape du pipeline lève une sous-classe de `IngestError` portant un `FailureKind`, un
message lisible et des détails de diagnostic. `IngestTask.run` est l'unique frontière qui les
convertit en `IngestOutcome`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    """Catégories d'échec exposées à l'appelant."""

    REJECTED_DEPOSIT = "rejected_deposit"
    VALIDATION_INFRASTRUCTURE = "validation_infrastructure"
    MAPPING = "mapping"
    FILE_MAPPING = "file_mapping"
    SUBMISSION = "submission"
    FILE_UPLOAD = "file_upload"
    PUBLISH = "publish"


class IngestError(Exception):
    """Erreur attendue d'une étape du pipeline."""

    kind: FailureKind
    retryable: bool = False

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        retryable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if retryable is not None:
            self.retryable = retryable


class RejectedDeposit(IngestError):
    """Le validateur a jugé le bag non conforme au profil."""

    kind = FailureKind.REJECTED_DEPOSIT


class ValidationInfrastructureFailure(IngestError):
    """L'appel au validateur lui-même a échoué (réseau, réponse illisible)."""

    kind = FailureKind.VALIDATION_INFRASTRUCTURE
    retryable = True


class MappingFailure(IngestError):
    """Métadonnées DDM illisibles, incomplètes ou hors vocabulaire."""

    kind = FailureKind.MAPPING


class FileMappingFailure(IngestError):
    """Manifeste `files.xml` illisible ou incomplet."""

    kind = FailureKind.FILE_MAPPING


class SubmissionFailure(IngestError):
    """Création/import du dataset échoué, ou identifiant introuvable dans la réponse."""

    kind = FailureKind.SUBMISSION


class FileUploadFailure(IngestError):
    """Au moins un fichier n'a pas pu être ajouté au dataset."""

    kind = FailureKind.FILE_UPLOAD
    retryable = True

    def __init__(self, failed: list[dict[str, str]]) -> None:
        names = ", ".join(f["file"] for f in failed)
        super().__init__(
            f"{len(failed)} file(s) could not be added to the dataset: {names}",
            details={"failed_files": failed},
        )
        self.failed = failed


class PublishFailure(IngestError):
    """La publication a échoué; le dataset reste en draft avec ses fichiers."""

    kind = FailureKind.PUBLISH
    retryable = True


class DepositLoadError(Exception):
    """Répertoire de dépôt absent, incomplet ou document XML illisible."""
