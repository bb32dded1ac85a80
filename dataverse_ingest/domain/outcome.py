"""Résultat d'une tentative d'ingest (succès ou échec typé)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dataverse_ingest.domain.errors import FailureKind, IngestError


class OrphanPolicy(str, Enum):
    """Sort d'un dataset créé mais incomplet après un échec en aval."""

    LEAVE = "leave"
    DELETE_DRAFT = "delete_draft"


@dataclass(frozen=True)
class IngestFailure:
    """Enveloppe d'échec retournée à l'appelant."""

    kind: FailureKind
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_error(cls, err: IngestError) -> IngestFailure:
        return cls(
            kind=err.kind,
            message=err.message,
            retryable=err.retryable,
            details=dict(err.details),
        )


@dataclass(frozen=True)
class IngestOutcome:
    """Unique valeur renvoyée par `IngestTask.run`.

    `orphan_dataset_id` est renseigné quand un dataset a été créé mais que le pipeline a échoué
    ensuite et que le draft a été laissé en place.
    """

    deposit_id: str
    succeeded: bool
    dataset_id: str | None = None
    failure: IngestFailure | None = None
    orphan_dataset_id: str | None = None

    @classmethod
    def success(cls, deposit_id: str, dataset_id: str) -> IngestOutcome:
        return cls(deposit_id=deposit_id, succeeded=True, dataset_id=dataset_id)

    @classmethod
    def failed(
        cls,
        deposit_id: str,
        err: IngestError,
        dataset_id: str | None = None,
        orphan_dataset_id: str | None = None,
    ) -> IngestOutcome:
        return cls(
            deposit_id=deposit_id,
            succeeded=False,
            dataset_id=dataset_id,
            failure=IngestFailure.from_error(err),
            orphan_dataset_id=orphan_dataset_id,
        )

    @property
    def kind(self) -> FailureKind | None:
        return self.failure.kind if self.failure else None

    def summary(self) -> str:
        """Ligne de résumé lisible (utilisée par la CLI)."""
        if self.succeeded:
            return f"OK {self.deposit_id} -> {self.dataset_id}"
        assert self.failure is not None
        line = f"FAILED {self.deposit_id} [{self.failure.kind.value}] {self.failure.message}"
        if self.orphan_dataset_id:
            line += f" (draft left behind: {self.orphan_dataset_id})"
        return line
