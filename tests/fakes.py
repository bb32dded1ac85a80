"""
Fakes pour les tests unitaires du pipeline d'ingest.

Ce module fournit des implémentations factices du validateur de bags et du client Dataverse qui
enregistrent leurs appels dans un journal partagé, pour vérifier l'ordre exact des étapes.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx

from dataverse_ingest.domain.types import ValidationVerdict
from dataverse_ingest.infra.dataverse.base import RepositoryClient, RepositoryHTTPError
from dataverse_ingest.infra.validator.base import BagValidator, ValidatorError

DATASET_PID = "doi:10.5072/FK2/ABCDEF"


class FakeValidator(BagValidator):
    """Validateur factice: renvoie le verdict configuré ou lève `error`."""

    def __init__(
        self,
        calls: list[tuple[Any, ...]],
        verdict: ValidationVerdict | None = None,
        error: Exception | None = None,
    ) -> None:
        self.calls = calls
        self.verdict = verdict or ValidationVerdict(compliant=True, profile_version="1.0.0")
        self.error = error

    def validate(self, bag_dir: Path) -> ValidationVerdict:
        self.calls.append(("validate", bag_dir))
        if self.error:
            raise self.error
        return self.verdict


def created_response(pid: str = DATASET_PID) -> httpx.Response:
    return httpx.Response(201, json={"status": "OK", "data": {"id": 42, "persistentId": pid}})


class FakeRepository(RepositoryClient):
    """Client Dataverse factice.

    Args:
        calls: journal partagé des appels.
        submit_response: réponse de create/import.
        submit_error / publish_error / delete_error: exceptions à lever.
        failing_files: noms de fichiers dont l'ajout échoue (HTTP 400).
    """

    def __init__(
        self,
        calls: list[tuple[Any, ...]],
        submit_response: httpx.Response | None = None,
        submit_error: Exception | None = None,
        failing_files: set[str] | None = None,
        publish_error: Exception | None = None,
        delete_error: Exception | None = None,
    ) -> None:
        self.calls = calls
        self.submit_response = submit_response or created_response()
        self.submit_error = submit_error
        self.failing_files = failing_files or set()
        self.publish_error = publish_error
        self.delete_error = delete_error

    def create_dataset(self, dataset_json: str, dataverse: str = "root") -> httpx.Response:
        self.calls.append(("create_dataset", json.loads(dataset_json), dataverse))
        if self.submit_error:
            raise self.submit_error
        return self.submit_response

    def import_dataset(
        self,
        dataset_json: str,
        pid: str,
        keep_draft: bool = True,
        dataverse: str = "root",
    ) -> httpx.Response:
        self.calls.append(("import_dataset", pid, keep_draft, dataverse))
        if self.submit_error:
            raise self.submit_error
        return self.submit_response

    def add_file(self, dataset_id: str, file: Path, metadata_json: str) -> httpx.Response:
        metadata = json.loads(metadata_json)
        self.calls.append(("add_file", dataset_id, file.name, metadata["restrict"]))
        if file.name in self.failing_files:
            raise RepositoryHTTPError(400, '{"status":"ERROR"}')
        return httpx.Response(200, json={"status": "OK"})

    def publish(self, dataset_id: str, version_type: str = "major") -> httpx.Response:
        self.calls.append(("publish", dataset_id, version_type))
        if self.publish_error:
            raise self.publish_error
        return httpx.Response(200, json={"status": "OK"})

    def delete_draft(self, dataset_id: str) -> httpx.Response:
        self.calls.append(("delete_draft", dataset_id))
        if self.delete_error:
            raise self.delete_error
        return httpx.Response(200, json={"status": "OK"})

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]


def validator_down() -> ValidatorError:
    return ValidatorError("validator unreachable: connection refused")
