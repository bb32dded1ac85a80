# ============================================================
# Module : dataverse_ingest/domain/ingest_task.py
# Objet  : Orchestrateur d'ingest d'un dépôt dans Dataverse.
# Contexte : validate -> map -> create/import -> upload -> publish | draft.
# Invariants :
#  - Aucune étape après la validation si le verdict est non conforme.
#  - Aucun ajout de fichier ni publication sans identifiant de dataset.
#  - Les échecs attendus ne sortent jamais de `run()`: un seul IngestOutcome typé.
# ============================================================
"""Vérifie un dépôt puis l'ingère dans Dataverse."""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from pathlib import Path

import httpx
import structlog

from dataverse_ingest.app.metrics import (
    FILES_UPLOADED_TOTAL,
    INGEST_RUNS_TOTAL,
    INGEST_STAGE_FAILURES_TOTAL,
    INGEST_STAGE_LATENCY,
    ORPHAN_DATASETS_TOTAL,
)
from dataverse_ingest.domain import access_rights
from dataverse_ingest.domain.deposit import Deposit
from dataverse_ingest.domain.errors import (
    DepositLoadError,
    FileMappingFailure,
    FileUploadFailure,
    IngestError,
    MappingFailure,
    PublishFailure,
    RejectedDeposit,
    SubmissionFailure,
    ValidationInfrastructureFailure,
)
from dataverse_ingest.domain.mappers.base import FilesMapper, MetadataMapper
from dataverse_ingest.domain.mappers.files_mapper import FilesXmlMapper
from dataverse_ingest.domain.mappers.metadata_mapper import DdmMapper
from dataverse_ingest.domain.outcome import IngestOutcome, OrphanPolicy
from dataverse_ingest.domain.types import DatasetDescription, ValidationVerdict
from dataverse_ingest.infra.dataverse.base import RepositoryClient, RepositoryError
from dataverse_ingest.infra.dataverse.responses import find_persistent_id
from dataverse_ingest.infra.serialization import JsonSerializer
from dataverse_ingest.infra.validator.base import BagValidator, ValidatorError

DOI_SCHEME = "doi:"
PUBLISH_VERSION_TYPE = "major"


def format_violation(rule: str, message: str) -> str:
    return f" - [{rule}] {message}"


def rejection_message(verdict: ValidationVerdict) -> str:
    lines = "\n".join(format_violation(rule, msg) for rule, msg in verdict.violations)
    return (
        f"Bag was not valid according to Profile Version {verdict.profile_version}.\n"
        f"Violations:\n{lines}"
    )


class IngestTask:
    """Ingest d'un dépôt unique.

    Paramètres:
    - deposit: dépôt à ingérer (lu, jamais modifié).
    - validator: validateur de bags.
    - repository: client Dataverse.
    - metadata_mapper / files_mapper: transformateurs (DDM et files.xml par défaut).
    - serializer: sérialiseur JSON explicite.
    - publish: publier (version majeure) ou laisser le dataset en draft.
    - orphan_policy: que faire d'un dataset créé quand une étape suivante échoue.
    - dataverse_alias: collection cible.
    """

    def __init__(
        self,
        deposit: Deposit,
        validator: BagValidator,
        repository: RepositoryClient,
        *,
        metadata_mapper: MetadataMapper | None = None,
        files_mapper: FilesMapper | None = None,
        serializer: JsonSerializer | None = None,
        publish: bool = True,
        orphan_policy: OrphanPolicy = OrphanPolicy.LEAVE,
        dataverse_alias: str = "root",
    ) -> None:
        self.deposit = deposit
        self.validator = validator
        self.repository = repository
        self.metadata_mapper = metadata_mapper or DdmMapper()
        self.files_mapper = files_mapper or FilesXmlMapper(deposit.bag_dir)
        self.serializer = serializer or JsonSerializer()
        self.publish = publish
        self.orphan_policy = OrphanPolicy(orphan_policy)
        self.dataverse_alias = dataverse_alias
        self._log = structlog.get_logger(__name__).bind(
            component="ingest_task", deposit_id=deposit.deposit_id
        )

    def run(self) -> IngestOutcome:
        self._log.info("ingest_started", bag=str(self.deposit.bag_dir), doi=self.deposit.doi)
        dataset_id: str | None = None
        try:
            self._validate()
            description = self._map_metadata()
            response = self._submit(description)
            dataset_id = self._extract_id(response)
            self._upload_files(dataset_id)
            self._finalize(dataset_id)
        except IngestError as err:
            orphan = self._handle_orphan(dataset_id, err) if dataset_id else None
            INGEST_RUNS_TOTAL.labels(outcome="failed").inc()
            self._log.error(
                "ingest_failed",
                kind=err.kind.value,
                error=err.message,
                retryable=err.retryable,
                dataset_id=dataset_id,
            )
            return IngestOutcome.failed(
                self.deposit.deposit_id, err, dataset_id=dataset_id, orphan_dataset_id=orphan
            )
        INGEST_RUNS_TOTAL.labels(outcome="succeeded").inc()
        self._log.info("ingest_succeeded", dataset_id=dataset_id, published=self.publish)
        return IngestOutcome.success(self.deposit.deposit_id, dataset_id)

    @contextlib.contextmanager
    def _stage(self, name: str) -> Iterator[None]:
        """Chronomètre une étape et compte ses échecs typés."""
        with INGEST_STAGE_LATENCY.labels(stage=name).time():
            try:
                yield
            except IngestError as err:
                INGEST_STAGE_FAILURES_TOTAL.labels(stage=name, kind=err.kind.value).inc()
                raise

    def _validate(self) -> None:
        with self._stage("validate"):
            try:
                verdict = self.validator.validate(self.deposit.bag_dir)
            except ValidatorError as exc:
                raise ValidationInfrastructureFailure(
                    f"bag validation could not be performed: {exc}"
                ) from exc
            if not verdict.compliant:
                raise RejectedDeposit(
                    rejection_message(verdict),
                    details={
                        "profile_version": verdict.profile_version,
                        "violations": [list(v) for v in verdict.violations],
                    },
                )
            self._log.debug("bag_compliant", profile_version=verdict.profile_version)

    def _map_metadata(self) -> DatasetDescription:
        with self._stage("map_metadata"):
            try:
                ddm = self.deposit.metadata
            except DepositLoadError as exc:
                raise MappingFailure(str(exc)) from exc
            return self.metadata_mapper.map(ddm)

    def _submit(self, description: DatasetDescription) -> httpx.Response:
        with self._stage("submit"):
            dataset_json = self.serializer.dumps(description)
            self._log.debug("dataset_json", json=dataset_json)
            try:
                if self.deposit.doi:
                    pid = DOI_SCHEME + self.deposit.doi.removeprefix(DOI_SCHEME)
                    self._log.info("importing_dataset", pid=pid)
                    return self.repository.import_dataset(
                        dataset_json, pid, keep_draft=True, dataverse=self.dataverse_alias
                    )
                self._log.info("creating_dataset", dataverse=self.dataverse_alias)
                return self.repository.create_dataset(dataset_json, dataverse=self.dataverse_alias)
            except RepositoryError as exc:
                raise SubmissionFailure(
                    f"dataset submission failed: {exc}",
                    details=exc.details(),
                    retryable=exc.retryable,
                ) from exc

    def _extract_id(self, response: httpx.Response) -> str:
        with self._stage("extract_id"):
            try:
                dataset_id = find_persistent_id(response)
            except ValueError as exc:
                raise SubmissionFailure(
                    f"could not read dataset identifier: {exc}",
                    details={"status_code": response.status_code},
                    retryable=False,
                ) from exc
            self._log.info("dataset_created", dataset_id=dataset_id)
            return dataset_id

    def _upload_files(self, dataset_id: str) -> None:
        with self._stage("upload_files"):
            try:
                files_xml = self.deposit.files_manifest
            except DepositLoadError as exc:
                raise FileMappingFailure(str(exc)) from exc
            default_restrict = access_rights.to_default_restrict(self.deposit.metadata)
            entries = self.files_mapper.map(files_xml, default_restrict)

            # Tous les fichiers sont tentés; les échecs sont agrégés ensuite.
            failed: list[dict[str, str]] = []
            for entry in entries:
                name = self._display_name(entry.file)
                try:
                    self.repository.add_file(
                        dataset_id, entry.file, self.serializer.dumps(entry.metadata)
                    )
                except (RepositoryError, OSError) as exc:
                    FILES_UPLOADED_TOTAL.labels(result="failed").inc()
                    self._log.warning("file_upload_failed", file=name, error=str(exc))
                    failed.append({"file": name, "error": str(exc)})
                    continue
                FILES_UPLOADED_TOTAL.labels(result="ok").inc()
                self._log.debug("file_added", file=name, restrict=entry.metadata.restrict)
            if failed:
                raise FileUploadFailure(failed)
            self._log.info("files_uploaded", count=len(entries))

    def _finalize(self, dataset_id: str) -> None:
        if not self.publish:
            self._log.debug("keeping_dataset_on_draft", dataset_id=dataset_id)
            return
        with self._stage("publish"):
            self._log.debug("publishing_dataset", dataset_id=dataset_id)
            try:
                self.repository.publish(dataset_id, PUBLISH_VERSION_TYPE)
            except RepositoryError as exc:
                raise PublishFailure(
                    f"publishing {dataset_id} failed: {exc}", details=exc.details()
                ) from exc

    def _handle_orphan(self, dataset_id: str, err: IngestError) -> str | None:
        """Applique la politique d'orphelin; retourne l'id du draft laissé en place, sinon None.

        Un échec de publication n'est pas un orphelin: le draft est complet et republiable.
        """
        if isinstance(err, PublishFailure):
            return None
        if self.orphan_policy is OrphanPolicy.DELETE_DRAFT:
            try:
                self.repository.delete_draft(dataset_id)
            except RepositoryError as exc:
                ORPHAN_DATASETS_TOTAL.labels(action="delete_failed").inc()
                self._log.warning("draft_delete_failed", dataset_id=dataset_id, error=str(exc))
                return dataset_id
            ORPHAN_DATASETS_TOTAL.labels(action="deleted").inc()
            self._log.info("draft_deleted", dataset_id=dataset_id)
            return None
        ORPHAN_DATASETS_TOTAL.labels(action="left").inc()
        self._log.warning("draft_left_behind", dataset_id=dataset_id)
        return dataset_id

    def _display_name(self, file: Path) -> str:
        try:
            return file.relative_to(self.deposit.bag_dir).as_posix()
        except ValueError:
            return str(file)
