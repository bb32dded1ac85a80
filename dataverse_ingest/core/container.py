"""
Conteneur d'injection de dépendances de l'ingest.

Instancie les composants centraux (settings, validateur, client Dataverse, sérialiseur) et
fabrique les `IngestTask` configurées.
"""

from __future__ import annotations

from dataverse_ingest.core.settings import Settings, get_settings
from dataverse_ingest.domain.deposit import Deposit
from dataverse_ingest.domain.ingest_task import IngestTask
from dataverse_ingest.infra.dataverse.http_client import DataverseClient
from dataverse_ingest.infra.serialization import JsonSerializer
from dataverse_ingest.infra.validator.http_validator import HttpBagValidator


class Container:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        api_key = self.settings.DATAVERSE_API_KEY
        self.validator = HttpBagValidator(
            self.settings.VALIDATOR_URL, timeout=self.settings.HTTP_TIMEOUT_SECONDS
        )
        self.repository = DataverseClient(
            self.settings.DATAVERSE_URL,
            api_key=api_key.get_secret_value() if api_key else None,
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
            connect_retries=self.settings.DATAVERSE_CONNECT_RETRIES,
        )
        self.serializer = JsonSerializer(pretty=True)

    def make_task(self, deposit: Deposit, publish: bool | None = None) -> IngestTask:
        """Construit la tâche d'ingest pour `deposit`; `publish=None` reprend la configuration."""
        return IngestTask(
            deposit,
            self.validator,
            self.repository,
            serializer=self.serializer,
            publish=self.settings.PUBLISH if publish is None else publish,
            orphan_policy=self.settings.ORPHAN_POLICY,
            dataverse_alias=self.settings.DATAVERSE_ALIAS,
        )

    def close(self) -> None:
        self.validator.close()
        self.repository.close()

