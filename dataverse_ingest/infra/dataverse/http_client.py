# ============================================================
# Module : dataverse_ingest/infra/dataverse/http_client.py
# Objet  : Client de l'API native Dataverse (httpx).
# Invariants :
#  - Aucune relance au niveau requête; seule la connexion peut être retentée (transport).
#  - La clé API n'est jamais journalisée.
# ============================================================
"""Client HTTP pour l'API native Dataverse.

Endpoints utilisés:
  - `POST /api/dataverses/{alias}/datasets`
  - `POST /api/dataverses/{alias}/datasets/:import?pid=...&release=no|yes`
  - `POST /api/datasets/:persistentId/add?persistentId=...` (multipart `file` + `jsonData`)
  - `POST /api/datasets/:persistentId/actions/:publish?persistentId=...&type=major`
  - `DELETE /api/datasets/:persistentId/versions/:draft?persistentId=...`
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any

import httpx
import structlog

from dataverse_ingest.core.http_constants import HTTP_STATUS_CLIENT_ERROR_MIN
from dataverse_ingest.infra.dataverse.base import (
    RepositoryClient,
    RepositoryHTTPError,
    RepositoryNetworkError,
)

API_KEY_HEADER = "X-Dataverse-key"


class DataverseClient(RepositoryClient):
    """Adaptateur Dataverse.

    Args:
        base_url: URL de l'instance (ex. https://dataverse.example.org).
        api_key: jeton API (optionnel pour les tests locaux).
        timeout: délai (secondes) appliqué à toutes les phases de la requête.
        connect_retries: nombre de tentatives de connexion supplémentaires.
        transport: transport httpx injecté (tests: `httpx.MockTransport`).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        connect_retries: int = 0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._log = structlog.get_logger(__name__).bind(component="dataverse_client")
        headers: dict[str, str] = {"Accept": "application/json"}
        if api_key:
            headers[API_KEY_HEADER] = api_key
        if transport is None:
            transport = httpx.HTTPTransport(retries=connect_retries)
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            self._log.warning("dataverse_network_error", method=method, path=path, error=str(exc))
            raise RepositoryNetworkError(f"{method} {path} failed: {exc}") from exc
        if resp.status_code >= HTTP_STATUS_CLIENT_ERROR_MIN:
            self._log.warning(
                "dataverse_http_error", method=method, path=path, status=resp.status_code
            )
            raise RepositoryHTTPError(
                resp.status_code,
                resp.text,
                f"{method} {path} returned HTTP {resp.status_code}",
            )
        return resp

    def create_dataset(self, dataset_json: str, dataverse: str = "root") -> httpx.Response:
        return self._request(
            "POST",
            f"/api/dataverses/{dataverse}/datasets",
            content=dataset_json.encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    def import_dataset(
        self,
        dataset_json: str,
        pid: str,
        keep_draft: bool = True,
        dataverse: str = "root",
    ) -> httpx.Response:
        return self._request(
            "POST",
            f"/api/dataverses/{dataverse}/datasets/:import",
            params={"pid": pid, "release": "no" if keep_draft else "yes"},
            content=dataset_json.encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    def add_file(self, dataset_id: str, file: Path, metadata_json: str) -> httpx.Response:
        content_type = mimetypes.guess_type(file.name)[0] or "application/octet-stream"
        with open(file, "rb") as fh:
            return self._request(
                "POST",
                "/api/datasets/:persistentId/add",
                params={"persistentId": dataset_id},
                files={"file": (file.name, fh, content_type)},
                data={"jsonData": metadata_json},
            )

    def publish(self, dataset_id: str, version_type: str = "major") -> httpx.Response:
        return self._request(
            "POST",
            "/api/datasets/:persistentId/actions/:publish",
            params={"persistentId": dataset_id, "type": version_type},
        )

    def delete_draft(self, dataset_id: str) -> httpx.Response:
        return self._request(
            "DELETE",
            "/api/datasets/:persistentId/versions/:draft",
            params={"persistentId": dataset_id},
        )

    def close(self) -> None:
        self._client.close()
