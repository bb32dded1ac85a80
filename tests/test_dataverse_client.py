# ============================================================
# Tests : tests/test_dataverse_client.py
# Objet  : Requêtes émises vers l'API native Dataverse et traduction des erreurs.
# ============================================================

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from dataverse_ingest.infra.dataverse.base import RepositoryHTTPError, RepositoryNetworkError
from dataverse_ingest.infra.dataverse.http_client import API_KEY_HEADER, DataverseClient
from dataverse_ingest.infra.dataverse.responses import find_persistent_id, iter_field

PID = "doi:10.5072/FK2/XYZ"


def _client(handler, api_key: str | None = "secret-token") -> DataverseClient:
    return DataverseClient(
        "https://dv.example.org/", api_key=api_key, transport=httpx.MockTransport(handler)
    )


def test_create_dataset_posts_json_with_api_key() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"data": {"persistentId": PID}})

    resp = _client(handler).create_dataset('{"datasetVersion": {}}', dataverse="dans")
    req = seen[0]
    assert req.method == "POST"
    assert req.url.path == "/api/dataverses/dans/datasets"
    assert req.headers[API_KEY_HEADER] == "secret-token"
    assert req.headers["content-type"] == "application/json"
    assert json.loads(req.content) == {"datasetVersion": {}}
    assert find_persistent_id(resp) == PID


def test_no_api_key_header_when_unset() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={})

    _client(handler, api_key=None).create_dataset("{}")
    assert API_KEY_HEADER not in seen[0].headers


@pytest.mark.parametrize("keep_draft, release", [(True, "no"), (False, "yes")])
def test_import_dataset_query(keep_draft: bool, release: str) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"data": {"persistentId": PID}})

    _client(handler).import_dataset("{}", PID, keep_draft=keep_draft)
    req = seen[0]
    assert req.url.path == "/api/dataverses/root/datasets/:import"
    assert req.url.params["pid"] == PID
    assert req.url.params["release"] == release


def test_add_file_sends_multipart(tmp_path: Path) -> None:
    payload = tmp_path / "a.txt"
    payload.write_text("hello", encoding="utf-8")
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        request.read()
        seen.append(request)
        return httpx.Response(200, json={"status": "OK"})

    _client(handler).add_file(PID, payload, '{"restrict": true}')
    req = seen[0]
    assert req.url.path == "/api/datasets/:persistentId/add"
    assert req.url.params["persistentId"] == PID
    assert req.headers["content-type"].startswith("multipart/form-data")
    body = req.content
    assert b'name="jsonData"' in body
    assert b'{"restrict": true}' in body
    assert b'filename="a.txt"' in body
    assert b"hello" in body


def test_add_file_missing_file_raises_oserror(tmp_path: Path) -> None:
    client = _client(lambda request: httpx.Response(200))
    with pytest.raises(OSError):
        client.add_file(PID, tmp_path / "absent.bin", "{}")


def test_publish_and_delete_draft_endpoints() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"status": "OK"})

    client = _client(handler)
    client.publish(PID, "major")
    client.delete_draft(PID)
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/datasets/:persistentId/actions/:publish"
    assert seen[0].url.params["type"] == "major"
    assert seen[1].method == "DELETE"
    assert seen[1].url.path == "/api/datasets/:persistentId/versions/:draft"
    assert seen[1].url.params["persistentId"] == PID


def test_http_error_is_translated() -> None:
    client = _client(lambda request: httpx.Response(403, text="forbidden"))
    with pytest.raises(RepositoryHTTPError) as exc_info:
        client.publish(PID)
    err = exc_info.value
    assert err.status_code == 403
    assert err.body == "forbidden"
    assert err.retryable is False
    assert err.details()["status_code"] == 403


def test_server_error_is_retryable() -> None:
    client = _client(lambda request: httpx.Response(502))
    with pytest.raises(RepositoryHTTPError) as exc_info:
        client.create_dataset("{}")
    assert exc_info.value.retryable is True


def test_network_error_is_translated() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RepositoryNetworkError):
        _client(handler).create_dataset("{}")


def test_persistent_id_found_at_any_depth() -> None:
    body = {"status": "OK", "data": {"latestVersion": [{"x": 1}, {"persistentId": PID}]}}
    assert find_persistent_id(httpx.Response(201, json=body)) == PID
    assert list(iter_field({"a": {"b": 1}, "c": [{"b": 2}]}, "b")) == [1, 2]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(201, json={"data": {"id": 1}}),
        httpx.Response(201, json={"data": {"persistentId": ""}}),
        httpx.Response(201, content=b"not json"),
    ],
)
def test_persistent_id_absent_or_unreadable(response: httpx.Response) -> None:
    with pytest.raises(ValueError):
        find_persistent_id(response)
