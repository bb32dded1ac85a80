"""Tests du script `dd2d-ingest`: codes de sortie, résumé et export des métriques."""

from __future__ import annotations

from pathlib import Path

import pytest

from dataverse_ingest.domain.ingest_task import IngestTask
from dataverse_ingest.domain.types import ValidationVerdict
from dataverse_ingest.scripts import ingest_deposit
from tests.fakes import DATASET_PID, FakeRepository, FakeValidator
from tests.samples import write_deposit


class _FakeContainer:
    """Remplace le conteneur: mêmes fabriques, collaborateurs factices."""

    instances: list[_FakeContainer] = []
    verdict = ValidationVerdict(compliant=True, profile_version="1.0.0")

    def __init__(self, settings=None) -> None:
        self.calls: list[tuple] = []
        self.validator = FakeValidator(self.calls, verdict=self.verdict)
        self.repository = FakeRepository(self.calls)
        self.closed = False
        self.publish: bool | None = None
        _FakeContainer.instances.append(self)

    def make_task(self, deposit, publish=None) -> IngestTask:
        self.publish = publish
        return IngestTask(
            deposit,
            self.validator,
            self.repository,
            publish=True if publish is None else publish,
        )

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def fake_container(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(_FakeContainer, "instances", [])
    monkeypatch.setattr(ingest_deposit, "Container", _FakeContainer)
    # La config structlog globale garderait une référence au stderr capturé.
    monkeypatch.setattr(ingest_deposit, "setup_logging", lambda *args, **kwargs: None)


def test_successful_ingest_exits_zero(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    deposit_dir = write_deposit(tmp_path, deposit_id="dep-ok")
    assert ingest_deposit.main([str(deposit_dir)]) == ingest_deposit.EXIT_OK
    assert capsys.readouterr().out.strip().splitlines()[-1] == f"OK dep-ok -> {DATASET_PID}"
    container = _FakeContainer.instances[0]
    assert container.closed is True
    assert container.repository.names()[-1] == "publish"


def test_draft_flag_skips_publish(tmp_path: Path) -> None:
    deposit_dir = write_deposit(tmp_path)
    assert ingest_deposit.main([str(deposit_dir), "--draft"]) == ingest_deposit.EXIT_OK
    container = _FakeContainer.instances[0]
    assert container.publish is False
    assert "publish" not in container.repository.names()


def test_failed_ingest_exits_one(
    tmp_path: Path, capsys: pytest.CaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        _FakeContainer,
        "verdict",
        ValidationVerdict(
            compliant=False, profile_version="1.0.0", violations=[("1.1.1", "bagit.txt missing")]
        ),
    )
    deposit_dir = write_deposit(tmp_path, deposit_id="dep-ko")
    assert ingest_deposit.main([str(deposit_dir)]) == ingest_deposit.EXIT_INGEST_FAILED
    out = capsys.readouterr().out
    assert "FAILED dep-ko [rejected_deposit] Bag was not valid" in out
    assert " - [1.1.1] bagit.txt missing" in out
    assert _FakeContainer.instances[0].closed is True


def test_unreadable_deposit_exits_two(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    assert ingest_deposit.main([str(tmp_path / "missing")]) == ingest_deposit.EXIT_BAD_DEPOSIT
    assert "not a deposit directory" in capsys.readouterr().err
    assert _FakeContainer.instances == []


def test_publish_and_draft_are_exclusive(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        ingest_deposit.main([str(tmp_path), "--publish", "--draft"])


def test_metrics_file_is_written(tmp_path: Path) -> None:
    deposit_dir = write_deposit(tmp_path)
    metrics_file = tmp_path / "ingest.prom"
    ingest_deposit.main([str(deposit_dir), "--metrics-file", str(metrics_file)])
    content = metrics_file.read_text(encoding="utf-8")
    assert "dd2d_ingest_runs_total" in content
