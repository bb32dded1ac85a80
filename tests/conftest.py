"""Configuration de test pour pytest avec gestion des chemins.

Ce module configure pytest pour résoudre les imports `dataverse_ingest` et `tests` en ajoutant la
racine du projet au sys.path, et fournit les fixtures de dépôts sur disque.
"""

import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Ensure project root is on sys.path so that
# imports like `from dataverse_ingest...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from dataverse_ingest.domain.deposit import Deposit  # noqa: E402
from tests.samples import write_deposit  # noqa: E402


@pytest.fixture
def deposit_factory(tmp_path: Path) -> Callable[..., Deposit]:
    """Fabrique de dépôts: écrit le répertoire sous `tmp_path` puis le charge."""
    counter = {"n": 0}

    def _make(**kwargs) -> Deposit:
        counter["n"] += 1
        kwargs.setdefault("deposit_id", f"deposit-{counter['n']}")
        return Deposit.from_directory(write_deposit(tmp_path, **kwargs))

    return _make


@pytest.fixture
def calls() -> list[tuple]:
    """Journal d'appels partagé entre validateur et dépôt factices."""
    return []


@pytest.fixture(autouse=True)
def isolated_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Évite qu'un .env ou l'environnement du poste influence les tests."""
    for key in list(os.environ):
        if key.startswith(("DATAVERSE_", "VALIDATOR_", "ORPHAN_", "METRICS_")) or key in {
            "PUBLISH",
            "LOG_LEVEL",
            "LOG_JSON",
        }:
            monkeypatch.delenv(key, raising=False)
