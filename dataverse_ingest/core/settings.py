"""Définition et chargement des paramètres de configuration de l'ingest.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
"""

import os
from pathlib import Path

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dataverse_ingest.domain.outcome import OrphanPolicy

# Détermination du fichier .env à utiliser avec priorité:
# 1) ENV_FILE (chemin explicite)
# 2) .env.{APP_ENV} si présent
# 3) .env (défaut)
_cwd = Path.cwd()
_env_file_from_env = os.getenv("ENV_FILE")
if _env_file_from_env:
    _ENV_FILE_PATH = _env_file_from_env
else:
    _app_env = os.getenv("APP_ENV", "dev")
    _candidate_specific = _cwd / f".env.{_app_env}"
    _candidate_default = _cwd / ".env"
    if _candidate_specific.exists():
        _ENV_FILE_PATH = _candidate_specific
    else:
        _ENV_FILE_PATH = _candidate_default


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "dataverse-ingest"
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Dataverse (API native)
    DATAVERSE_URL: str = "http://localhost:8080"
    DATAVERSE_API_KEY: SecretStr | None = None
    DATAVERSE_ALIAS: str = "root"
    DATAVERSE_CONNECT_RETRIES: int = 0

    # Service de validation des bags (profil DANS)
    VALIDATOR_URL: str = "http://localhost:20180"

    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Pipeline
    PUBLISH: bool = True
    ORPHAN_POLICY: OrphanPolicy = OrphanPolicy.LEAVE

    # Fichier texte Prometheus (node exporter), optionnel
    METRICS_TEXTFILE: str | None = None

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper()


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()
