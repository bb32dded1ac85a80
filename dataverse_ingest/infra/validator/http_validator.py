# ============================================================
# Module : dataverse_ingest/infra/validator/http_validator.py
# Objet  : Client HTTP du service de validation de bags.
# Contexte : POST {VALIDATOR_URL}/validate, réponse JSON
#            {"Is compliant", "Profile version", "Rule violations": [{"Rule", "Violation"}]}.
# ============================================================

from __future__ import annotations

from pathlib import Path

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dataverse_ingest.domain.types import ValidationVerdict
from dataverse_ingest.infra.validator.base import BagValidator, ValidatorError

PACKAGE_TYPE = "DEPOSIT"


class _RuleViolation(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    rule: str = Field(alias="Rule")
    violation: str = Field(alias="Violation")


class _ValidationReport(BaseModel):
    """Corps de réponse du validateur (clés lisibles avec espaces)."""

    model_config = ConfigDict(extra="ignore")

    is_compliant: bool = Field(alias="Is compliant")
    profile_version: str = Field(default="", alias="Profile version")
    rule_violations: list[_RuleViolation] = Field(default_factory=list, alias="Rule violations")

    def to_verdict(self) -> ValidationVerdict:
        return ValidationVerdict(
            compliant=self.is_compliant,
            profile_version=self.profile_version,
            violations=[(v.rule, v.violation) for v in self.rule_violations],
        )


class HttpBagValidator(BagValidator):
    """Adaptateur HTTP vers le service de validation."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._log = structlog.get_logger(__name__).bind(component="bag_validator")
        self._client = httpx.Client(
            headers={"Accept": "application/json"},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def validate(self, bag_dir: Path) -> ValidationVerdict:
        url = f"{self.base_url}/validate"
        payload = {"bagLocation": str(Path(bag_dir).resolve()), "packageType": PACKAGE_TYPE}
        try:
            resp = self._client.post(url, json=payload)
            resp.raise_for_status()
            report = _ValidationReport.model_validate(resp.json())
        except httpx.HTTPStatusError as exc:
            raise ValidatorError(
                f"validator returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ValidatorError(f"validator unreachable: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise ValidatorError(f"unreadable validator response: {exc}") from exc
        self._log.debug(
            "bag_validated",
            bag=str(bag_dir),
            compliant=report.is_compliant,
            violations=len(report.rule_violations),
        )
        return report.to_verdict()

    def close(self) -> None:
        self._client.close()
