"""Sérialisation JSON explicite des modèles envoyés à Dataverse.

Le sérialiseur est injecté dans `IngestTask`; aucune configuration JSON globale.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel


class JsonSerializer:
    """Sérialise modèles Pydantic (par alias, sans valeurs nulles) et structures simples."""

    def __init__(self, pretty: bool = True) -> None:
        self.pretty = pretty

    def to_data(self, obj: Any) -> Any:
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json", by_alias=True, exclude_none=True)
        return obj

    def dumps(self, obj: Any) -> str:
        return json.dumps(
            self.to_data(obj),
            indent=2 if self.pretty else None,
            ensure_ascii=False,
        )
