"""Lecture des réponses Dataverse."""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

import httpx

PERSISTENT_ID = "persistentId"


def iter_field(data: Any, name: str) -> Iterator[Any]:
    """Parcours en profondeur: toutes les valeurs associées à la clé `name`, à tout niveau."""
    if isinstance(data, dict):
        for key, value in data.items():
            if key == name:
                yield value
            yield from iter_field(value, name)
    elif isinstance(data, list):
        for item in data:
            yield from iter_field(item, name)


def find_persistent_id(response: httpx.Response) -> str:
    """Extrait l'identifiant persistant du corps d'une réponse de création/import.

    La clé `persistentId` est cherchée récursivement; la première valeur texte non vide est
    retenue.

    Raises:
        ValueError: corps non JSON ou identifiant absent.
    """
    try:
        body = json.loads(response.content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"response body is not valid JSON: {exc}") from exc
    for value in iter_field(body, PERSISTENT_ID):
        if isinstance(value, str) and value.strip():
            return value.strip()
    raise ValueError(f"no {PERSISTENT_ID} in response body")
