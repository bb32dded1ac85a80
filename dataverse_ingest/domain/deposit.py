"""Dépôt à ingérer: un répertoire contenant `deposit.properties` et un unique bag.

Structure attendue::

    <deposit-id>/
    ├── deposit.properties
    └── <bag>/
        ├── bagit.txt
        ├── data/...
        └── metadata/
            ├── dataset.xml   # DDM
            └── files.xml     # manifeste des fichiers

Les documents XML sont chargés à la demande puis gardés en cache; `IngestTask` ne modifie jamais
le dépôt.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from xml.etree import ElementTree

from dataverse_ingest.domain.errors import DepositLoadError
from dataverse_ingest.domain.xmlns import parse_xml

PROPERTIES_FILE = "deposit.properties"
DOI_PROPERTY = "identifier.doi"
# La clé s'arrête au premier `=`, `:` ou blanc.
_PROPERTY_SEPARATOR = re.compile(r"\s*[=:]\s*|\s+")


def read_properties(path: Path) -> dict[str, str]:
    """Lit un fichier `.properties` simple (`clé = valeur`, commentaires `#`/`!`)."""
    props: dict[str, str] = {}
    with open(path, encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line[0] in "#!":
                continue
            key, *value = _PROPERTY_SEPARATOR.split(line, maxsplit=1)
            props[key] = value[0] if value else ""
    return props


@dataclass(frozen=True)
class Deposit:
    """Unité d'ingest identifiée par `deposit_id`."""

    deposit_id: str
    bag_dir: Path
    doi: str | None = None

    @classmethod
    def from_directory(cls, path: str | Path) -> Deposit:
        """Construit un `Deposit` à partir d'un répertoire de dépôt.

        Raises:
            DepositLoadError: répertoire absent, `deposit.properties` manquant, ou nombre de
                sous-répertoires (bags) différent de un.
        """
        deposit_dir = Path(path)
        if not deposit_dir.is_dir():
            raise DepositLoadError(f"not a deposit directory: {deposit_dir}")
        props_file = deposit_dir / PROPERTIES_FILE
        if not props_file.is_file():
            raise DepositLoadError(f"{PROPERTIES_FILE} not found in {deposit_dir}")
        bags = sorted(p for p in deposit_dir.iterdir() if p.is_dir())
        if len(bags) != 1:
            raise DepositLoadError(
                f"deposit {deposit_dir.name} must contain exactly one bag directory, "
                f"found {len(bags)}"
            )
        props = read_properties(props_file)
        doi = props.get(DOI_PROPERTY) or None
        return cls(deposit_id=deposit_dir.name, bag_dir=bags[0], doi=doi)

    @property
    def metadata_path(self) -> Path:
        return self.bag_dir / "metadata" / "dataset.xml"

    @property
    def files_path(self) -> Path:
        return self.bag_dir / "metadata" / "files.xml"

    @cached_property
    def metadata(self) -> ElementTree.Element:
        """Racine du document DDM (`dataset.xml`)."""
        return parse_xml(self.metadata_path)

    @cached_property
    def files_manifest(self) -> ElementTree.Element:
        """Racine du manifeste `files.xml`."""
        return parse_xml(self.files_path)

    def __str__(self) -> str:
        return f"Deposit({self.deposit_id}, doi={self.doi or '-'})"
