# ============================================================
# Module : dataverse_ingest/domain/xmlns.py
# Objet  : Espaces de noms DDM / files.xml et petits utilitaires ElementTree.
# ============================================================

from __future__ import annotations

from pathlib import Path
from xml.etree import ElementTree

from dataverse_ingest.domain.errors import DepositLoadError

NS = {
    "ddm": "http://easy.dans.knaw.nl/schemas/md/ddm/",
    "dc": "http://purl.org/dc/elements/1.1/",
    "dcterms": "http://purl.org/dc/terms/",
    "dcx-dao": "http://easy.dans.knaw.nl/schemas/dcx/dai/",
    "xsi": "http://www.w3.org/2001/XMLSchema-instance",
    "files": "http://easy.dans.knaw.nl/schemas/bag/metadata/files/",
}


def parse_xml(path: Path) -> ElementTree.Element:
    """Parse un document XML du bag et retourne sa racine.

    Raises:
        DepositLoadError: fichier absent, illisible ou XML mal formé.
    """
    try:
        return ElementTree.parse(path).getroot()
    except FileNotFoundError as exc:
        raise DepositLoadError(f"missing metadata file: {path}") from exc
    except OSError as exc:
        raise DepositLoadError(f"unreadable metadata file {path}: {exc}") from exc
    except ElementTree.ParseError as exc:
        raise DepositLoadError(f"malformed XML in {path}: {exc}") from exc


def local_name(tag: str) -> str:
    """`{namespace}name` -> `name`."""
    return tag.rsplit("}", 1)[-1]


def children_named(elem: ElementTree.Element, name: str) -> list[ElementTree.Element]:
    """Enfants directs dont le nom local vaut `name`, quel que soit l'espace de noms."""
    return [c for c in elem if isinstance(c.tag, str) and local_name(c.tag) == name]


def text_of(elem: ElementTree.Element | None) -> str:
    """Texte complet (éléments imbriqués compris), espaces normalisés."""
    if elem is None:
        return ""
    return " ".join("".join(elem.itertext()).split())
