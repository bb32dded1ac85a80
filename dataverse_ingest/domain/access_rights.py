"""Politique de restriction par défaut dérivée de `ddm:accessRights`."""

from __future__ import annotations

from xml.etree import ElementTree

from dataverse_ingest.domain.errors import MappingFailure
from dataverse_ingest.domain.xmlns import NS, text_of

OPEN_ACCESS = "OPEN_ACCESS"

# accessRights -> restriction par défaut des fichiers
DEFAULT_RESTRICT: dict[str, bool] = {
    OPEN_ACCESS: False,
    "OPEN_ACCESS_FOR_REGISTERED_USERS": True,
    "REQUEST_PERMISSION": True,
    "NO_ACCESS": True,
}


def to_default_restrict(ddm: ElementTree.Element) -> bool:
    """Retourne la restriction par défaut à appliquer aux fichiers du dépôt.

    Sans `ddm:accessRights` dans le profil, les fichiers sont restreints.

    Raises:
        MappingFailure: valeur d'accessRights inconnue.
    """
    node = ddm.find("ddm:profile/ddm:accessRights", NS)
    if node is None:
        return True
    value = text_of(node)
    try:
        return DEFAULT_RESTRICT[value]
    except KeyError:
        raise MappingFailure(
            f"unknown accessRights value: {value!r}", details={"field": "accessRights"}
        ) from None
