"""Mapping du manifeste `files.xml` vers les entrées de fichiers Dataverse.

Chaque `<file filepath="data/...">` produit une `FileEntry` dans l'ordre du document. La
restriction effective vient de `accessibleToRights` si présent, sinon de la politique par défaut
du dépôt.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from xml.etree import ElementTree

from dataverse_ingest.domain.errors import FileMappingFailure
from dataverse_ingest.domain.mappers.base import FilesMapper
from dataverse_ingest.domain.types import FileEntry, FileMetadata
from dataverse_ingest.domain.xmlns import children_named, local_name, text_of

PAYLOAD_DIR = "data"

# accessibleToRights -> restrict
ACCESSIBLE_TO_RESTRICT: dict[str, bool] = {
    "ANONYMOUS": False,
    "KNOWN": True,
    "RESTRICTED_REQUEST": True,
    "NONE": True,
}


def directory_label(filepath: PurePosixPath) -> str | None:
    """Répertoire cible dans Dataverse: chemin parent sans le préfixe `data/`."""
    parts = filepath.parent.parts
    if parts and parts[0] == PAYLOAD_DIR:
        parts = parts[1:]
    return "/".join(parts) or None


class FilesXmlMapper(FilesMapper):
    """Mapper par défaut pour le manifeste `files.xml` d'un bag situé dans `bag_dir`."""

    def __init__(self, bag_dir: Path) -> None:
        self.bag_dir = bag_dir

    def map(self, files_xml: ElementTree.Element, default_restrict: bool) -> list[FileEntry]:
        root = local_name(files_xml.tag)
        if root != "files":
            raise FileMappingFailure(
                f"unexpected manifest root element: {root}", details={"root": root}
            )
        entries: list[FileEntry] = []
        for position, node in enumerate(children_named(files_xml, "file"), start=1):
            raw_path = (node.get("filepath") or "").strip()
            if not raw_path:
                raise FileMappingFailure(
                    f"file entry #{position} has no filepath attribute",
                    details={"position": position},
                )
            filepath = PurePosixPath(raw_path)
            # Le fichier doit rester à l'intérieur du bag.
            if filepath.is_absolute() or ".." in filepath.parts:
                raise FileMappingFailure(
                    f"file entry #{position} points outside the bag: {raw_path}",
                    details={"position": position, "filepath": raw_path},
                )
            description = text_of(next(iter(children_named(node, "description")), None))
            entries.append(
                FileEntry(
                    file=self.bag_dir / filepath,
                    metadata=FileMetadata(
                        label=filepath.name,
                        directory_label=directory_label(filepath),
                        restrict=self._restrict(node, raw_path, default_restrict),
                        description=description or None,
                    ),
                )
            )
        return entries

    @staticmethod
    def _restrict(node: ElementTree.Element, filepath: str, default_restrict: bool) -> bool:
        overrides = children_named(node, "accessibleToRights")
        if not overrides:
            return default_restrict
        value = text_of(overrides[0])
        try:
            return ACCESSIBLE_TO_RESTRICT[value]
        except KeyError:
            raise FileMappingFailure(
                f"unknown accessibleToRights value {value!r} for {filepath}",
                details={"file": filepath, "value": value},
            ) from None
