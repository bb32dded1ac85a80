"""Interfaces des transformateurs purs du pipeline (métadonnées, fichiers)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from xml.etree import ElementTree

from dataverse_ingest.domain.types import DatasetDescription, FileEntry


class MetadataMapper(ABC):
    """Transforme un document de métadonnées conforme au profil en description de dataset."""

    @abstractmethod
    def map(self, ddm: ElementTree.Element) -> DatasetDescription:
        """Retourne la description cible; lève `MappingFailure` si l'entrée est incomplète."""
        ...


class FilesMapper(ABC):
    """Transforme le manifeste de fichiers en entrées ordonnées à téléverser."""

    @abstractmethod
    def map(self, files_xml: ElementTree.Element, default_restrict: bool) -> list[FileEntry]:
        """Retourne une entrée par fichier, dans l'ordre du manifeste.

        Lève `FileMappingFailure` si une entrée est mal formée.
        """
        ...
