"""
Types de données échangés entre les étapes du pipeline d'ingest.

Ce module définit les modèles Pydantic pour le verdict de validation, la description de dataset au
format Dataverse (blocs de métadonnées) et les entrées de fichiers à téléverser.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

PRIMITIVE = "primitive"
COMPOUND = "compound"
CONTROLLED_VOCABULARY = "controlledVocabulary"


class ValidationVerdict(BaseModel):
    """
    Verdict du validateur de bags.

    `compliant=False` est un résultat valide (appel réussi, bag non conforme), pas une erreur.
    """

    model_config = ConfigDict(frozen=True)

    compliant: bool
    profile_version: str = ""
    violations: list[tuple[str, str]] = Field(default_factory=list)


class MetadataField(BaseModel):
    """Champ d'un bloc de métadonnées Dataverse (`typeName`, `typeClass`, `value`)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type_name: str = Field(alias="typeName")
    multiple: bool
    type_class: str = Field(alias="typeClass")
    value: str | list[str] | dict[str, MetadataField] | list[dict[str, MetadataField]]

    @classmethod
    def primitive(cls, name: str, value: str | list[str], multiple: bool = False) -> MetadataField:
        return cls(type_name=name, multiple=multiple, type_class=PRIMITIVE, value=value)

    @classmethod
    def controlled(
        cls, name: str, value: str | list[str], multiple: bool = False
    ) -> MetadataField:
        return cls(type_name=name, multiple=multiple, type_class=CONTROLLED_VOCABULARY, value=value)

    @classmethod
    def compound(cls, name: str, values: list[dict[str, MetadataField]]) -> MetadataField:
        return cls(type_name=name, multiple=True, type_class=COMPOUND, value=values)


class MetadataBlock(BaseModel):
    """Bloc de métadonnées (ex. `citation`)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    display_name: str = Field(alias="displayName")
    fields: list[MetadataField] = Field(default_factory=list)


class DatasetVersion(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    metadata_blocks: dict[str, MetadataBlock] = Field(alias="metadataBlocks")


class DatasetDescription(BaseModel):
    """
    Représentation cible d'un dataset Dataverse.

    Sérialisée (par alias) vers `{"datasetVersion": {"metadataBlocks": {...}}}`, le corps attendu
    par les endpoints de création et d'import.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dataset_version: DatasetVersion = Field(alias="datasetVersion")

    def get_field(self, type_name: str, block: str = "citation") -> MetadataField | None:
        """Retourne le champ `type_name` du bloc `block`, ou None."""
        for f in self.dataset_version.metadata_blocks[block].fields:
            if f.type_name == type_name:
                return f
        return None


class FileMetadata(BaseModel):
    """Métadonnées par fichier transmises en `jsonData` lors de l'ajout."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str
    directory_label: str | None = Field(default=None, alias="directoryLabel")
    restrict: bool
    description: str | None = None


class FileEntry(BaseModel):
    """Fichier du bag à attacher: référence sur disque (jamais chargée en mémoire) + métadonnées."""

    model_config = ConfigDict(frozen=True)

    file: Path
    metadata: FileMetadata


MetadataField.model_rebuild()
