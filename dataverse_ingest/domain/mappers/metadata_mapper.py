# ============================================================
# Module : dataverse_ingest/domain/mappers/metadata_mapper.py
# Objet  : DDM (dataset.xml, profil DANS) -> bloc `citation` Dataverse.
# Invariants :
#  - Aucune E/S, aucun accès réseau.
#  - Même entrée => sortie structurellement égale (ordre des champs fixe).
# ============================================================
"""Mapping des métadonnées DDM vers le schéma de dataset Dataverse."""

from __future__ import annotations

import re
from xml.etree import ElementTree

from dataverse_ingest.domain.errors import MappingFailure
from dataverse_ingest.domain.mappers.base import MetadataMapper
from dataverse_ingest.domain.types import (
    DatasetDescription,
    DatasetVersion,
    MetadataBlock,
    MetadataField,
)
from dataverse_ingest.domain.xmlns import NS, text_of

CITATION = "citation"
CITATION_DISPLAY_NAME = "Citation Metadata"

# Codes NARCIS (ddm:audience) -> vocabulaire `subject` de Dataverse.
# Résolution par plus long préfixe; les codes E* (hors discipline) tombent dans "Other".
NARCIS_SUBJECTS: dict[str, str] = {
    "D11": "Mathematical Sciences",
    "D12": "Physics",
    "D13": "Chemistry",
    "D14": "Engineering",
    "D15": "Earth and Environmental Sciences",
    "D16": "Computer and Information Science",
    "D17": "Astronomy and Astrophysics",
    "D18": "Agricultural Sciences",
    "D2": "Medicine, Health and Life Sciences",
    "D3": "Arts and Humanities",
    "D4": "Law",
    "D5": "Social Sciences",
    "D6": "Social Sciences",
    "D7": "Business and Management",
    "D8": "Other",
    "D9": "Other",
    "E": "Other",
}
_NARCIS_CODE = re.compile(r"^[DE]\d+$")

# ISO 639-1 / 639-2 -> vocabulaire `language` de Dataverse
LANGUAGES: dict[str, str] = {
    "en": "English",
    "eng": "English",
    "nl": "Dutch, Flemish",
    "nld": "Dutch, Flemish",
    "dut": "Dutch, Flemish",
    "de": "German",
    "deu": "German",
    "ger": "German",
    "fr": "French",
    "fra": "French",
    "fre": "French",
    "es": "Spanish, Castilian",
    "spa": "Spanish, Castilian",
    "it": "Italian",
    "ita": "Italian",
    "fy": "Western Frisian",
    "fry": "Western Frisian",
}
_LANGUAGE_NAMES = set(LANGUAGES.values())


def audience_to_subject(code: str) -> str:
    """Résout un code NARCIS en sujet Dataverse.

    Raises:
        MappingFailure: code mal formé ou sans correspondance.
    """
    if _NARCIS_CODE.match(code):
        for length in range(len(code), 0, -1):
            subject = NARCIS_SUBJECTS.get(code[:length])
            if subject:
                return subject
    raise MappingFailure(
        f"unrecognized audience code: {code!r}", details={"field": "audience", "value": code}
    )


def language_to_term(value: str) -> str:
    term = LANGUAGES.get(value.lower())
    if term:
        return term
    if value in _LANGUAGE_NAMES:
        return value
    raise MappingFailure(
        f"unrecognized language: {value!r}", details={"field": "language", "value": value}
    )


def _dedup(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _date_only(value: str) -> str:
    # ddm:created peut être un dateTime ISO
    return value[:10] if len(value) > 10 and value[10] == "T" else value


class DdmMapper(MetadataMapper):
    """Mapper par défaut: DDM DANS -> bloc `citation`.

    Champs obligatoires: titre, au moins un créateur, une description et une audience.
    """

    def map(self, ddm: ElementTree.Element) -> DatasetDescription:
        profile = ddm.find("ddm:profile", NS)
        if profile is None:
            raise MappingFailure("ddm:profile is missing", details={"field": "profile"})
        dcmi = ddm.find("ddm:dcmiMetadata", NS)

        fields: list[MetadataField] = [MetadataField.primitive("title", self._title(profile))]

        alternatives = self._texts(dcmi, "dcterms:alternative")
        if alternatives:
            fields.append(MetadataField.primitive("alternativeTitle", alternatives[0]))

        fields.append(MetadataField.compound("author", self._authors(profile)))
        fields.append(
            MetadataField.compound(
                "dsDescription",
                [
                    {"dsDescriptionValue": MetadataField.primitive("dsDescriptionValue", d)}
                    for d in self._descriptions(profile, dcmi)
                ],
            )
        )
        fields.append(
            MetadataField.controlled("subject", self._subjects(profile), multiple=True)
        )

        created = self._texts(profile, "ddm:created")
        if created:
            fields.append(MetadataField.primitive("productionDate", _date_only(created[0])))
        available = self._texts(profile, "ddm:available")
        if available:
            fields.append(MetadataField.primitive("distributionDate", _date_only(available[0])))

        keywords = _dedup(self._texts(dcmi, "dc:subject") + self._texts(dcmi, "dcterms:subject"))
        if keywords:
            fields.append(
                MetadataField.compound(
                    "keyword",
                    [{"keywordValue": MetadataField.primitive("keywordValue", k)} for k in keywords],
                )
            )

        languages = self._texts(dcmi, "dc:language") + self._texts(dcmi, "dcterms:language")
        if languages:
            fields.append(
                MetadataField.controlled(
                    "language", _dedup([language_to_term(v) for v in languages]), multiple=True
                )
            )

        return DatasetDescription(
            dataset_version=DatasetVersion(
                metadata_blocks={
                    CITATION: MetadataBlock(display_name=CITATION_DISPLAY_NAME, fields=fields)
                }
            )
        )

    @staticmethod
    def _texts(parent: ElementTree.Element | None, path: str) -> list[str]:
        if parent is None:
            return []
        return [t for t in (text_of(e) for e in parent.findall(path, NS)) if t]

    def _title(self, profile: ElementTree.Element) -> str:
        titles = self._texts(profile, "dc:title")
        if not titles:
            raise MappingFailure("mandatory field dc:title is missing", details={"field": "title"})
        return titles[0]

    def _authors(self, profile: ElementTree.Element) -> list[dict[str, MetadataField]]:
        authors: list[dict[str, MetadataField]] = []
        for details in profile.findall("dcx-dao:creatorDetails", NS):
            author = details.find("dcx-dao:author", NS)
            if author is not None:
                name = " ".join(
                    t
                    for t in (
                        text_of(author.find("dcx-dao:initials", NS)),
                        text_of(author.find("dcx-dao:insertions", NS)),
                        text_of(author.find("dcx-dao:surname", NS)),
                    )
                    if t
                )
                affiliation = text_of(author.find("dcx-dao:organization/dcx-dao:name", NS))
            else:
                name = text_of(details.find("dcx-dao:organization/dcx-dao:name", NS))
                affiliation = ""
            if not name:
                raise MappingFailure(
                    "creatorDetails without author or organization name",
                    details={"field": "author"},
                )
            entry = {"authorName": MetadataField.primitive("authorName", name)}
            if affiliation:
                entry["authorAffiliation"] = MetadataField.primitive(
                    "authorAffiliation", affiliation
                )
            authors.append(entry)
        for creator in self._texts(profile, "dc:creator"):
            authors.append({"authorName": MetadataField.primitive("authorName", creator)})
        if not authors:
            raise MappingFailure("at least one creator is required", details={"field": "author"})
        return authors

    def _descriptions(
        self, profile: ElementTree.Element, dcmi: ElementTree.Element | None
    ) -> list[str]:
        descriptions = (
            self._texts(profile, "dc:description")
            + self._texts(profile, "dcterms:description")
            + self._texts(dcmi, "dcterms:description")
        )
        if not descriptions:
            raise MappingFailure(
                "mandatory field dc:description is missing", details={"field": "description"}
            )
        return descriptions

    def _subjects(self, profile: ElementTree.Element) -> list[str]:
        codes = self._texts(profile, "ddm:audience")
        if not codes:
            raise MappingFailure(
                "mandatory field ddm:audience is missing", details={"field": "audience"}
            )
        return _dedup([audience_to_subject(c) for c in codes])
