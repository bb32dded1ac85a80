"""Interface du validateur de bags (profil DANS)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from dataverse_ingest.domain.types import ValidationVerdict


class ValidatorError(RuntimeError):
    """L'appel au validateur a échoué (réseau, statut HTTP, réponse illisible)."""


class BagValidator(ABC):
    """Interface abstraite pour la validation d'un bag contre un profil."""

    @abstractmethod
    def validate(self, bag_dir: Path) -> ValidationVerdict:
        """Valide le bag situé dans `bag_dir`.

        Un bag non conforme donne un verdict `compliant=False`; seules les pannes de l'appel
        lèvent `ValidatorError`.
        """
        ...
