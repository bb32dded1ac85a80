"""
Script d'ingest d'un dépôt unique dans Dataverse.

Ce script charge un répertoire de dépôt (`deposit.properties` + un bag), exécute le pipeline
validate -> map -> create/import -> upload -> publish|draft et affiche une ligne de résumé.

Codes de sortie: 0 succès, 1 échec d'ingest, 2 dépôt illisible.
"""

from __future__ import annotations

import argparse
import sys

from dataverse_ingest.app.metrics import write_metrics_textfile
from dataverse_ingest.core.container import Container
from dataverse_ingest.core.logging import setup_logging
from dataverse_ingest.core.settings import get_settings
from dataverse_ingest.domain.deposit import Deposit
from dataverse_ingest.domain.errors import DepositLoadError

EXIT_OK = 0
EXIT_INGEST_FAILED = 1
EXIT_BAD_DEPOSIT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dd2d-ingest",
        description="Ingestion d'un dépôt (bag) dans Dataverse",
    )
    parser.add_argument("deposit", help="Répertoire du dépôt à ingérer")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--publish",
        dest="publish",
        action="store_true",
        default=None,
        help="Publier le dataset (version majeure) après ajout des fichiers",
    )
    mode.add_argument(
        "--draft",
        dest="publish",
        action="store_false",
        help="Laisser le dataset en draft",
    )
    parser.add_argument(
        "--metrics-file",
        default=None,
        help="Écrire les métriques Prometheus dans ce fichier (format textfile)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Point d'entrée: ingère le dépôt et retourne le code de sortie."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    try:
        deposit = Deposit.from_directory(args.deposit)
    except DepositLoadError as exc:
        print(f"[ingest] {exc}", file=sys.stderr)
        return EXIT_BAD_DEPOSIT

    container = Container(settings)
    try:
        outcome = container.make_task(deposit, publish=args.publish).run()
    finally:
        container.close()
    print(outcome.summary())

    metrics_file = args.metrics_file or settings.METRICS_TEXTFILE
    if metrics_file:
        write_metrics_textfile(metrics_file)
    return EXIT_OK if outcome.succeeded else EXIT_INGEST_FAILED


if __name__ == "__main__":
    sys.exit(main())
