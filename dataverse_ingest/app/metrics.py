"""
Métriques Prometheus de l'ingest.

Ce module définit les métriques Prometheus du pipeline (issues des tentatives, échecs et latence
par étape, fichiers téléversés, drafts orphelins) et leur export au format textfile pour le node
exporter.
"""

from prometheus_client import REGISTRY, Counter, Histogram, write_to_textfile

INGEST_RUNS_TOTAL = Counter(
    "dd2d_ingest_runs_total",
    "Total ingest attempts by outcome",
    ["outcome"],
)
INGEST_STAGE_FAILURES_TOTAL = Counter(
    "dd2d_ingest_stage_failures_total",
    "Ingest failures by pipeline stage and failure kind",
    ["stage", "kind"],
)
INGEST_STAGE_LATENCY = Histogram(
    "dd2d_ingest_stage_latency_seconds",
    "Latency of ingest pipeline stages",
    ["stage"],
)
FILES_UPLOADED_TOTAL = Counter(
    "dd2d_files_uploaded_total",
    "Files added to datasets",
    ["result"],
)
ORPHAN_DATASETS_TOTAL = Counter(
    "dd2d_orphan_datasets_total",
    "Datasets left incomplete after a failed ingest",
    ["action"],
)


def write_metrics_textfile(path: str) -> None:
    """Écrit le registre par défaut dans `path` (écriture atomique par prometheus_client)."""
    write_to_textfile(path, REGISTRY)
