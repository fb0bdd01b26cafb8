"""Engine: Halbjahres-Verteilung, Normalisierung, Auslastung, Konflikte, Nachtrag."""

from .distribution import parse_distribution, expand_distribution
from .normalizer import SlotKey, normalize_assignments, normalize_records
from .workload import Workload, WorkloadStatus, compute_workload, compute_all_workloads
from .conflicts import ConflictDetector, ConflictResult, ConflictStatus
from .backfill import (
    apply_backfill, find_discrepancies, find_missing_semester2,
    semester_coverage, uneven_subjects,
)
from .matrix import MatrixEditor, MatrixSaveError
from .results import BatchResult

__all__ = [
    "parse_distribution",
    "expand_distribution",
    "SlotKey",
    "normalize_assignments",
    "normalize_records",
    "Workload",
    "WorkloadStatus",
    "compute_workload",
    "compute_all_workloads",
    "ConflictDetector",
    "ConflictResult",
    "ConflictStatus",
    "apply_backfill",
    "find_discrepancies",
    "find_missing_semester2",
    "semester_coverage",
    "uneven_subjects",
    "MatrixEditor",
    "MatrixSaveError",
    "BatchResult",
]
