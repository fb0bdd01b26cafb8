"""Nachtrag fehlender Halbjahr-2-Zuweisungen und Halbjahres-Abgleich.

Zuweisungen aus Halbjahr 1 ohne Gegenstück (Lehrkraft, Fach, Klasse) in
Halbjahr 2 werden als Kopie mit semester="2" vorgeschlagen. Die Vorschläge
werden nur ausgegeben, nie direkt geändert; gespeichert wird über die
normalen Anlege-Operationen der Ablage.

Der Abgleich läuft nur in eine Richtung (1 → 2). Abweichende Stundenzahlen
zwischen den Halbjahren werden gemeldet (find_discrepancies), aber nicht
automatisch korrigiert.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from engine.normalizer import SlotKey, has_effective_hours, normalize_assignments, slot_key
from engine.results import BatchResult
from models.assignment import Assignment, Semester

if TYPE_CHECKING:
    from data.repository import SchoolRepository

logger = logging.getLogger(__name__)


def find_missing_semester2(assignments: Iterable[Assignment]) -> list[Assignment]:
    """Schlägt für jede Halbjahr-1-Zuweisung ohne Gegenstück eine Halbjahr-2-Kopie vor.

    Die Kopie übernimmt Stunden, Team-Gruppe und Optimierungs-Flag; die ID ist
    None (noch nicht gespeichert). Dubletten unter demselben Normalisierungs-
    Schlüssel ergeben nur einen Vorschlag (der mit den meisten Stunden), sonst
    entstünden beim Speichern sofort neue Dubletten. Verschiedene Team-Gruppen
    im selben Slot bleiben getrennte Vorschläge. Datensätze ohne Stunden
    werden nicht kopiert.
    """
    assignments = list(assignments)
    semester1 = [a for a in assignments if a.semester == Semester.FIRST]
    present = {a.slot for a in assignments if a.semester == Semester.SECOND}

    proposals: dict[SlotKey, Assignment] = {}
    for a in semester1:
        if a.slot in present or not has_effective_hours(a):
            continue
        copy = a.model_copy(update={"id": None, "semester": Semester.SECOND})
        key = slot_key(copy)
        current = proposals.get(key)
        if current is None or copy.hours_per_week > current.hours_per_week:
            proposals[key] = copy
    return list(proposals.values())


def apply_backfill(repository: "SchoolRepository", dry_run: bool = False
                   ) -> tuple[list[Assignment], BatchResult]:
    """Ermittelt fehlende Halbjahr-2-Zuweisungen und legt sie an.

    Einzelne Fehlschläge brechen den Lauf nicht ab, sie werden gezählt.
    Mit dry_run=True wird nichts gespeichert.
    """
    from data.repository import RepositoryError

    proposals = find_missing_semester2(repository.assignments())
    result = BatchResult()
    logger.info(f"Nachtrag Halbjahr 2: {len(proposals)} fehlende Zuweisungen gefunden")
    if dry_run:
        return proposals, result

    for proposal in proposals:
        try:
            repository.create_assignment(proposal)
            result.succeeded += 1
        except RepositoryError as e:
            logger.warning(f"Nachtrag fehlgeschlagen: {e}")
            result.fail(
                f"{proposal.teacher_id}/{proposal.subject_id}/{proposal.class_id}: {e}"
            )
    logger.info(f"Nachtrag Halbjahr 2: {result.summary()}")
    return proposals, result


# ─── Halbjahres-Abgleich (nur lesend) ─────────────────────────────────────────

def semester_coverage(assignments: Iterable[Assignment]
                      ) -> dict[tuple[str, str], set[Semester]]:
    """(Lehrkraft, Fach) → Menge der Halbjahre, in denen das Paar vorkommt."""
    coverage: dict[tuple[str, str], set[Semester]] = defaultdict(set)
    for a in assignments:
        coverage[(a.teacher_id, a.subject_id)].add(Semester(a.semester))
    return dict(coverage)


def uneven_subjects(assignments: Iterable[Assignment]
                    ) -> dict[tuple[str, str], Semester]:
    """Paare (Lehrkraft, Fach), die nur in einem Halbjahr unterrichtet werden."""
    return {
        pair: next(iter(semesters))
        for pair, semesters in semester_coverage(assignments).items()
        if len(semesters) == 1
    }


@dataclass
class SemesterDiscrepancy:
    """Unterschiedliche Stunden für denselben Slot in Halbjahr 1 und 2."""

    teacher_id: str
    subject_id: str
    class_id: str
    semester1_hours: float
    semester2_hours: float

    @property
    def difference(self) -> float:
        return self.semester2_hours - self.semester1_hours


def find_discrepancies(assignments: Iterable[Assignment]) -> list[SemesterDiscrepancy]:
    """Slots (Lehrkraft, Fach, Klasse), deren normalisierte Stunden sich zwischen
    den Halbjahren unterscheiden. Slots, die nur in einem Halbjahr vorkommen,
    sind Sache von find_missing_semester2 und erscheinen hier nicht."""
    per_slot: dict[tuple[str, str, str], dict[Semester, float]] = defaultdict(dict)
    for key, hours in normalize_assignments(assignments).items():
        slot = (key.teacher_id, key.subject_id, key.class_id)
        # Team- und Einzelschlüssel desselben Slots: größter Wert zählt
        per_slot[slot][key.semester] = max(per_slot[slot].get(key.semester, 0.0), hours)

    result: list[SemesterDiscrepancy] = []
    for (teacher_id, subject_id, class_id), by_sem in sorted(per_slot.items()):
        if Semester.FIRST not in by_sem or Semester.SECOND not in by_sem:
            continue
        if by_sem[Semester.FIRST] != by_sem[Semester.SECOND]:
            result.append(SemesterDiscrepancy(
                teacher_id=teacher_id,
                subject_id=subject_id,
                class_id=class_id,
                semester1_hours=by_sem[Semester.FIRST],
                semester2_hours=by_sem[Semester.SECOND],
            ))
    return result
