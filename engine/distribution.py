"""Halbjahres-Verteilung: Kompakte Angaben wie "both", "1", "2" oder "3-1"
in Wochenstunden pro Halbjahr übersetzen.

Beim Massenimport steht pro Zeile eine Gesamt-Stundenzahl und optional ein
Verteilungs-Kürzel. Daraus entstehen null, eine oder zwei Zuweisungen:

  ""/"both"  →  (total, total)   Beide Halbjahre, jeweils volle Stundenzahl
  "1"        →  (total, 0)
  "2"        →  (0, total)
  "a-b"      →  (a, b)           Wörtlich; nicht lesbare Zahl → (total, total)
  sonstiges  →  (total, total)

"both" ist KEINE Aufteilung: es entstehen zwei unabhängige volle Zuweisungen.
"""

import logging
import math
from typing import Optional, Union

from models.assignment import Semester

logger = logging.getLogger(__name__)

Hours = Union[int, float]


def to_hours(raw) -> Optional[float]:
    """Zahl (auch "1,5") → float; None wenn nicht lesbar oder nicht endlich."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip().replace(",", ".")
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    return value if math.isfinite(value) else None


def parse_distribution(total: Hours, tag: Optional[str] = None) -> tuple[float, float]:
    """Gibt (Stunden Halbjahr 1, Stunden Halbjahr 2) für eine Verteilungsangabe zurück."""
    total = float(total)
    tag = (tag or "").strip()

    if not tag or tag.lower() == "both":
        return total, total
    if tag == "1":
        return total, 0.0
    if tag == "2":
        return 0.0, total
    if "-" in tag:
        parts = tag.split("-")
        if len(parts) == 2:
            s1 = to_hours(parts[0])
            s2 = to_hours(parts[1])
            if s1 is not None and s2 is not None:
                return s1, s2
        logger.warning(
            f"Verteilung '{tag}' nicht lesbar – verwende {total:g}h in beiden Halbjahren"
        )
        return total, total

    logger.warning(
        f"Unbekannte Verteilung '{tag}' – verwende {total:g}h in beiden Halbjahren"
    )
    return total, total


def expand_distribution(
    total, tag: Optional[str] = None
) -> list[tuple[Semester, float]]:
    """Übersetzt Gesamtstunden + Verteilung in (Halbjahr, Stunden)-Paare.

    Ein Halbjahr erscheint nur, wenn seine Stunden > 0 sind. Ist total keine
    positive Zahl, wird eine leere Liste zurückgegeben.
    """
    total_hours = to_hours(total)
    if total_hours is None or total_hours <= 0:
        return []

    s1, s2 = parse_distribution(total_hours, tag)
    result: list[tuple[Semester, float]] = []
    if s1 > 0:
        result.append((Semester.FIRST, s1))
    if s2 > 0:
        result.append((Semester.SECOND, s2))
    return result
