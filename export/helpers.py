"""Gemeinsame Hilfsfunktionen für den Excel-Export."""

from datetime import date

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "header":      "4472C4",
    "overloaded":  "FF9999",
    "underloaded": "FFD4B3",
    "ok":          "B3FFB3",
}

def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")
