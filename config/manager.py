"""Konfigurationsmanager für config/engine_config.yaml.

Die Datei wird mit ruamel.yaml geschrieben, damit die deutschen
Abschnitts-Kommentare beim Speichern erhalten bleiben.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap
from ruamel.yaml.error import YAMLError

from config.schema import EngineConfig

logger = logging.getLogger(__name__)
console = Console()

yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120

DEFAULT_CONFIG_PATH = Path("config") / "engine_config.yaml"


# ─── Kopf und Abschnitts-Kommentare ───

_YAML_HEADER = f"""\
# ============================================
# Unterrichtsverteilung: Konfiguration
# Stand: {date.today().isoformat()}
# ============================================
"""

# Abschnitt → (Überschrift, Erläuterung)
_SECTION_COMMENTS = {
    "workload": (
        "Deputat & Auslastung",
        "Anteile beziehen sich auf das Deputat (max_hours) der Lehrkraft.\n"
        "Aktuelle Stunden = Maximum aus Halbjahr 1 und Halbjahr 2.",
    ),
    "conflicts": (
        "Konfliktprüfung",
        "exact = Kürzel/Name exakt, substring = Kürzel als Teil einer Qualifikation.",
    ),
    "imports": (
        "Import",
        "delimiter: null = automatische Erkennung.",
    ),
    "matrix": (
        "Klassen-Matrix",
        "atomic_save: true = bei Fehler werden alle Zellen zurückgerollt.",
    ),
}


class ConfigManager:
    """Liest und schreibt die Engine-Konfiguration einer Schule."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    def first_run_check(self) -> bool:
        """True solange noch keine Konfigurationsdatei angelegt wurde."""
        return not self.path.exists()

    def load(self, path: Optional[Path] = None) -> EngineConfig:
        """Liest die YAML-Datei; fehlende Abschnitte werden mit Standardwerten gefüllt.

        Raises:
            FileNotFoundError: Datei existiert nicht.
            ValueError: YAML nicht lesbar oder Werte ungültig.
        """
        source = Path(path) if path is not None else self.path
        if not source.exists():
            raise FileNotFoundError(
                f"Keine Konfiguration unter {source}.\n"
                f"Mit 'python main.py init' wird eine Standard-Konfiguration angelegt."
            )
        try:
            with open(source, encoding="utf-8") as f:
                raw = yaml.load(f) or {}
        except YAMLError as e:
            raise ValueError(f"{source} ist kein gültiges YAML: {e}") from e
        try:
            config = EngineConfig.model_validate(dict(raw))
        except ValidationError as e:
            raise ValueError(f"Ungültige Werte in {source}:\n{e}") from e
        logger.debug(f"Konfiguration geladen: {source}")
        return config

    def load_or_default(self) -> EngineConfig:
        """Wie load(), ohne Datei gilt die Standard-Konfiguration."""
        if self.first_run_check():
            from config.defaults import default_engine_config
            logger.info(f"{self.path} fehlt, verwende Standard-Konfiguration")
            return default_engine_config()
        return self.load()

    def save(self, config: EngineConfig, path: Optional[Path] = None) -> Path:
        """Schreibt die Konfiguration mit Kommentaren; gibt den Zielpfad zurück."""
        target = Path(path) if path is not None else self.path
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(self._commented(config), f)
        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")
        return target

    @staticmethod
    def _commented(config: EngineConfig) -> CommentedMap:
        doc = CommentedMap(json.loads(config.model_dump_json()))
        for key, (title, note) in _SECTION_COMMENTS.items():
            before = f"\n─── {title} ───"
            if note:
                before += f"\n{note}"
            doc.yaml_set_comment_before_after_key(key, before=before)
        return doc
