"""Ergebnis von Stapel-Operationen (Import, Nachtrag Halbjahr 2, Matrix-Speichern)."""

from pydantic import BaseModel


class BatchResult(BaseModel):
    """Zählt erfolgreiche, übersprungene und fehlgeschlagene Datensätze.

    skipped = erwartbar (unvollständige Zeile, unbekanntes Kürzel),
    errored = unerwartet (Speichern fehlgeschlagen).
    """

    succeeded: int = 0
    skipped: int = 0
    errored: int = 0
    messages: list[str] = []

    @property
    def total(self) -> int:
        return self.succeeded + self.skipped + self.errored

    @property
    def ok(self) -> bool:
        return self.errored == 0

    def skip(self, message: str = "") -> None:
        self.skipped += 1
        if message:
            self.messages.append(message)

    def fail(self, message: str) -> None:
        self.errored += 1
        self.messages.append(message)

    def summary(self) -> str:
        return (
            f"{self.succeeded} übernommen, {self.skipped} übersprungen, "
            f"{self.errored} fehlgeschlagen"
        )

    def print_rich(self, title: str = "Ergebnis") -> None:
        """Gibt das Ergebnis formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        lines = [
            f"[green]✓ Übernommen:[/green]     {self.succeeded}",
            f"[yellow]• Übersprungen:[/yellow]  {self.skipped}",
            f"[red]✗ Fehlgeschlagen:[/red] {self.errored}",
        ]
        if self.messages:
            lines.append("")
            for m in self.messages[:20]:
                lines.append(f"  [dim]{m}[/dim]")
            if len(self.messages) > 20:
                lines.append(f"  [dim]... {len(self.messages) - 20} weitere[/dim]")
        console.print(Panel("\n".join(lines), title=title, border_style="cyan"))
