"""Beispieldaten für die Studienstruktur.

Legt die Fachbereiche aus SAMPLE_DEPARTMENTS und die Studienabschnitte aus
SAMPLE_CURRICULUM an. Bereits vorhandene Fachbereiche werden übersprungen,
vorhandene Studienabschnitte überschrieben.
"""

import logging

from config.defaults import SAMPLE_CURRICULUM, SAMPLE_DEPARTMENTS
from models.subject import Subject
from structure.store import StructureStore

logger = logging.getLogger(__name__)


class SampleDataBuilder:
    """Befüllt einen StructureStore mit einer kleinen Beispiel-Hochschule."""

    def __init__(self, store: StructureStore) -> None:
        self.store = store

    # ─── Fachbereiche ─────────────────────────────────────────────────────────

    def _build_departments(self) -> int:
        created = 0
        for name, code, description in SAMPLE_DEPARTMENTS:
            if self.store.get_department(name) is not None:
                logger.debug(f"Fachbereich {name} existiert bereits")
                continue
            self.store.add_department(name, code, description)
            created += 1
        return created

    # ─── Studienabschnitte ────────────────────────────────────────────────────

    def _build_details(self) -> int:
        count = 0
        for department, semesters in SAMPLE_CURRICULUM.items():
            for (year, semester), (sections, subjects, credits) in sorted(semesters.items()):
                self.store.upsert_academic_detail(
                    department, year, semester,
                    {
                        "sections": sections.split(","),
                        "subjects": [Subject(name=n, code=c, credits=credits)
                                     for n, c in subjects],
                        "credits": credits,
                    },
                    allow_new_semester=True,
                )
                count += 1
        return count

    def build(self) -> dict[str, int]:
        """Legt alles an und gibt die Anzahlen zurück."""
        stats = {
            "departments": self._build_departments(),
            "details": self._build_details(),
        }
        logger.info(
            f"Beispieldaten: {stats['departments']} Fachbereiche, "
            f"{stats['details']} Studienabschnitte"
        )
        return stats

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht des Bestands aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Beispieldaten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        details = self.store.details
        table.add_row("Fachbereiche", str(len(self.store.departments)),
                      ", ".join(d.code for d in self.store.departments))
        table.add_row("Studienabschnitte", str(len(details)),
                      f"{len(self.store.year_semester_index())} Jahre")
        table.add_row("Fächer", str(sum(len(d.subjects) for d in details)), "")
        console.print(table)
