"""Kaskadierendes Löschen von Fachbereichen, Jahren und Semestern.

Jede Kaskade läuft sequentiell und nach dem Best-Effort-Prinzip: schlägt das
Löschen eines Studienabschnitts fehl, wird mit den übrigen weitergemacht.
Das Ergebnis (CascadeResult) unterscheidet vollständigen Erfolg, Teilerfolg
und vollständiges Scheitern. Eine gestartete Kaskade lässt sich nicht abbrechen.

Alle Kaskaden verlangen eine ausdrückliche Bestätigung über den
confirm-Callback (z.B. click.confirm).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Literal

from pydantic import BaseModel

from models.academic_detail import AcademicDetail
from structure.errors import CascadePartialFailure, NotFoundError, TransportError

if TYPE_CHECKING:
    from structure.store import StructureStore

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str], bool]
CascadeKind = Literal["department", "year", "semester", "department_year"]
CascadeStatus = Literal["succeeded", "partial", "failed", "nothing_to_delete", "cancelled"]


class CascadeResult(BaseModel):
    """Ergebnis einer Kaskade mit Zählern für Erfolg und Fehler."""

    kind: CascadeKind
    target: str                 # "Fachbereich 'CS'", "Jahr 2", ...
    attempted: int = 0          # betroffene Studienabschnitte
    succeeded: int = 0
    failed: int = 0
    errors: list[str] = []
    parent_deleted: bool = False  # nur bei kind="department"
    cancelled: bool = False

    @property
    def status(self) -> CascadeStatus:
        if self.cancelled:
            return "cancelled"
        if self.attempted == 0:
            return "succeeded" if self.parent_deleted else "nothing_to_delete"
        if self.failed == 0:
            return "succeeded"
        if self.succeeded == 0:
            return "failed"
        return "partial"

    def summary(self) -> str:
        """Lesbare Zusammenfassung für die Ausgabe."""
        status = self.status
        if status == "cancelled":
            return f"{self.target}: abgebrochen, nichts gelöscht."
        if status == "nothing_to_delete":
            return f"{self.target}: nichts zu löschen."
        if status == "succeeded":
            if self.attempted == 0:
                return f"{self.target} gelöscht (keine zugehörigen Studienabschnitte)."
            return f"{self.target}: alle {self.attempted} Studienabschnitte gelöscht."
        if status == "partial":
            return (
                f"{self.target}: teilweise gelöscht ({self.succeeded} von {self.attempted}), "
                f"{self.failed} fehlgeschlagen."
            )
        return f"{self.target}: Löschen fehlgeschlagen (0 von {self.attempted})."

    def raise_for_status(self) -> None:
        """Wirft CascadePartialFailure bei Teilerfolg oder Scheitern."""
        if self.status in ("partial", "failed"):
            raise CascadePartialFailure(self)

    def print_rich(self) -> None:
        """Gibt das Ergebnis formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        color = {"succeeded": "green", "partial": "yellow", "failed": "red"}.get(
            self.status, "cyan")
        lines = [f"[bold {color}]{self.summary()}[/bold {color}]"]
        for e in self.errors:
            lines.append(f"  [red]• {e}[/red]")
        console.print(Panel("\n".join(lines), title="Löschen", border_style="cyan"))


class CascadeCoordinator:
    """Führt die Kaskaden über dem Backend eines StructureStore aus."""

    def __init__(self, store: "StructureStore"):
        self.store = store

    # ─── Kaskaden ───

    def delete_department(self, name: str, confirm: ConfirmFn) -> CascadeResult:
        """Löscht den Fachbereich und danach alle seine Studienabschnitte."""
        department = self.store.require_department(name)
        targets = [d for d in self.store.details if d.department == name]
        result = CascadeResult(kind="department", target=f"Fachbereich '{name}'",
                               attempted=len(targets))
        message = (
            f"Fachbereich '{name}' wirklich löschen? Dabei werden auch alle "
            f"{len(targets)} zugehörigen Studienabschnitte gelöscht."
        )
        if not confirm(message):
            return result.model_copy(update={"cancelled": True, "attempted": 0})

        logger.info(f"Lösche Fachbereich '{name}' ({len(targets)} Studienabschnitte)")
        try:
            self.store.call(self.store.backend.delete_department, department.id)
            result.parent_deleted = True
            self._delete_all(targets, result)
        finally:
            self.store.refresh()
        return result

    def delete_year(self, year: int, confirm: ConfirmFn) -> CascadeResult:
        """Löscht Jahr `year` in ALLEN Fachbereichen."""
        targets = [d for d in self.store.details if d.year == year]
        return self._run(
            CascadeResult(kind="year", target=f"Jahr {year}"),
            targets,
            f"Alle Konfigurationen für Jahr {year} löschen? Jahr {year} wird aus allen "
            f"Fachbereichen entfernt ({len(targets)} Studienabschnitte).",
            confirm,
        )

    def delete_semester(self, year: int, semester: int, confirm: ConfirmFn) -> CascadeResult:
        """Löscht Semester `semester` von Jahr `year` in ALLEN Fachbereichen."""
        targets = [d for d in self.store.details
                   if d.year == year and d.semester == semester]
        return self._run(
            CascadeResult(kind="semester", target=f"Semester {semester} von Jahr {year}"),
            targets,
            f"Semester {semester} von Jahr {year} in allen Fachbereichen löschen "
            f"({len(targets)} Studienabschnitte)?",
            confirm,
        )

    def delete_department_year(self, department: str, year: int,
                               confirm: ConfirmFn) -> CascadeResult:
        """Löscht Jahr `year` nur im angegebenen Fachbereich."""
        self.store.require_department(department)
        targets = [d for d in self.store.details
                   if d.department == department and d.year == year]
        return self._run(
            CascadeResult(kind="department_year",
                          target=f"Jahr {year} im Fachbereich '{department}'"),
            targets,
            f"Jahr {year} im Fachbereich '{department}' löschen "
            f"({len(targets)} Studienabschnitte)?",
            confirm,
        )

    # ─── Ausführung ───

    def _run(self, result: CascadeResult, targets: list[AcademicDetail],
             message: str, confirm: ConfirmFn) -> CascadeResult:
        if not targets:
            logger.info(f"{result.target}: nichts zu löschen")
            return result
        if not confirm(message):
            return result.model_copy(update={"cancelled": True})

        result.attempted = len(targets)
        logger.info(f"Lösche {result.target} ({len(targets)} Studienabschnitte)")
        try:
            self._delete_all(targets, result)
        finally:
            self.store.refresh()
        return result

    def _delete_all(self, targets: list[AcademicDetail], result: CascadeResult) -> None:
        for detail in targets:
            label = detail.key.label()
            try:
                self.store.call(self.store.backend.delete_detail, detail.id)
            except NotFoundError:
                # Bereits entfernt: Zielzustand erreicht
                logger.debug(f"  {label}: bereits gelöscht")
                result.succeeded += 1
                continue
            except TransportError as e:
                logger.warning(f"  {label}: Löschen fehlgeschlagen: {e}")
                result.failed += 1
                result.errors.append(f"{label}: {e}")
                continue
            logger.info(f"  {label}: gelöscht")
            result.succeeded += 1
        logger.info(result.summary())

