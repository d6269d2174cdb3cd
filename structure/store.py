"""StructureStore: Fachbereiche und Studienabschnitte samt Änderungsoperationen.

Der Store hält eine Momentaufnahme aller Datensätze. Jede Änderung wird
zuerst validiert, dann an das Backend geschickt; anschließend wird der
komplette Bestand neu gelesen (refresh). Abgeleitete Sichten werden nie
zwischengespeichert, sondern bei jedem Aufruf aus der Momentaufnahme berechnet.
"""

import logging
from typing import Callable, Optional, TypeVar

from config.schema import StructureDefaults
from models.academic_detail import AcademicDetail, DetailKey
from models.department import Department
from models.subject import Subject
from structure import views
from structure.backend import StructureBackend
from structure.cascade import CascadeCoordinator, CascadeResult, ConfirmFn
from structure.errors import NotFoundError, StructureError, TransportError, ValidationError
from structure.validator import (
    StructureReport,
    check_code_unique,
    check_structure,
    normalize_section,
    normalize_subject,
    validate_department,
    validate_detail,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PATCH_FIELDS = {"sections", "subjects", "credits"}


class StructureStore:
    """Zentrale Verwaltung der Studienstruktur über einem StructureBackend."""

    def __init__(self, backend: StructureBackend,
                 defaults: Optional[StructureDefaults] = None):
        self.backend = backend
        self.defaults = defaults or StructureDefaults()
        self.departments: list[Department] = []
        self.details: list[AcademicDetail] = []
        self.raw_records: list[dict] = []
        self.cascades = CascadeCoordinator(self)
        self.refresh()

    # ─── Backend-Zugriff ───

    def call(self, fn: Callable[..., T], *args) -> T:
        """Ruft das Backend auf; unerwartete Fehler werden zu TransportError."""
        try:
            return fn(*args)
        except StructureError:
            raise
        except Exception as e:
            raise TransportError(f"Backend-Aufruf {fn.__name__} fehlgeschlagen: {e}") from e

    def refresh(self) -> None:
        """Liest Fachbereiche und Studienabschnitte komplett neu ein."""
        self.departments = [Department.from_record(r)
                            for r in self.call(self.backend.list_departments)]
        self.raw_records = self.call(self.backend.list_details)
        self.details = [AcademicDetail.from_record(r) for r in self.raw_records]

    # ─── Nachschlagen ───

    def get_department(self, name: str) -> Optional[Department]:
        return next((d for d in self.departments if d.name == name), None)

    def require_department(self, name: str) -> Department:
        department = self.get_department(name)
        if department is None:
            raise NotFoundError(f"Fachbereich '{name}' nicht gefunden")
        return department

    def get_detail(self, key: DetailKey) -> Optional[AcademicDetail]:
        key = DetailKey(*key)
        return next((d for d in self.details if d.key == key), None)

    def require_detail(self, key: DetailKey) -> AcademicDetail:
        detail = self.get_detail(key)
        if detail is None:
            raise NotFoundError(
                f"Studienabschnitt {DetailKey(*key).label()} nicht gefunden. "
                f"Bitte zuerst gültigen Fachbereich, Jahr und Semester wählen."
            )
        return detail

    # ─── Fachbereiche ───

    def add_department(self, name: str, code: str, description: str = "") -> Department:
        department = Department(name=name, code=code, description=description or "")
        validate_department(department, self.departments)
        stored = self.call(self.backend.create_department, department.to_record())
        logger.info(f"Fachbereich angelegt: {department.name} ({department.code})")
        self.refresh()
        return Department.from_record(stored)

    def update_department(self, name: str, *, new_name: Optional[str] = None,
                          code: Optional[str] = None,
                          description: Optional[str] = None) -> Department:
        """Ändert einen Fachbereich. Eine Umbenennung zieht die Studienabschnitte mit."""
        current = self.require_department(name)
        updated = Department(
            id=current.id,
            name=new_name if new_name is not None else current.name,
            code=code if code is not None else current.code,
            description=description if description is not None else current.description,
        )
        validate_department(updated, self.departments, editing_id=current.id)
        stored = self.call(self.backend.update_department, current.id, updated.to_record())

        if updated.name != current.name:
            for detail in [d for d in self.details if d.department == current.name]:
                moved = detail.model_copy(update={"department": updated.name})
                self.call(self.backend.update_detail, detail.id, moved.to_record())
            logger.info(f"Fachbereich umbenannt: {current.name} → {updated.name}")
        self.refresh()
        return Department.from_record(stored)

    # ─── Studienabschnitte ───

    def upsert_academic_detail(self, department: str, year: int, semester: int,
                               patch: Optional[dict] = None, *,
                               allow_new_semester: bool = False) -> AcademicDetail:
        """Legt den Studienabschnitt an oder ersetzt sections/subjects/credits.

        patch-Felder werden komplett ersetzt, nicht zusammengeführt. Neue
        Datensätze bekommen leere Abschnitte/Fächer und die Default-Credits.
        """
        patch = dict(patch or {})
        unknown = set(patch) - _PATCH_FIELDS
        if unknown:
            raise ValidationError(", ".join(sorted(unknown)), "Unbekanntes Feld")

        key = DetailKey(department, year, semester)
        validate_detail(
            key, self.departments, self.details,
            sections=patch.get("sections"),
            subjects=patch.get("subjects"),
            credits=patch.get("credits"),
            allow_new_semester=allow_new_semester,
        )
        update: dict = {}
        if "sections" in patch:
            update["sections"] = [normalize_section(s) for s in patch["sections"]]
        if "subjects" in patch:
            update["subjects"] = [normalize_subject(s) for s in patch["subjects"]]
        if patch.get("credits") is not None:
            update["credits"] = patch["credits"]

        existing = self.get_detail(key)
        if existing is not None:
            detail = existing.model_copy(update=update)
            self.call(self.backend.update_detail, existing.id, detail.to_record())
            logger.info(f"Studienabschnitt aktualisiert: {key.label()}")
        else:
            detail = AcademicDetail(
                department=department, year=year, semester=semester,
                credits=self.defaults.default_credits,
            ).model_copy(update=update)
            record = detail.to_record()
            record.pop("id")
            self.call(self.backend.create_detail, record)
            logger.info(f"Studienabschnitt angelegt: {key.label()}")

        self.refresh()
        return self.require_detail(key)

    def delete_academic_detail(self, key: DetailKey) -> None:
        """Löscht genau einen Studienabschnitt."""
        detail = self.require_detail(key)
        self.call(self.backend.delete_detail, detail.id)
        logger.info(f"Studienabschnitt gelöscht: {detail.key.label()}")
        self.refresh()

    def configure_year(self, year: int, semesters: Optional[list[int]] = None,
                       department: Optional[str] = None) -> list[AcademicDetail]:
        """Legt für jeden Fachbereich (oder nur `department`) die Semester eines Jahres an.

        Fehlende Studienabschnitte bekommen den Default-Abschnitt; bestehende
        bleiben unverändert. Gibt die neu angelegten Datensätze zurück.
        """
        semesters = list(semesters or self.defaults.default_semesters)
        if year is None or year < 1:
            raise ValidationError("year", "Jahr muss eine positive Zahl sein")
        invalid = [s for s in semesters if s < 1]
        if invalid:
            raise ValidationError(
                "semesters",
                f"Ungültige Semester {', '.join(str(s) for s in invalid)}. "
                f"Semester müssen positive Zahlen sein.",
            )
        if department is not None:
            names = [self.require_department(department).name]
        else:
            names = [d.name for d in self.departments]
        if not names:
            raise ValidationError(
                "department",
                "Keine Fachbereiche vorhanden. Bitte zuerst einen Fachbereich anlegen.",
            )

        created: list[DetailKey] = []
        for name in names:
            for semester in sorted(set(semesters)):
                key = DetailKey(name, year, semester)
                if self.get_detail(key) is not None:
                    continue
                validate_detail(key, self.departments, self.details, allow_new_semester=True)
                detail = AcademicDetail(
                    department=name, year=year, semester=semester,
                    sections=[self.defaults.default_section],
                    credits=self.defaults.default_credits,
                )
                record = detail.to_record()
                record.pop("id")
                self.call(self.backend.create_detail, record)
                created.append(key)
        logger.info(f"Jahr {year} konfiguriert: {len(created)} Studienabschnitte angelegt")
        self.refresh()
        return [self.require_detail(k) for k in created]

    # ─── Abschnitte ───

    def add_section(self, key: DetailKey, letter: str) -> AcademicDetail:
        """Fügt einen Abschnitt hinzu ('c' → 'C'); vorhandene Buchstaben sind ein No-op."""
        letter = normalize_section(letter)
        key = DetailKey(*key)
        detail = self.get_detail(key)
        current = list(detail.sections) if detail else []
        if detail is not None and letter in current:
            return detail
        return self.upsert_academic_detail(*key, {"sections": current + [letter]})

    def remove_section(self, key: DetailKey, index: int,
                       expected: Optional[str] = None) -> AcademicDetail:
        """Entfernt den Abschnitt an Position `index` der angezeigten Liste.

        Ein veralteter Index (oder ein abweichender `expected`-Buchstabe)
        ändert nichts und führt zu NotFoundError.
        """
        detail = self.require_detail(key)
        sections = list(detail.sections)
        if not 0 <= index < len(sections):
            raise NotFoundError(
                f"Abschnitt Nr. {index} in {detail.key.label()} nicht gefunden"
            )
        if expected is not None and sections[index] != expected.strip().upper():
            raise NotFoundError(
                f"Abschnitt '{expected}' steht nicht mehr an Position {index} "
                f"in {detail.key.label()}"
            )
        removed = sections.pop(index)
        logger.info(f"Abschnitt {removed} aus {detail.key.label()} entfernt")
        return self.upsert_academic_detail(*detail.key, {"sections": sections})

    # ─── Fächer ───

    def add_or_update_subject(self, key: DetailKey, subject: Subject,
                              editing_original_token: Optional[str] = None) -> AcademicDetail:
        """Fügt ein Fach an oder ersetzt das Fach mit dem Token `editing_original_token`.

        Der Fachcode muss im gesamten Bestand eindeutig sein; ausgenommen ist
        nur das gerade bearbeitete Fach. Hat das Fach eigene Credits, werden
        sie zu den Credits des Studienabschnitts.
        """
        detail = self.require_detail(key)
        subject = normalize_subject(subject)
        check_code_unique(subject, self.details, detail.key, editing_original_token)

        subjects = list(detail.subjects)
        if editing_original_token is not None:
            tokens = [s.token for s in subjects]
            if editing_original_token not in tokens:
                raise NotFoundError(
                    f"Fach '{editing_original_token}' in {detail.key.label()} nicht gefunden"
                )
            subjects[tokens.index(editing_original_token)] = subject
        else:
            subjects.append(subject)

        patch: dict = {"subjects": subjects}
        if subject.credits is not None:
            patch["credits"] = subject.credits
        return self.upsert_academic_detail(*detail.key, patch)

    def remove_subject(self, key: DetailKey, index: int,
                       expected_code: Optional[str] = None) -> AcademicDetail:
        """Entfernt das Fach an Position `index`; gleiche Regeln wie remove_section."""
        detail = self.require_detail(key)
        subjects = list(detail.subjects)
        if not 0 <= index < len(subjects):
            raise NotFoundError(f"Fach Nr. {index} in {detail.key.label()} nicht gefunden")
        if expected_code is not None and subjects[index].code != expected_code.strip().upper():
            raise NotFoundError(
                f"Fach {expected_code} steht nicht mehr an Position {index} "
                f"in {detail.key.label()}"
            )
        removed = subjects.pop(index)
        logger.info(f"Fach {removed.token} aus {detail.key.label()} entfernt")
        return self.upsert_academic_detail(*detail.key, {"subjects": subjects})

    # ─── Kaskaden ───

    def delete_department(self, name: str, confirm: ConfirmFn) -> CascadeResult:
        return self.cascades.delete_department(name, confirm)

    def delete_year(self, year: int, confirm: ConfirmFn) -> CascadeResult:
        return self.cascades.delete_year(year, confirm)

    def delete_semester(self, year: int, semester: int, confirm: ConfirmFn) -> CascadeResult:
        return self.cascades.delete_semester(year, semester, confirm)

    def delete_department_year(self, department: str, year: int,
                               confirm: ConfirmFn) -> CascadeResult:
        return self.cascades.delete_department_year(department, year, confirm)

    # ─── Sichten ───

    def year_semester_index(self) -> dict[int, list[int]]:
        return views.year_semester_index(self.details)

    def sections_for(self, department: str, year: int, semester: int) -> list[str]:
        return views.sections_for(self.details, department, year, semester)

    def subjects_for(self, department: str, year: int, semester: int) -> list[Subject]:
        return views.subjects_for(self.details, department, year, semester)

    def filter(self, department: Optional[str] = None, year: Optional[int] = None,
               semester: Optional[int] = None) -> list[AcademicDetail]:
        return views.filter_details(self.details, department, year, semester)

    def check(self) -> StructureReport:
        """Gesamtprüfung des Bestands inkl. verworfener Alt-Tokens."""
        return check_structure(self.departments, self.details, self.raw_records)
