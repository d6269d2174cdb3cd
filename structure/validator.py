"""Validierung von Fachbereichen, Studienabschnitten, Abschnitten und Fächern.

Zwei Modi:
  - interaktiv: validate_* wirft beim ersten Fehler (ValidationError/ConflictError)
  - gesammelt:  detail_errors() liefert alle Fehler eines Datensatzes,
                check_structure() prüft den gesamten Bestand und liefert
                einen StructureReport.
"""

from collections import defaultdict
from typing import Iterable, Literal, Optional

from pydantic import BaseModel

from models.academic_detail import AcademicDetail, DetailKey
from models.department import Department
from models.subject import Subject
from structure.codec import (
    SECTION_RE,
    SUBJECT_CODE_RE,
    SUBJECT_TOKEN_RE,
    section_tokens,
    split_subject_tokens,
)
from structure.errors import ConflictError, StructureError, ValidationError

_FORBIDDEN_NAME_CHARS = ("(", ")", ",")


# ─── Einzelwerte ──────────────────────────────────────────────────────────────

def normalize_section(letter: str) -> str:
    """'c' → 'C'; alles außer genau einem Buchstaben A-Z ist ein Fehler."""
    value = (letter or "").strip().upper()
    if not SECTION_RE.match(value):
        raise ValidationError(
            "section", f"Abschnitt '{letter}' muss genau ein Buchstabe A-Z sein"
        )
    return value


def normalize_subject(subject: Subject) -> Subject:
    """Prüft Name, Code und Credits eines Fachs und normalisiert den Code."""
    name = subject.name.strip()
    if not name:
        raise ValidationError("subject.name", "Fachname darf nicht leer sein")
    bad = [c for c in _FORBIDDEN_NAME_CHARS if c in name]
    if bad:
        raise ValidationError(
            "subject.name",
            f"Fachname '{name}' darf keine Zeichen {' '.join(bad)} enthalten",
        )
    code = subject.code.strip().upper()
    if not SUBJECT_CODE_RE.match(code):
        raise ValidationError(
            "subject.code",
            f"Fachcode '{subject.code}' ungültig (Format: zwei Buchstaben + drei Ziffern, z.B. CS101)",
        )
    if subject.credits is not None and subject.credits < 1:
        raise ValidationError("subject.credits", "Credits müssen mindestens 1 sein")
    return Subject(name=name, code=code, credits=subject.credits)


# ─── Fachbereiche ─────────────────────────────────────────────────────────────

def validate_department(department: Department, existing: Iterable[Department],
                        editing_id: Optional[str] = None) -> Department:
    """Name und Kürzel Pflicht; beide eindeutig (exakter Vergleich)."""
    if not department.name.strip():
        raise ValidationError("name", "Name des Fachbereichs darf nicht leer sein")
    if not department.code.strip():
        raise ValidationError("code", "Kürzel des Fachbereichs darf nicht leer sein")
    for other in existing:
        if editing_id is not None and other.id == editing_id:
            continue
        if other.code == department.code:
            raise ConflictError(
                "code", f"Kürzel '{department.code}' wird bereits von '{other.name}' verwendet"
            )
        if other.name == department.name:
            raise ConflictError("name", f"Fachbereich '{department.name}' existiert bereits")
    return department


# ─── Studienabschnitte ────────────────────────────────────────────────────────

def semesters_of_year(details: Iterable[AcademicDetail], year: int) -> set[int]:
    return {d.semester for d in details if d.year == year}


def find_code_owner(code: str, details: Iterable[AcademicDetail],
                    key: Optional[DetailKey] = None,
                    editing_token: Optional[str] = None) -> Optional[AcademicDetail]:
    """Datensatz, der den Fachcode bereits verwendet (außer dem bearbeiteten Fach)."""
    for d in details:
        for s in d.subjects:
            if s.code != code:
                continue
            if editing_token is not None and d.key == key and s.token == editing_token:
                continue
            return d
    return None


def check_code_unique(subject: Subject, details: Iterable[AcademicDetail],
                      key: DetailKey, editing_token: Optional[str] = None) -> None:
    owner = find_code_owner(subject.code, details, key, editing_token)
    if owner is not None:
        raise ConflictError(
            "subject.code",
            f"Fachcode {subject.code} existiert bereits ({owner.key.label()}). "
            f"Bitte einen eindeutigen Code verwenden.",
        )


def detail_errors(key: DetailKey, departments: Iterable[Department],
                  details: list[AcademicDetail], *,
                  sections: Optional[list[str]] = None,
                  subjects: Optional[list[Subject]] = None,
                  credits: Optional[int] = None,
                  allow_new_semester: bool = False) -> list[StructureError]:
    """Alle Fehler eines Datensatzes (kein Abbruch beim ersten Fehler).

    sections/subjects/credits werden nur geprüft, wenn sie übergeben werden.
    Bei subjects gilt die globale Eindeutigkeit gegenüber allen ANDEREN
    Datensätzen; der Datensatz selbst wird komplett ersetzt.
    """
    errors: list[StructureError] = []

    if not (key.department or "").strip():
        errors.append(ValidationError("department", "Fachbereich ist erforderlich"))
    elif key.department not in {d.name for d in departments}:
        errors.append(ValidationError("department",
                                      f"Fachbereich '{key.department}' nicht gefunden"))

    year_ok = isinstance(key.year, int) and key.year >= 1
    if not year_ok:
        errors.append(ValidationError("year", "Jahr muss eine positive Zahl sein"))
    if not (isinstance(key.semester, int) and key.semester >= 1):
        errors.append(ValidationError("semester", "Semester muss eine positive Zahl sein"))
    elif year_ok and not allow_new_semester:
        exists = any(d.key == key for d in details)
        configured = semesters_of_year(details, key.year)
        if configured and not exists and key.semester not in configured:
            errors.append(ValidationError(
                "semester",
                f"Semester {key.semester} ist für Jahr {key.year} nicht konfiguriert "
                f"(vorhanden: {', '.join(str(s) for s in sorted(configured))})",
            ))

    if credits is not None and credits < 1:
        errors.append(ValidationError("credits", "Credits müssen mindestens 1 sein"))

    for letter in sections or []:
        try:
            normalize_section(letter)
        except ValidationError as e:
            errors.append(e)

    seen_codes: set[str] = set()
    others = [d for d in details if d.key != key]
    for subject in subjects or []:
        try:
            subject = normalize_subject(subject)
        except ValidationError as e:
            errors.append(e)
            continue
        if subject.code in seen_codes:
            errors.append(ConflictError("subject.code",
                                        f"Fachcode {subject.code} doppelt in der Fächerliste"))
            continue
        seen_codes.add(subject.code)
        try:
            check_code_unique(subject, others, key)
        except ConflictError as e:
            errors.append(e)

    return errors


def validate_detail(key: DetailKey, departments: Iterable[Department],
                    details: list[AcademicDetail], **kwargs) -> None:
    """Interaktiver Modus: wirft den ersten Fehler aus detail_errors()."""
    errors = detail_errors(key, departments, details, **kwargs)
    if errors:
        raise errors[0]


# ─── Gesamtprüfung ────────────────────────────────────────────────────────────

class StructureViolation(BaseModel):
    """Eine einzelne Regelverletzung im Datenbestand."""

    severity: Literal["error", "warning"]
    rule: str            # z.B. "duplicate_subject_code"
    entity: str          # "CS-1-2" / Fachbereichs-Name
    description: str


class StructureReport(BaseModel):
    """Ergebnis der Gesamtprüfung."""

    violations: list[StructureViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ KONSISTENT[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(errors)} | Warnungen: {len(warnings)}"]
        console.print(Panel("\n".join(lines), title="Struktur-Prüfung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=26)
        table.add_column("Entität", width=18)
        table.add_column("Beschreibung")
        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.rule,
                v.entity,
                v.description,
            )
        console.print(table)


def check_structure(departments: list[Department],
                    details: list[AcademicDetail],
                    raw_records: Optional[list[dict]] = None) -> StructureReport:
    """Prüft den kompletten Bestand und sammelt alle Verletzungen.

    raw_records (Speicherform) erlaubt zusätzlich, Tokens zu melden, die
    beim Dekodieren stillschweigend verworfen wurden.
    """
    violations: list[StructureViolation] = []

    # ── Fachbereiche: Name/Kürzel eindeutig ──────────────────────────────
    for attr, rule in (("name", "duplicate_department_name"),
                       ("code", "duplicate_department_code")):
        counts: dict[str, int] = defaultdict(int)
        for dep in departments:
            counts[getattr(dep, attr)] += 1
        for value, n in counts.items():
            if n > 1:
                violations.append(StructureViolation(
                    severity="error", rule=rule, entity=value,
                    description=f"{n} Fachbereiche mit {attr} '{value}'.",
                ))

    # ── Studienabschnitte ────────────────────────────────────────────────
    names = {d.name for d in departments}
    code_owners: dict[str, list[str]] = defaultdict(list)
    for detail in details:
        label = detail.key.label()
        if detail.department not in names:
            violations.append(StructureViolation(
                severity="error", rule="orphan_detail", entity=label,
                description=f"Fachbereich '{detail.department}' existiert nicht.",
            ))
        if detail.year < 1 or detail.semester < 1:
            violations.append(StructureViolation(
                severity="error", rule="invalid_year_semester", entity=label,
                description="Jahr und Semester müssen positiv sein.",
            ))
        if not detail.sections:
            violations.append(StructureViolation(
                severity="warning", rule="no_sections", entity=label,
                description="Keine Abschnitte definiert.",
            ))
        if not detail.subjects:
            violations.append(StructureViolation(
                severity="warning", rule="no_subjects", entity=label,
                description="Keine Fächer definiert.",
            ))
        for s in detail.subjects:
            code_owners[s.code].append(label)

    for code, owners in sorted(code_owners.items()):
        if len(owners) > 1:
            violations.append(StructureViolation(
                severity="error", rule="duplicate_subject_code", entity=code,
                description=f"Fachcode mehrfach vergeben: {', '.join(owners)}.",
            ))

    # ── Verworfene Tokens (Altdaten) ─────────────────────────────────────
    for record in raw_records or []:
        label = DetailKey(record["department"], record["year"], record["semester"]).label()
        bad_sections = [t for t in section_tokens(record.get("sections"))
                        if not SECTION_RE.match(t)]
        bad_subjects = [t for t in split_subject_tokens(record.get("subjects"))
                        if not SUBJECT_TOKEN_RE.match(t)]
        if bad_sections or bad_subjects:
            violations.append(StructureViolation(
                severity="warning", rule="malformed_tokens", entity=label,
                description="Ignorierte Einträge: " + ", ".join(bad_sections + bad_subjects),
            ))

    has_errors = any(v.severity == "error" for v in violations)
    return StructureReport(violations=violations, is_valid=not has_errors)
