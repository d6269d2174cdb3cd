"""Lesende Sichten auf den Datenbestand.

Alle Funktionen sind rein: sie bekommen eine Momentaufnahme der
Studienabschnitte und rechnen bei jedem Aufruf neu. Es gibt keinen Cache.
"""

from collections import defaultdict
from typing import Iterable, Optional

from pydantic import BaseModel

from models.academic_detail import AcademicDetail, DetailKey
from models.subject import Subject


class SectionGroup(BaseModel):
    """Abschnitte eines Studienabschnitts, für die Abschnitts-Tabelle."""

    id: Optional[str]
    department: str
    year: int
    semester: int
    sections: list[str]


class RegisteredSubject(BaseModel):
    """Ein Eintrag im globalen Fächerverzeichnis."""

    detail_id: Optional[str]
    name: str
    code: str
    department: str
    year: int
    semester: int
    credits: int


def _find(details: Iterable[AcademicDetail], department: str, year: int,
          semester: int) -> Optional[AcademicDetail]:
    key = DetailKey(department, year, semester)
    for d in details:
        if d.key == key:
            return d
    return None


def year_semester_index(details: Iterable[AcademicDetail]) -> dict[int, list[int]]:
    """Jahr → sortierte Semester, z.B. {1: [1, 2], 2: [1]}."""
    index: dict[int, set[int]] = defaultdict(set)
    for d in details:
        index[d.year].add(d.semester)
    return {year: sorted(sems) for year, sems in sorted(index.items())}


def sections_for(details: Iterable[AcademicDetail], department: str, year: int,
                 semester: int) -> list[str]:
    detail = _find(details, department, year, semester)
    return list(detail.sections) if detail else []


def subjects_for(details: Iterable[AcademicDetail], department: str, year: int,
                 semester: int) -> list[Subject]:
    detail = _find(details, department, year, semester)
    return list(detail.subjects) if detail else []


def filter_details(details: Iterable[AcademicDetail], department: Optional[str] = None,
                   year: Optional[int] = None,
                   semester: Optional[int] = None) -> list[AcademicDetail]:
    """UND-Verknüpfung; None oder leere Werte wirken als Platzhalter."""
    result = []
    for d in details:
        if department and d.department != department:
            continue
        if year and d.year != year:
            continue
        if semester and d.semester != semester:
            continue
        result.append(d)
    return result


def group_sections(details: Iterable[AcademicDetail]) -> dict[str, SectionGroup]:
    """Schlüssel 'Fachbereich-Jahr-Semester' → SectionGroup (erster Treffer gewinnt)."""
    groups: dict[str, SectionGroup] = {}
    for d in details:
        label = d.key.label()
        if label in groups:
            continue
        groups[label] = SectionGroup(
            id=d.id, department=d.department, year=d.year,
            semester=d.semester, sections=list(d.sections),
        )
    return groups


def subject_registry(details: Iterable[AcademicDetail]) -> dict[str, RegisteredSubject]:
    """Fachcode → Eintrag. Bei doppelten Codes gewinnt der erste Datensatz."""
    registry: dict[str, RegisteredSubject] = {}
    for d in details:
        for s in d.subjects:
            if s.code in registry:
                continue
            registry[s.code] = RegisteredSubject(
                detail_id=d.id, name=s.name, code=s.code,
                department=d.department, year=d.year, semester=d.semester,
                credits=s.credits or d.credits,
            )
    return registry


def available_semesters(details: Iterable[AcademicDetail], department: str,
                        year: int) -> list[int]:
    """Semester, die für Fachbereich + Jahr angelegt sind."""
    return sorted({d.semester for d in details
                   if d.department == department and d.year == year})


def sections_for_year(details: Iterable[AcademicDetail], department: str,
                      year: int) -> list[str]:
    """Vereinigung aller Abschnitte eines Jahres über alle Semester."""
    sections: set[str] = set()
    for d in details:
        if d.department == department and d.year == year:
            sections.update(d.sections)
    return sorted(sections)


def academic_structure(details: Iterable[AcademicDetail]) -> dict:
    """Baum Fachbereich → Jahr → Semester → {sections, subjects}."""
    tree: dict = {}
    for d in sorted(details, key=lambda d: (d.department, d.year, d.semester)):
        years = tree.setdefault(d.department, {"years": {}})["years"]
        semesters = years.setdefault(d.year, {"semesters": {}})["semesters"]
        if d.semester in semesters:
            continue
        semesters[d.semester] = {
            "sections": list(d.sections),
            "subjects": [{"name": s.name, "code": s.code} for s in d.subjects],
        }
    return tree


def event_structure(details: Iterable[AcademicDetail]) -> dict[str, list]:
    """Eindeutige Fachbereiche, Jahre und Semester (für Auswahllisten)."""
    details = sorted(details, key=lambda d: (d.department, d.year, d.semester))
    departments: list[str] = []
    for d in details:
        if d.department not in departments:
            departments.append(d.department)
    return {
        "departments": departments,
        "years": sorted({d.year for d in details}),
        "semesters": sorted({d.semester for d in details}),
    }
