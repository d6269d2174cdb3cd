"""Datenmodell für einen Studienabschnitt (Fachbereich × Jahr × Semester, Pydantic v2)."""

from typing import NamedTuple, Optional

from pydantic import BaseModel, Field, field_validator

from models.subject import Subject


class DetailKey(NamedTuple):
    """Fachlicher Schlüssel eines AcademicDetail."""

    department: str
    year: int
    semester: int

    def label(self) -> str:
        return f"{self.department}-{self.year}-{self.semester}"


class AcademicDetail(BaseModel):
    """Abschnitte und Fächer einer Kohorte (z.B. CS, Jahr 1, Semester 2).

    Intern typisiert (Liste eindeutiger Buchstaben, Liste von Subject).
    Die kommagetrennte Speicherform entsteht nur in to_record()/from_record().
    """

    id: Optional[str] = None
    department: str
    year: int
    semester: int
    sections: list[str] = Field(default_factory=list)       # ["A", "B"]
    subjects: list[Subject] = Field(default_factory=list)
    credits: int = 3

    @field_validator("sections")
    @classmethod
    def normalize_sections(cls, v: list[str]) -> list[str]:
        result: list[str] = []
        for s in v:
            s = s.strip().upper()
            if s and s not in result:
                result.append(s)
        return result

    @property
    def key(self) -> DetailKey:
        return DetailKey(self.department, self.year, self.semester)

    def subject_codes(self) -> list[str]:
        return [s.code for s in self.subjects]

    # ─── Speicherform ───

    def to_record(self) -> dict:
        """Datensatz in Speicherform (Abschnitte/Fächer als Strings)."""
        from structure.codec import encode_sections, encode_subjects
        return {
            "id": self.id,
            "department": self.department,
            "year": self.year,
            "semester": self.semester,
            "sections": encode_sections(self.sections),
            "subjects": encode_subjects(self.subjects),
            "credits": self.credits,
        }

    @classmethod
    def from_record(cls, record: dict) -> "AcademicDetail":
        """Liest einen gespeicherten Datensatz; ungültige Tokens werden verworfen."""
        from structure.codec import decode_sections, decode_subjects
        credits = int(record.get("credits") or 3)
        return cls(
            id=record.get("id"),
            department=record["department"],
            year=int(record["year"]),
            semester=int(record["semester"]),
            sections=decode_sections(record.get("sections")),
            subjects=decode_subjects(record.get("subjects"), default_credits=credits),
            credits=credits,
        )
