"""Datenmodell für einen Fachbereich (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, field_validator


class Department(BaseModel):
    """Ein Fachbereich, z.B. "Computer Science" / "CS"."""

    id: Optional[str] = None    # vom Backend vergeben
    name: str                   # eindeutig, Referenz in AcademicDetail.department
    code: str                   # eindeutig (exakter Vergleich)
    description: str = ""

    @field_validator("name", "code", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    def to_record(self) -> dict:
        return self.model_dump()

    @classmethod
    def from_record(cls, record: dict) -> "Department":
        return cls.model_validate(record)
