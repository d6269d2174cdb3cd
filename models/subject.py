"""Datenmodell für ein Fach (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, field_validator


class Subject(BaseModel):
    """Ein Fach innerhalb eines Studienabschnitts, z.B. Programmierung(CS101).

    Fächer werden nicht eigenständig gespeichert, sondern als Teil eines
    AcademicDetail. credits=None bedeutet: Default des Datensatzes gilt.
    """

    name: str
    code: str            # "CS101" – zwei Buchstaben + drei Ziffern
    credits: Optional[int] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def token(self) -> str:
        """Speicherform 'Name(CODE)'."""
        return f"{self.name}({self.code})"
