"""StructureData: Vollständiger Datenbestand in Speicherform (Pydantic v2)."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from models.department import Department


class DetailRecord(BaseModel):
    """Ein AcademicDetail so, wie es gespeichert wird (kodierte Strings)."""

    id: str
    department: str
    year: int
    semester: int
    sections: str = ""          # "A,B,C"
    subjects: str = ""          # "Programmierung(CS101),Logik(CS102)"
    credits: int = 3


class StructureData(BaseModel):
    """Fachbereiche + Studienabschnitte einer Hochschule."""

    departments: list[Department] = []
    academic_details: list[DetailRecord] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    def summary(self) -> str:
        """Kurze Übersicht über den Datenbestand."""
        years = sorted({d.year for d in self.academic_details})
        lines = [
            f"Fachbereiche: {len(self.departments)}",
            f"Studienabschnitte: {len(self.academic_details)}",
            f"Jahre: {', '.join(str(y) for y in years)}" if years else "",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datenbestand als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "StructureData":
        """Lädt einen Datenbestand aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
