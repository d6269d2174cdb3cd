from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Literal


# ─── SPEICHER ───

class StorageConfig(BaseModel):
    """Ablageort des Datenbestands (Fachbereiche + Studienabschnitte)."""
    # JSON-Datei für den JsonFileBackend
    data_path: str = Field("output/structure.json",
        description="Pfad zur JSON-Datei des Datenbestands")
    # YAML-Datei für die Quiz-Sicherheitseinstellungen
    quiz_settings_path: str = Field("config/quiz_settings.yaml",
        description="Pfad zur YAML-Datei der Quiz-Einstellungen")


# ─── STRUKTUR-DEFAULTS ───

class StructureDefaults(BaseModel):
    """Vorgaben für neu angelegte Studienabschnitte."""
    # Credits eines neuen Studienabschnitts (gilt für Fächer ohne eigene Credits)
    default_credits: int = Field(3, ge=1,
        description="Default-Credits neuer Studienabschnitte")
    # Abschnitt, der bei der Jahres-Konfiguration angelegt wird
    default_section: str = Field("A",
        description="Abschnitt für neu konfigurierte Semester")
    # Semester, die eine Jahres-Konfiguration ohne Angabe erhält
    default_semesters: list[int] = Field(
        default=[1, 2],
        description="Semester pro Jahr (Vorbelegung)")

    @field_validator("default_section")
    @classmethod
    def normalize_section(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 1 or not ("A" <= v <= "Z"):
            raise ValueError(f"default_section muss ein Buchstabe A-Z sein, nicht '{v}'")
        return v

    @model_validator(mode='after')
    def validate_semesters(self):
        if not self.default_semesters:
            raise ValueError("default_semesters darf nicht leer sein")
        invalid = [s for s in self.default_semesters if s < 1]
        if invalid:
            raise ValueError(f"Ungültige Semester {invalid}: Semester müssen positiv sein")
        return self


# ─── LOGGING ───

class LoggingConfig(BaseModel):
    """Log-Ausgabe der Strukturverwaltung."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO",
        description="Log-Level für --verbose")


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration der Strukturverwaltung."""
    # Name der Hochschule (nur Anzeige)
    institution_name: str = Field("Muster-Hochschule",
        description="Name der Hochschule")
    storage: StorageConfig = Field(default_factory=StorageConfig)
    defaults: StructureDefaults = Field(default_factory=StructureDefaults)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
