"""Quiz-Sicherheitseinstellungen (Pydantic v2).

Reiner Konfigurationswert ohne eigene Logik; die Durchsetzung passiert im
Quiz-Laufzeitsystem.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

TriggerKey = Literal["Ctrl", "Alt", "Shift", "1", "2", "3", "4", "5", "6", "7", "8", "9", "0"]


class TriggerButtons(BaseModel):
    """Tastenkombination für den Admin-Override."""
    button1: TriggerKey = "Ctrl"
    button2: TriggerKey = "6"


class AdminOverride(BaseModel):
    enabled: bool = False
    # Standardpasswort, sollte vom Admin geändert werden
    password: str = "admin123"
    trigger_buttons: TriggerButtons = Field(default_factory=TriggerButtons)
    # Sitzungsdauer in Sekunden (1–30 Minuten)
    session_timeout: int = Field(300, ge=60, le=1800)


class EmergencyAccess(BaseModel):
    enabled: bool = True
    password: str = "Quiz@123"
    description: str = (
        "Notfall-Passwort erlaubt Admin-Zugriff auf jedes Quiz auch ohne "
        "registrierte Zugangsdaten"
    )


class ViolationSettings(BaseModel):
    max_violations: int = Field(5, ge=1, le=20)
    auto_terminate: bool = True
    warning_threshold: int = Field(3, ge=1, le=10)


class LoggingSettings(BaseModel):
    log_violations: bool = True
    log_admin_overrides: bool = True
    retention_days: int = Field(30, ge=1, le=365)


class QuizSettings(BaseModel):
    """Eine Einstellungs-Instanz pro Hochschule."""

    admin_override: AdminOverride = Field(default_factory=AdminOverride)
    emergency_access: EmergencyAccess = Field(default_factory=EmergencyAccess)
    violation_settings: ViolationSettings = Field(default_factory=ViolationSettings)
    logging_settings: LoggingSettings = Field(default_factory=LoggingSettings)
    college_id: str = "default"
    last_updated_at: Optional[datetime] = None

    def merged(self, patch: dict) -> "QuizSettings":
        """Teil-Update pro Abschnitt; Ergebnis wird neu validiert.

        {"violation_settings": {"max_violations": 8}} ändert nur dieses Feld.
        """
        raw = self.model_dump()
        for section, values in patch.items():
            if isinstance(values, dict) and isinstance(raw.get(section), dict):
                current = raw[section]
                for k, v in values.items():
                    if isinstance(v, dict) and isinstance(current.get(k), dict):
                        current[k] = {**current[k], **v}
                    else:
                        current[k] = v
            else:
                raw[section] = values
        raw["last_updated_at"] = datetime.now(timezone.utc)
        return QuizSettings.model_validate(raw)
