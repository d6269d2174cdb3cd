"""Persistenz-Backends für Fachbereiche und Studienabschnitte.

Die Strukturverwaltung behandelt jedes Backend wie einen entfernten Dienst
(list/create/update/delete). Datensätze werden als dicts in Speicherform
übergeben; Fehler des Backends werden als TransportError gemeldet.
"""

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from models.department import Department
from models.structure_data import DetailRecord, StructureData
from structure.errors import NotFoundError, TransportError

logger = logging.getLogger(__name__)


class StructureBackend(ABC):
    """Schnittstelle zum externen Datenspeicher."""

    @abstractmethod
    def list_departments(self) -> list[dict]: ...

    @abstractmethod
    def create_department(self, record: dict) -> dict: ...

    @abstractmethod
    def update_department(self, department_id: str, record: dict) -> dict: ...

    @abstractmethod
    def delete_department(self, department_id: str) -> None: ...

    @abstractmethod
    def list_details(self) -> list[dict]: ...

    @abstractmethod
    def create_detail(self, record: dict) -> dict: ...

    @abstractmethod
    def update_detail(self, detail_id: str, record: dict) -> dict: ...

    @abstractmethod
    def delete_detail(self, detail_id: str) -> None: ...


class InMemoryBackend(StructureBackend):
    """Backend im Arbeitsspeicher (Tests, Beispieldaten)."""

    def __init__(self, departments: list[dict] | None = None,
                 details: list[dict] | None = None):
        self._departments: list[dict] = [copy.deepcopy(d) for d in departments or []]
        self._details: list[dict] = [copy.deepcopy(d) for d in details or []]

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex

    @staticmethod
    def _find(items: list[dict], item_id: str, what: str) -> int:
        for i, item in enumerate(items):
            if item.get("id") == item_id:
                return i
        raise NotFoundError(f"{what} '{item_id}' nicht gefunden")

    def _committed(self) -> None:
        """Hook nach jeder Änderung (JsonFileBackend schreibt hier)."""

    # ─── Fachbereiche ───

    def list_departments(self) -> list[dict]:
        return sorted((copy.deepcopy(d) for d in self._departments),
                      key=lambda d: d["name"])

    def create_department(self, record: dict) -> dict:
        for d in self._departments:
            if d["name"] == record["name"] or d["code"] == record["code"]:
                raise TransportError(
                    f"Eindeutiger Index verletzt: Fachbereich '{record['name']}'/'{record['code']}'"
                )
        stored = {**copy.deepcopy(record), "id": self._new_id()}
        self._departments.append(stored)
        self._committed()
        return copy.deepcopy(stored)

    def update_department(self, department_id: str, record: dict) -> dict:
        idx = self._find(self._departments, department_id, "Fachbereich")
        stored = {**copy.deepcopy(record), "id": department_id}
        self._departments[idx] = stored
        self._committed()
        return copy.deepcopy(stored)

    def delete_department(self, department_id: str) -> None:
        idx = self._find(self._departments, department_id, "Fachbereich")
        del self._departments[idx]
        self._committed()

    # ─── Studienabschnitte ───

    def list_details(self) -> list[dict]:
        return sorted((copy.deepcopy(d) for d in self._details),
                      key=lambda d: (d["department"], d["year"], d["semester"]))

    def create_detail(self, record: dict) -> dict:
        triple = (record["department"], record["year"], record["semester"])
        for d in self._details:
            if (d["department"], d["year"], d["semester"]) == triple:
                raise TransportError(f"Eindeutiger Index verletzt: {triple}")
        stored = {**copy.deepcopy(record), "id": self._new_id()}
        self._details.append(stored)
        self._committed()
        return copy.deepcopy(stored)

    def update_detail(self, detail_id: str, record: dict) -> dict:
        idx = self._find(self._details, detail_id, "Studienabschnitt")
        stored = {**copy.deepcopy(record), "id": detail_id}
        self._details[idx] = stored
        self._committed()
        return copy.deepcopy(stored)

    def delete_detail(self, detail_id: str) -> None:
        idx = self._find(self._details, detail_id, "Studienabschnitt")
        del self._details[idx]
        self._committed()


class JsonFileBackend(InMemoryBackend):
    """Backend auf Basis einer StructureData-JSON-Datei.

    Liest beim Start die Datei (falls vorhanden) und schreibt nach jeder
    Änderung den kompletten Bestand zurück.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        departments: list[dict] = []
        details: list[dict] = []
        self._created_at = None
        if self.path.exists():
            try:
                data = StructureData.load_json(self.path)
            except (OSError, ValueError) as e:
                raise TransportError(f"Datendatei nicht lesbar: {self.path}\n{e}") from e
            departments = [d.model_dump() for d in data.departments]
            details = [d.model_dump() for d in data.academic_details]
            self._created_at = data.created_at
        super().__init__(departments, details)
        self._remember()

    def _remember(self) -> None:
        self._saved = (copy.deepcopy(self._departments), copy.deepcopy(self._details))

    def _committed(self) -> None:
        data = StructureData(
            departments=[Department.model_validate(d) for d in self._departments],
            academic_details=[DetailRecord.model_validate(d) for d in self._details],
            created_at=self._created_at,
        )
        try:
            data.save_json(self.path)
        except OSError as e:
            # Speicherstand gilt weiter, die Änderung wird verworfen
            self._departments, self._details = copy.deepcopy(self._saved)
            raise TransportError(f"Datendatei nicht schreibbar: {self.path}\n{e}") from e
        self._remember()
        logger.debug(f"Datenbestand gespeichert: {self.path}")
