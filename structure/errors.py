"""Fehlerklassen der Strukturverwaltung.

Alle Fehler erben von StructureError, damit die CLI sie gesammelt abfangen kann.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from structure.cascade import CascadeResult


class StructureError(Exception):
    """Basisklasse aller Fehler der Strukturverwaltung."""


class ValidationError(StructureError):
    """Ungültige Eingabe, einem Feld zugeordnet (z.B. Abschnitt 'AB')."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class ConflictError(StructureError):
    """Eindeutigkeit verletzt (Fachcode, Fachbereichs-Name oder -Kürzel)."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class NotFoundError(StructureError):
    """Referenzierter Fachbereich, Datensatz oder Index existiert nicht (mehr)."""


class TransportError(StructureError):
    """Aufruf an das Persistenz-Backend fehlgeschlagen. Wird nicht wiederholt."""


class CascadePartialFailure(StructureError):
    """Kaskadierendes Löschen wurde nicht vollständig ausgeführt."""

    def __init__(self, result: "CascadeResult"):
        self.result = result
        super().__init__(result.summary())
