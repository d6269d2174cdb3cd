"""Strukturverwaltung: Codec, Validierung, Store, Kaskaden und Sichten."""

from .errors import (
    CascadePartialFailure,
    ConflictError,
    NotFoundError,
    StructureError,
    TransportError,
    ValidationError,
)
from .backend import InMemoryBackend, JsonFileBackend, StructureBackend
from .cascade import CascadeResult
from .store import StructureStore

__all__ = [
    "StructureError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "TransportError",
    "CascadePartialFailure",
    "StructureBackend",
    "InMemoryBackend",
    "JsonFileBackend",
    "CascadeResult",
    "StructureStore",
]
