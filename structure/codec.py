"""Codec für die Speicherform von Abschnitten und Fächern.

Abschnitte:  "A,B,C"
Fächer:      "Programmierung(CS101),Digitaltechnik(CS102)"

Das Dekodieren aus dem Speicher ist tolerant (ungültige Tokens werden
verworfen). Die strikten Varianten werden beim Import verwendet und brechen
beim ersten ungültigen Token ab.
"""

import logging
import re
from typing import Iterable, Optional

from models.subject import Subject
from structure.errors import ValidationError

logger = logging.getLogger(__name__)

SECTION_RE = re.compile(r"^[A-Z]$")
SUBJECT_CODE_RE = re.compile(r"^[A-Z]{2}\d{3}$")
SUBJECT_TOKEN_RE = re.compile(r"^(.+)\(([A-Z]{2}\d{3})\)$")

_SECTION_SPLIT_RE = re.compile(r"[,;\s]+")


# ─── Abschnitte ───────────────────────────────────────────────────────────────

def encode_sections(sections: Iterable[str]) -> str:
    """['A','B','A'] → 'A,B' (Reihenfolge des ersten Auftretens)."""
    seen: list[str] = []
    for s in sections:
        if s not in seen:
            seen.append(s)
    return ",".join(seen)


def section_tokens(raw: Optional[str]) -> list[str]:
    """Rohe Abschnitt-Tokens in Großbuchstaben, noch ungeprüft."""
    if not raw:
        return []
    return [t.strip().upper() for t in _SECTION_SPLIT_RE.split(raw.strip()) if t.strip()]


def decode_sections(raw: Optional[str]) -> list[str]:
    """'a, b;C  x1' → ['A','B','C']. Ungültige Tokens werden verworfen."""
    result: list[str] = []
    for token in section_tokens(raw):
        if not SECTION_RE.match(token):
            logger.debug(f"Abschnitt-Token verworfen: {token!r}")
            continue
        if token not in result:
            result.append(token)
    return result


def decode_sections_strict(raw: Optional[str]) -> list[str]:
    """Wie decode_sections, aber ein ungültiges Token ist ein Fehler."""
    result: list[str] = []
    for token in section_tokens(raw):
        if not SECTION_RE.match(token):
            raise ValidationError(
                "sections", f"Ungültiger Abschnitt '{token}' (erlaubt: ein Buchstabe A-Z)"
            )
        if token not in result:
            result.append(token)
    return result


# ─── Fächer ───────────────────────────────────────────────────────────────────

def encode_subjects(subjects: Iterable[Subject]) -> str:
    """[Subject('Logik','CS102')] → 'Logik(CS102)'."""
    return ",".join(s.token for s in subjects)


def split_subject_tokens(raw: Optional[str]) -> list[str]:
    """Rohe, getrimmte Tokens ohne Leereinträge."""
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]


def parse_subject_token(token: str, default_credits: Optional[int] = None) -> Optional[Subject]:
    """'Logik(CS102)' → Subject, None wenn das Token nicht passt."""
    match = SUBJECT_TOKEN_RE.match(token.strip())
    if not match:
        return None
    name = match.group(1).strip()
    if not name:
        return None
    return Subject(name=name, code=match.group(2), credits=default_credits)


def decode_subjects(raw: Optional[str], default_credits: Optional[int] = None) -> list[Subject]:
    """Dekodiert die Fächerliste; nicht passende Tokens werden verworfen."""
    result: list[Subject] = []
    for token in split_subject_tokens(raw):
        subject = parse_subject_token(token, default_credits)
        if subject is None:
            logger.debug(f"Fach-Token verworfen: {token!r}")
            continue
        result.append(subject)
    return result


def decode_subjects_strict(raw: Optional[str], default_credits: Optional[int] = None) -> list[Subject]:
    """Wie decode_subjects, aber ein ungültiges Token ist ein Fehler.

    Fachcodes werden hier vor dem Abgleich in Großbuchstaben umgewandelt,
    damit 'Logik(cs102)' beim Import genauso behandelt wird wie im Dialog.
    """
    result: list[Subject] = []
    for token in split_subject_tokens(raw):
        if token.endswith(")") and "(" in token:
            name, _, code = token[:-1].rpartition("(")
            token = f"{name}({code.strip().upper()})"
        subject = parse_subject_token(token, default_credits)
        if subject is None:
            raise ValidationError(
                "subjects", f"Ungültiges Fach '{token}' (Format: Name(AB123))"
            )
        result.append(subject)
    return result
