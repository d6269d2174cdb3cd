from config.schema import (
    AppConfig,
    LoggingConfig,
    StorageConfig,
    StructureDefaults,
)


def default_structure_defaults() -> StructureDefaults:
    """Neue Studienabschnitte: 3 Credits, Abschnitt A, Semester 1 und 2."""
    return StructureDefaults(
        default_credits=3,
        default_section="A",
        default_semesters=[1, 2],
    )


def default_app_config() -> AppConfig:
    """Vollständige Default-Konfiguration."""
    return AppConfig(
        institution_name="Muster-Hochschule",
        storage=StorageConfig(),
        defaults=default_structure_defaults(),
        logging=LoggingConfig(level="INFO"),
    )


# ─── BEISPIEL-STRUKTUR ───
# Fachbereiche (Name, Kürzel, Beschreibung) für `main.py seed`.

SAMPLE_DEPARTMENTS: list[tuple[str, str, str]] = [
    ("Computer Science", "CS", "Informatik"),
    ("Electronics", "EC", "Elektronik und Nachrichtentechnik"),
    ("Mechanical", "ME", "Maschinenbau"),
]

# Fachbereich → {(Jahr, Semester): (Abschnitte, [(Fach, Code), ...], Credits)}
SAMPLE_CURRICULUM: dict[str, dict[tuple[int, int], tuple[str, list[tuple[str, str]], int]]] = {
    "Computer Science": {
        (1, 1): ("A,B,C", [("Programming Fundamentals", "CS101"),
                           ("Digital Logic", "CS102")], 4),
        (1, 2): ("A,B", [("Data Structures", "CS103"),
                         ("Discrete Mathematics", "CS104")], 4),
        (2, 1): ("A,B", [("Algorithms", "CS201"),
                         ("Computer Architecture", "CS202")], 3),
        (2, 2): ("A", [("Operating Systems", "CS203")], 3),
    },
    "Electronics": {
        (1, 1): ("A,B", [("Basic Electronics", "EC101"),
                         ("Network Theory", "EC102")], 4),
        (1, 2): ("A", [("Signals and Systems", "EC103")], 3),
        (2, 1): ("A", [("Circuits", "EC201")], 4),
    },
    "Mechanical": {
        (1, 1): ("A", [("Engineering Drawing", "ME101")], 3),
    },
}
