"""Excel-/CSV-Import und Template-Generator für die Studienstruktur.

Template-Generator: Excel-Vorlage mit den Blättern 'Departments' und 'Academic Details'.
Import-Funktion:    Excel/CSV → StructureStore, Zeile für Zeile validiert.

Jede Zeile läuft durch denselben Codec und Validator wie die interaktive
Eingabe, allerdings im strikten Modus: ein ungültiges Abschnitts- oder
Fach-Token verwirft die ganze Zeile. Eine fehlerhafte Zeile legt nichts an.
"""

import csv
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from models.academic_detail import AcademicDetail
from models.department import Department
from structure.codec import decode_sections_strict, decode_subjects_strict
from structure.errors import StructureError
from structure.store import StructureStore

logger = logging.getLogger(__name__)

DETAILS_SHEET = "Academic Details"
DEPARTMENTS_SHEET = "Departments"

DETAIL_COLUMNS = ["Department", "Year", "Semester", "Sections", "Subjects", "Credits"]
DEPARTMENT_COLUMNS = ["Department Name", "Department Code", "Description"]


class StructureImportError(Exception):
    """Kritischer Fehler beim Import (Datei fehlt, Blatt fehlt, Spalten fehlen)."""


class ImportResult(BaseModel):
    """Ergebnis eines Imports: angelegte Datensätze und Zeilenfehler."""

    success: bool = True
    errors: list[str] = []
    details: list[AcademicDetail] = []
    departments: list[Department] = []

    def print_rich(self) -> None:
        """Gibt das Ergebnis formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        status = (
            "[bold green]✓ IMPORT VOLLSTÄNDIG[/bold green]"
            if self.success
            else "[bold yellow]⚠ IMPORT MIT FEHLERN[/bold yellow]"
        )
        lines = [
            status,
            f"Fachbereiche: {len(self.departments)} | "
            f"Studienabschnitte: {len(self.details)} | Fehler: {len(self.errors)}",
        ]
        for e in self.errors:
            lines.append(f"  [red]• {e}[/red]")
        console.print(Panel("\n".join(lines), title="Import", border_style="cyan"))


def _parse_int(raw: str) -> Optional[int]:
    """'2' / '2.0' → 2; leer oder keine ganze Zahl → None."""
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if not value.is_integer():
        return None
    return int(value)


# ─── TEMPLATE-GENERATOR ───────────────────────────────────────────────────────

def generate_template(path: Path) -> None:
    """Erzeugt eine Excel-Vorlage mit Beispielzeilen.

    Blätter:
      - Departments:      Department Name, Department Code, Description
      - Academic Details: Department, Year, Semester, Sections, Subjects, Credits
    """
    import openpyxl
    from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
    from openpyxl.utils import get_column_letter

    wb = openpyxl.Workbook()

    hdr_font = Font(bold=True, color="FFFFFF", size=11)
    hdr_fill = PatternFill("solid", fgColor="2E6DA4")
    ex_font = Font(italic=True, color="888888")
    center = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="BBBBBB")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)

    def write_sheet(ws, headers: list[str], widths: list[int], examples: list[list]):
        for col, (h, width) in enumerate(zip(headers, widths), 1):
            cell = ws.cell(row=1, column=col, value=h)
            cell.font = hdr_font
            cell.fill = hdr_fill
            cell.alignment = center
            cell.border = border
            ws.column_dimensions[get_column_letter(col)].width = width
        for r, values in enumerate(examples, 2):
            for col, val in enumerate(values, 1):
                cell = ws.cell(row=r, column=col, value=val)
                cell.font = ex_font
                cell.border = border
        ws.freeze_panes = "A2"

    ws_dep = wb.active
    ws_dep.title = DEPARTMENTS_SHEET
    write_sheet(ws_dep, DEPARTMENT_COLUMNS, [28, 18, 40], [
        ["Computer Science", "CS", "Informatik"],
        ["Electronics", "EC", ""],
    ])

    ws_det = wb.create_sheet(DETAILS_SHEET)
    write_sheet(ws_det, DETAIL_COLUMNS, [24, 8, 10, 14, 50, 10], [
        ["Computer Science", 1, 1, "A,B", "Programming(CS101),Logic(CS102)", 3],
        ["Electronics", 2, 1, "A", "Circuits(EC201)", 4],
    ])

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(path))
    logger.info(f"Vorlage geschrieben: {path}")


# ─── EXCEL-IMPORTER ───────────────────────────────────────────────────────────

class StructureImporter:
    """Importiert Fachbereiche und Studienabschnitte aus einer Excel-Datei."""

    def __init__(self, path: Path, store: StructureStore) -> None:
        self.path = Path(path)
        self.store = store
        self._wb = None

    def _open(self) -> None:
        import openpyxl

        if not self.path.exists():
            raise StructureImportError(f"Datei nicht gefunden: {self.path}")
        try:
            self._wb = openpyxl.load_workbook(str(self.path), read_only=True, data_only=True)
        except Exception as e:
            raise StructureImportError(f"Fehler beim Öffnen der Excel-Datei: {e}") from e

    def _get_sheet(self, name: str):
        if self._wb is None:
            self._open()
        for sn in self._wb.sheetnames:
            if sn.strip().lower() == name.strip().lower():
                return self._wb[sn]
        # Einzelnes Blatt: wird für jeden Import verwendet
        if len(self._wb.sheetnames) == 1:
            return self._wb[self._wb.sheetnames[0]]
        return None

    def _sheet_rows(self, name: str, required: list[str]) -> list[tuple[int, dict]]:
        """Tabellenblatt → [(Zeilennummer, {header: wert})] (erste Zeile = Header)."""
        sheet = self._get_sheet(name)
        if sheet is None:
            raise StructureImportError(f"Blatt '{name}' nicht gefunden")
        rows = list(sheet.iter_rows(values_only=True))
        if not rows:
            return []
        headers = [
            str(h).strip().lower() if h is not None else f"col_{i}"
            for i, h in enumerate(rows[0])
        ]
        missing = [c for c in required if c.lower() not in headers]
        if missing:
            raise StructureImportError(
                f"Blatt '{name}': Spalten fehlen: {', '.join(missing)}"
            )
        result = []
        for number, row in enumerate(rows[1:], 2):
            if all(v is None or str(v).strip() == "" for v in row):
                continue
            result.append((number, {
                headers[i]: (str(v).strip() if v is not None else "")
                for i, v in enumerate(row)
                if i < len(headers)
            }))
        return result

    # ── Fachbereiche ────────────────────────────────────────────────────────

    def import_departments(self) -> ImportResult:
        """Legt Fachbereiche an oder aktualisiert sie (Abgleich über Name oder Kürzel)."""
        result = ImportResult()
        for number, row in self._sheet_rows(DEPARTMENTS_SHEET, DEPARTMENT_COLUMNS):
            name = row.get("department name", "")
            code = row.get("department code", "")
            description = row.get("description", "")
            existing = next(
                (d for d in self.store.departments if d.name == name or d.code == code),
                None,
            )
            try:
                if existing is None:
                    department = self.store.add_department(name, code, description)
                else:
                    department = self.store.update_department(
                        existing.name, new_name=name, code=code, description=description,
                    )
            except StructureError as e:
                result.errors.append(f"Zeile {number}: {e}")
                continue
            result.departments.append(department)
        result.success = not result.errors
        logger.info(
            f"Fachbereiche importiert: {len(result.departments)} ok, "
            f"{len(result.errors)} Fehler"
        )
        return result

    # ── Studienabschnitte ───────────────────────────────────────────────────

    def _parse_detail_row(self, row: dict) -> tuple[str, int, int, dict]:
        """Zeile → (Fachbereich, Jahr, Semester, patch); wirft StructureError/ValueError."""
        department = row.get("department", "")
        year = _parse_int(row.get("year", ""))
        if year is None:
            raise ValueError(f"Jahr '{row.get('year', '')}' ist keine ganze Zahl")
        semester = _parse_int(row.get("semester", ""))
        if semester is None:
            raise ValueError(f"Semester '{row.get('semester', '')}' ist keine ganze Zahl")

        patch: dict = {}
        raw_credits = row.get("credits", "")
        credits = _parse_int(raw_credits)
        if raw_credits and credits is None:
            raise ValueError(f"Credits '{raw_credits}' ist keine ganze Zahl")
        if credits is None:
            credits = self.store.defaults.default_credits
        patch["credits"] = credits
        patch["sections"] = decode_sections_strict(row.get("sections", ""))
        patch["subjects"] = decode_subjects_strict(row.get("subjects", ""), credits)
        return department, year, semester, patch

    def import_details(self) -> ImportResult:
        """Importiert Studienabschnitte; jede Zeile ersetzt Abschnitte/Fächer ihres Schlüssels."""
        result = ImportResult()
        for number, row in self._sheet_rows(DETAILS_SHEET, DETAIL_COLUMNS):
            try:
                department, year, semester, patch = self._parse_detail_row(row)
                detail = self.store.upsert_academic_detail(
                    department, year, semester, patch, allow_new_semester=True,
                )
            except (StructureError, ValueError) as e:
                result.errors.append(f"Zeile {number}: {e}")
                logger.warning(f"Import Zeile {number} verworfen: {e}")
                continue
            result.details.append(detail)
        result.success = not result.errors
        logger.info(
            f"Studienabschnitte importiert: {len(result.details)} ok, "
            f"{len(result.errors)} Fehler"
        )
        return result


# ─── CSV-IMPORTER ──────────────────────────────────────────────────────────────

# Dateiname → Blattname (Kleinbuchstaben, ohne Suffix)
_CSV_SHEET_MAP: dict[str, str] = {
    "departments": DEPARTMENTS_SHEET,
    "academic_details": DETAILS_SHEET,
    "academic details": DETAILS_SHEET,
    "details": DETAILS_SHEET,
}


class CsvStructureImporter(StructureImporter):
    """Importiert aus CSV.

    Akzeptiert:
    - Eine einzelne .csv-Datei → wird für jeden Import als Blatt verwendet
    - Ein Verzeichnis mit departments.csv und academic_details.csv
    """

    def __init__(self, path: Path, store: StructureStore) -> None:
        super().__init__(path, store)
        self._csv_sheets: dict[str, list[tuple]] = {}

    @staticmethod
    def _read_csv(path: Path) -> list[tuple]:
        with open(path, encoding="utf-8-sig", newline="") as f:
            return [tuple(row) for row in csv.reader(f)]

    def _open(self) -> None:
        if self.path.is_dir():
            for csv_file in sorted(self.path.glob("*.csv")):
                sheet_name = _CSV_SHEET_MAP.get(csv_file.stem.lower(), csv_file.stem)
                self._csv_sheets[sheet_name] = self._read_csv(csv_file)
        elif self.path.suffix.lower() == ".csv":
            if not self.path.exists():
                raise StructureImportError(f"Datei nicht gefunden: {self.path}")
            self._csv_sheets[self.path.stem] = self._read_csv(self.path)
        else:
            raise StructureImportError(
                f"Unbekanntes Dateiformat: {self.path}. "
                "Erwartet: .xlsx, .csv oder Verzeichnis mit CSV-Dateien."
            )

    def _get_sheet(self, name: str):
        if not self._csv_sheets:
            self._open()
        for sn, rows in self._csv_sheets.items():
            if sn.strip().lower() == name.strip().lower():
                return _CsvSheetProxy(rows)
        if len(self._csv_sheets) == 1:
            return _CsvSheetProxy(next(iter(self._csv_sheets.values())))
        return None


class _CsvSheetProxy:
    """Stellt CSV-Zeilen wie ein openpyxl-Blatt bereit (nur iter_rows)."""

    def __init__(self, rows: list[tuple]) -> None:
        self._rows = rows

    def iter_rows(self, values_only: bool = True):
        return iter(self._rows)


def _importer_for(path: Path, store: StructureStore) -> StructureImporter:
    path = Path(path)
    if path.is_dir() or path.suffix.lower() == ".csv":
        return CsvStructureImporter(path, store)
    return StructureImporter(path, store)


def import_details(path: Path, store: StructureStore) -> ImportResult:
    """Importiert Studienabschnitte aus .xlsx, .csv oder einem CSV-Verzeichnis.

    Raises:
        StructureImportError: Bei kritischen Import-Fehlern.
    """
    return _importer_for(path, store).import_details()


def import_departments(path: Path, store: StructureStore) -> ImportResult:
    """Importiert Fachbereiche aus .xlsx, .csv oder einem CSV-Verzeichnis.

    Raises:
        StructureImportError: Bei kritischen Import-Fehlern.
    """
    return _importer_for(path, store).import_departments()
