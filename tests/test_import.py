"""Tests für den Excel-/CSV-Import und den Template-Generator."""

from pathlib import Path

import openpyxl
import pytest

from data.excel_import import (
    DEPARTMENT_COLUMNS,
    DETAIL_COLUMNS,
    StructureImportError,
    generate_template,
    import_departments,
    import_details,
)
from structure.backend import InMemoryBackend
from structure.store import StructureStore

_DETAIL_HEADER = "Department,Year,Semester,Sections,Subjects,Credits\n"


def _make_store() -> StructureStore:
    return StructureStore(InMemoryBackend(
        departments=[{"id": "d1", "name": "CS", "code": "CSE", "description": ""}],
    ))


def _write_csv(path: Path, body: str, header: str = _DETAIL_HEADER) -> Path:
    path.write_text(header + body, encoding="utf-8")
    return path


# ─── STUDIENABSCHNITTE ────────────────────────────────────────────────────────

class TestImportDetails:
    def test_unknown_department_creates_nothing(self, tmp_path: Path):
        """Zeile für 'Electronics' ohne angelegten Fachbereich wird abgelehnt."""
        store = _make_store()
        path = _write_csv(tmp_path / "details.csv",
                          'Electronics,2,3,"A,B","Circuits(EC201)",4\n')
        result = import_details(path, store)

        assert not result.success
        assert result.details == []
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Zeile 2:")
        assert "Electronics" in result.errors[0]
        assert "nicht gefunden" in result.errors[0]
        assert store.backend.list_details() == []

    def test_valid_rows(self, tmp_path: Path):
        store = _make_store()
        path = _write_csv(tmp_path / "details.csv",
                          'CS,1,1,"a, b","Programming(cs101),Logic(CS102)",4\n'
                          'CS,1,2,C,Algorithms(CS201),\n')
        result = import_details(path, store)

        assert result.success, result.errors
        assert len(result.details) == 2
        first = store.require_detail(("CS", 1, 1))
        assert first.sections == ["A", "B"]
        assert [s.code for s in first.subjects] == ["CS101", "CS102"]
        assert first.credits == 4
        assert store.require_detail(("CS", 1, 2)).credits == 3

    def test_malformed_token_rejects_row(self, tmp_path: Path):
        """Strikter Modus: ein ungültiges Token verwirft die ganze Zeile."""
        store = _make_store()
        path = _write_csv(tmp_path / "details.csv",
                          'CS,1,1,"A,B1",Programming(CS101),3\n'
                          'CS,2,1,A,Programming CS101,3\n')
        result = import_details(path, store)

        assert len(result.errors) == 2
        assert "B1" in result.errors[0]
        assert result.errors[1].startswith("Zeile 3:")
        assert store.details == []

    def test_mixed_rows(self, tmp_path: Path):
        store = _make_store()
        path = _write_csv(tmp_path / "details.csv",
                          "CS,1,1,A,Programming(CS101),3\n"
                          "CS,x,1,A,Logic(CS102),3\n"
                          "CS,1,2,A,Logic(CS101),3\n")
        result = import_details(path, store)

        assert not result.success
        assert len(result.details) == 1
        assert result.errors[0].startswith("Zeile 3:")
        assert "Jahr" in result.errors[0]
        assert result.errors[1].startswith("Zeile 4:")
        assert "CS101" in result.errors[1]

    def test_reimport_replaces_row(self, tmp_path: Path):
        store = _make_store()
        path = _write_csv(tmp_path / "details.csv", "CS,1,1,A,Programming(CS101),3\n")
        import_details(path, store)
        _write_csv(path, 'CS,1,1,"A,B",Programming(CS101),3\n')
        result = import_details(path, store)
        assert result.success
        assert len(store.details) == 1
        assert store.sections_for("CS", 1, 1) == ["A", "B"]

    def test_missing_columns(self, tmp_path: Path):
        path = _write_csv(tmp_path / "details.csv", "CS,1\n", header="Department,Year\n")
        with pytest.raises(StructureImportError):
            import_details(path, _make_store())

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(StructureImportError):
            import_details(tmp_path / "fehlt.xlsx", _make_store())

    def test_unknown_format(self, tmp_path: Path):
        path = tmp_path / "details.txt"
        path.write_text("x", encoding="utf-8")
        with pytest.raises(StructureImportError):
            import_details(path, _make_store())


# ─── FACHBEREICHE ─────────────────────────────────────────────────────────────

class TestImportDepartments:
    def test_create_and_update(self, tmp_path: Path):
        store = _make_store()
        header = "Department Name,Department Code,Description\n"
        path = _write_csv(tmp_path / "departments.csv",
                          "Electronics,EC,Elektronik\nCS,CSE,Informatik\n", header=header)
        result = import_departments(path, store)

        assert result.success, result.errors
        assert [d.name for d in store.departments] == ["CS", "Electronics"]
        assert store.get_department("CS").description == "Informatik"

    def test_conflicting_code(self, tmp_path: Path):
        """Name trifft CS, Kürzel gehört schon Electronics → Zeile abgelehnt."""
        store = _make_store()
        header = "Department Name,Department Code,Description\n"
        path = _write_csv(tmp_path / "departments.csv",
                          "Electronics,EC,\nCS,EC,\n", header=header)
        result = import_departments(path, store)

        assert not result.success
        assert [d.name for d in result.departments] == ["Electronics"]
        assert result.errors[0].startswith("Zeile 3:")
        assert store.get_department("CS").code == "CSE"

    def test_csv_directory(self, tmp_path: Path):
        """Verzeichnis mit departments.csv und academic_details.csv."""
        store = StructureStore(InMemoryBackend())
        _write_csv(tmp_path / "departments.csv", "Electronics,EC,\n",
                   header="Department Name,Department Code,Description\n")
        _write_csv(tmp_path / "academic_details.csv",
                   'Electronics,2,3,"A,B","Circuits(EC201)",4\n')

        assert import_departments(tmp_path, store).success
        result = import_details(tmp_path, store)
        assert result.success, result.errors
        assert store.sections_for("Electronics", 2, 3) == ["A", "B"]


# ─── TEMPLATE ─────────────────────────────────────────────────────────────────

class TestTemplate:
    def test_template_has_sheets_and_headers(self, tmp_path: Path):
        out = tmp_path / "vorlage.xlsx"
        generate_template(out)
        assert out.exists()

        wb = openpyxl.load_workbook(out)
        assert wb.sheetnames == ["Departments", "Academic Details"]
        assert [c.value for c in wb["Departments"][1]] == DEPARTMENT_COLUMNS
        assert [c.value for c in wb["Academic Details"][1]] == DETAIL_COLUMNS

    def test_template_examples_import_cleanly(self, tmp_path: Path):
        """Die Beispielzeilen der Vorlage lassen sich direkt importieren."""
        out = tmp_path / "vorlage.xlsx"
        generate_template(out)
        store = StructureStore(InMemoryBackend())

        assert import_departments(out, store).success
        result = import_details(out, store)
        assert result.success, result.errors
        assert len(store.details) == 2
        assert store.require_detail(("Electronics", 2, 1)).credits == 4
