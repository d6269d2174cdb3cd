"""Tests für die Validierung (interaktiv und Gesamtprüfung)."""

import pytest

from models.academic_detail import AcademicDetail, DetailKey
from models.department import Department
from models.subject import Subject
from structure.errors import ConflictError, ValidationError
from structure.validator import (
    check_structure,
    detail_errors,
    find_code_owner,
    normalize_section,
    normalize_subject,
    validate_department,
    validate_detail,
)


def _departments() -> list[Department]:
    return [
        Department(id="d1", name="CS", code="CSE"),
        Department(id="d2", name="EC", code="ECE"),
    ]


def _details() -> list[AcademicDetail]:
    return [
        AcademicDetail(id="a", department="CS", year=1, semester=1, sections=["A", "B"],
                       subjects=[Subject(name="Programming", code="CS101")]),
        AcademicDetail(id="b", department="CS", year=1, semester=2, sections=["A"],
                       subjects=[Subject(name="Logic", code="CS102")]),
        AcademicDetail(id="c", department="EC", year=1, semester=1, sections=["A"],
                       subjects=[Subject(name="Circuits", code="EC101")]),
    ]


# ─── EINZELWERTE ──────────────────────────────────────────────────────────────

class TestNormalize:
    def test_section_lowercase_is_uppercased(self):
        assert normalize_section("c") == "C"
        assert normalize_section(" d ") == "D"

    @pytest.mark.parametrize("bad", ["", "AB", "1", "Ä"])
    def test_section_invalid(self, bad: str):
        with pytest.raises(ValidationError) as exc:
            normalize_section(bad)
        assert exc.value.field == "section"

    def test_subject_code_uppercased(self):
        subject = normalize_subject(Subject(name=" Logic ", code="cs102", credits=4))
        assert subject.name == "Logic"
        assert subject.code == "CS102"
        assert subject.credits == 4

    @pytest.mark.parametrize("name", ["Logic(1)", "A,B", "Intro)"])
    def test_subject_name_forbidden_chars(self, name: str):
        with pytest.raises(ValidationError) as exc:
            normalize_subject(Subject(name=name, code="CS102"))
        assert exc.value.field == "subject.name"

    def test_subject_name_empty(self):
        with pytest.raises(ValidationError) as exc:
            normalize_subject(Subject(name="   ", code="CS102"))
        assert exc.value.field == "subject.name"

    @pytest.mark.parametrize("code", ["C1234", "CS10", "CSE101", "12345"])
    def test_subject_code_invalid(self, code: str):
        with pytest.raises(ValidationError) as exc:
            normalize_subject(Subject(name="Logic", code=code))
        assert exc.value.field == "subject.code"

    def test_subject_credits_must_be_positive(self):
        with pytest.raises(ValidationError) as exc:
            normalize_subject(Subject(name="Logic", code="CS102", credits=0))
        assert exc.value.field == "subject.credits"


# ─── FACHBEREICHE ─────────────────────────────────────────────────────────────

class TestValidateDepartment:
    def test_valid_new_department(self):
        dep = Department(name="ME", code="MEC")
        assert validate_department(dep, _departments()) is dep

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_department(Department(name="  ", code="X"), _departments())
        assert exc.value.field == "name"

    def test_empty_code_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_department(Department(name="ME", code=""), _departments())
        assert exc.value.field == "code"

    def test_duplicate_code_conflict(self):
        with pytest.raises(ConflictError) as exc:
            validate_department(Department(name="Other", code="CSE"), _departments())
        assert exc.value.field == "code"

    def test_duplicate_name_conflict(self):
        with pytest.raises(ConflictError) as exc:
            validate_department(Department(name="CS", code="NEW"), _departments())
        assert exc.value.field == "name"

    def test_code_comparison_is_case_sensitive(self):
        """'cse' und 'CSE' sind verschiedene Kürzel."""
        validate_department(Department(name="Other", code="cse"), _departments())

    def test_editing_self_is_no_conflict(self):
        dep = Department(id="d1", name="CS", code="CSE", description="neu")
        validate_department(dep, _departments(), editing_id="d1")


# ─── STUDIENABSCHNITTE ────────────────────────────────────────────────────────

class TestDetailErrors:
    def test_valid_existing_record(self):
        assert detail_errors(DetailKey("CS", 1, 1), _departments(), _details()) == []

    def test_unknown_department(self):
        errors = detail_errors(DetailKey("Electronics", 2, 3), _departments(), _details())
        assert len(errors) == 1
        assert errors[0].field == "department"
        assert "nicht gefunden" in errors[0].reason

    def test_year_and_semester_must_be_positive(self):
        errors = detail_errors(DetailKey("CS", 0, 0), _departments(), _details())
        assert {e.field for e in errors} == {"year", "semester"}

    def test_collects_all_errors(self):
        """Gesammelter Modus bricht nicht beim ersten Fehler ab."""
        errors = detail_errors(
            DetailKey("XX", 0, 1), _departments(), _details(),
            sections=["AB"], credits=0,
        )
        assert {e.field for e in errors} == {"department", "year", "section", "credits"}

    def test_semester_outside_configured_set(self):
        """Jahr 1 hat Semester {1, 2}; Semester 3 ist dort nicht konfiguriert."""
        errors = detail_errors(DetailKey("EC", 1, 3), _departments(), _details())
        assert [e.field for e in errors] == ["semester"]

    def test_semester_allowed_when_flag_set(self):
        errors = detail_errors(DetailKey("EC", 1, 3), _departments(), _details(),
                               allow_new_semester=True)
        assert errors == []

    def test_first_record_of_year_may_introduce_semester(self):
        assert detail_errors(DetailKey("CS", 2, 5), _departments(), _details()) == []

    def test_configured_semester_for_other_department(self):
        """EC/1/2 ist neu, Semester 2 ist für Jahr 1 aber bereits konfiguriert."""
        assert detail_errors(DetailKey("EC", 1, 2), _departments(), _details()) == []

    def test_duplicate_code_in_submitted_list(self):
        errors = detail_errors(
            DetailKey("CS", 1, 1), _departments(), _details(),
            subjects=[Subject(name="A", code="CS150"), Subject(name="B", code="cs150")],
        )
        assert len(errors) == 1
        assert isinstance(errors[0], ConflictError)

    def test_code_used_by_other_record(self):
        errors = detail_errors(
            DetailKey("EC", 1, 1), _departments(), _details(),
            subjects=[Subject(name="Programming", code="CS101")],
        )
        assert len(errors) == 1
        assert isinstance(errors[0], ConflictError)
        assert "CS-1-1" in errors[0].reason

    def test_own_record_is_replaced_not_conflicting(self):
        """Die Fächerliste ersetzt die des Datensatzes; eigene Codes sind kein Konflikt."""
        errors = detail_errors(
            DetailKey("CS", 1, 1), _departments(), _details(),
            subjects=[Subject(name="Programming I", code="CS101")],
        )
        assert errors == []

    def test_validate_detail_raises_first(self):
        with pytest.raises(ValidationError) as exc:
            validate_detail(DetailKey("XX", 0, 1), _departments(), _details())
        assert exc.value.field == "department"


class TestCodeOwner:
    def test_finds_owner(self):
        owner = find_code_owner("CS102", _details())
        assert owner is not None and owner.key == DetailKey("CS", 1, 2)

    def test_edited_token_is_excluded(self):
        owner = find_code_owner("CS102", _details(), DetailKey("CS", 1, 2), "Logic(CS102)")
        assert owner is None

    def test_edited_token_only_excludes_own_record(self):
        owner = find_code_owner("CS102", _details(), DetailKey("CS", 1, 1), "Logic(CS102)")
        assert owner is not None


# ─── GESAMTPRÜFUNG ────────────────────────────────────────────────────────────

class TestCheckStructure:
    def test_clean_structure_is_valid(self):
        report = check_structure(_departments(), _details())
        assert report.is_valid
        assert report.violations == []

    def test_orphan_detail(self):
        details = _details() + [AcademicDetail(department="ME", year=1, semester=1,
                                               sections=["A"],
                                               subjects=[Subject(name="Drawing", code="ME101")])]
        report = check_structure(_departments(), details)
        assert not report.is_valid
        assert [v.rule for v in report.violations] == ["orphan_detail"]
        assert report.violations[0].entity == "ME-1-1"

    def test_duplicate_subject_code_across_records(self):
        details = _details()
        details[2].subjects.append(Subject(name="Programming", code="CS101"))
        report = check_structure(_departments(), details)
        dup = [v for v in report.violations if v.rule == "duplicate_subject_code"]
        assert len(dup) == 1
        assert "CS-1-1" in dup[0].description and "EC-1-1" in dup[0].description

    def test_empty_sections_and_subjects_are_warnings(self):
        details = [AcademicDetail(department="CS", year=3, semester=1)]
        report = check_structure(_departments(), details)
        assert report.is_valid
        assert {v.rule for v in report.violations} == {"no_sections", "no_subjects"}
        assert all(v.severity == "warning" for v in report.violations)

    def test_duplicate_department_code(self):
        deps = _departments() + [Department(id="d3", name="ME", code="CSE")]
        report = check_structure(deps, [])
        assert [v.rule for v in report.violations] == ["duplicate_department_code"]

    def test_malformed_tokens_from_raw_records(self):
        raw = [{"department": "CS", "year": 1, "semester": 1,
                "sections": "A,B,x1", "subjects": "Programming(CS101),junk"}]
        report = check_structure(_departments(), _details(), raw)
        bad = [v for v in report.violations if v.rule == "malformed_tokens"]
        assert len(bad) == 1
        assert "X1" in bad[0].description and "junk" in bad[0].description
        assert report.is_valid
