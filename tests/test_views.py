"""Tests für die lesenden Sichten (Gruppierungen, Filter, Verzeichnisse)."""

from models.academic_detail import AcademicDetail
from models.subject import Subject
from structure.views import (
    academic_structure,
    available_semesters,
    event_structure,
    filter_details,
    group_sections,
    sections_for,
    sections_for_year,
    subject_registry,
    subjects_for,
    year_semester_index,
)


def _details() -> list[AcademicDetail]:
    return [
        AcademicDetail(id="1", department="CS", year=1, semester=1, sections=["A", "B"],
                       subjects=[Subject(name="Programming", code="CS101")], credits=4),
        AcademicDetail(id="2", department="CS", year=1, semester=2, sections=["C"],
                       subjects=[Subject(name="Logic", code="CS102", credits=2)]),
        AcademicDetail(id="3", department="EC", year=1, semester=1, sections=["A"]),
        AcademicDetail(id="4", department="CS", year=2, semester=1, sections=["A"],
                       subjects=[Subject(name="Algorithms", code="CS201")]),
    ]


class TestIndexAndLookup:
    def test_year_semester_index(self):
        assert year_semester_index(_details()) == {1: [1, 2], 2: [1]}

    def test_year_semester_index_empty(self):
        assert year_semester_index([]) == {}

    def test_sections_for(self):
        assert sections_for(_details(), "CS", 1, 1) == ["A", "B"]
        assert sections_for(_details(), "CS", 3, 1) == []

    def test_subjects_for(self):
        assert [s.code for s in subjects_for(_details(), "CS", 1, 2)] == ["CS102"]
        assert subjects_for(_details(), "EC", 1, 1) == []

    def test_available_semesters(self):
        assert available_semesters(_details(), "CS", 1) == [1, 2]
        assert available_semesters(_details(), "EC", 2) == []

    def test_sections_for_year_union(self):
        assert sections_for_year(_details(), "CS", 1) == ["A", "B", "C"]


class TestFilter:
    def test_no_filter_returns_all(self):
        assert len(filter_details(_details())) == 4

    def test_and_combination(self):
        result = filter_details(_details(), department="CS", year=1)
        assert [d.id for d in result] == ["1", "2"]

    def test_empty_values_are_wildcards(self):
        result = filter_details(_details(), department="", year=None, semester=1)
        assert [d.id for d in result] == ["1", "3", "4"]


class TestGroupings:
    def test_group_sections_keys(self):
        groups = group_sections(_details())
        assert list(groups) == ["CS-1-1", "CS-1-2", "EC-1-1", "CS-2-1"]
        assert groups["CS-1-1"].sections == ["A", "B"]
        assert groups["CS-1-1"].id == "1"

    def test_group_sections_first_wins(self):
        details = _details() + [AcademicDetail(id="9", department="CS", year=1, semester=1,
                                               sections=["Z"])]
        assert group_sections(details)["CS-1-1"].id == "1"

    def test_subject_registry(self):
        registry = subject_registry(_details())
        assert sorted(registry) == ["CS101", "CS102", "CS201"]
        assert registry["CS101"].credits == 4      # Credits des Datensatzes
        assert registry["CS102"].credits == 2      # eigene Credits des Fachs
        assert registry["CS201"].department == "CS"
        assert registry["CS201"].year == 2

    def test_subject_registry_duplicate_first_wins(self):
        details = _details()
        details[2].subjects.append(Subject(name="Other", code="CS101"))
        assert subject_registry(details)["CS101"].detail_id == "1"

    def test_academic_structure_tree(self):
        tree = academic_structure(_details())
        assert set(tree) == {"CS", "EC"}
        cs1 = tree["CS"]["years"][1]["semesters"]
        assert set(cs1) == {1, 2}
        assert cs1[1]["sections"] == ["A", "B"]
        assert cs1[1]["subjects"] == [{"name": "Programming", "code": "CS101"}]
        assert tree["EC"]["years"][1]["semesters"][1]["subjects"] == []

    def test_event_structure(self):
        assert event_structure(_details()) == {
            "departments": ["CS", "EC"],
            "years": [1, 2],
            "semesters": [1, 2],
        }
