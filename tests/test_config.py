"""Tests für das Konfigurationssystem, Quiz-Einstellungen und Datenmodelle."""

from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from config.defaults import (
    SAMPLE_CURRICULUM,
    SAMPLE_DEPARTMENTS,
    default_app_config,
    default_structure_defaults,
)
from config.manager import ConfigManager
from config.schema import AppConfig, StructureDefaults
from data.sample_data import SampleDataBuilder
from models.academic_detail import AcademicDetail
from models.quiz_settings import QuizSettings
from models.structure_data import DetailRecord, StructureData
from models.department import Department
from structure.backend import InMemoryBackend
from structure.store import StructureStore


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_app_config_valid(self):
        config = default_app_config()
        assert config.institution_name == "Muster-Hochschule"
        assert config.storage.data_path == "output/structure.json"
        assert config.defaults.default_credits == 3
        assert config.logging.level == "INFO"

    def test_default_structure_defaults(self):
        d = default_structure_defaults()
        assert d.default_section == "A"
        assert d.default_semesters == [1, 2]

    def test_default_section_normalized(self):
        assert StructureDefaults(default_section="b").default_section == "B"

    @pytest.mark.parametrize("bad", ["AB", "1", ""])
    def test_default_section_invalid(self, bad: str):
        with pytest.raises(PydanticValidationError):
            StructureDefaults(default_section=bad)

    def test_semesters_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            StructureDefaults(default_semesters=[0, 1])
        with pytest.raises(PydanticValidationError):
            StructureDefaults(default_semesters=[])

    def test_credits_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            StructureDefaults(default_credits=0)

    def test_sample_curriculum_references_sample_departments(self):
        names = {name for name, _, _ in SAMPLE_DEPARTMENTS}
        assert set(SAMPLE_CURRICULUM) <= names


# ─── CONFIG-MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern und wieder laden ergibt dieselbe Konfiguration."""
        config = default_app_config().model_copy(update={"institution_name": "Test-Hochschule"})
        mgr = ConfigManager()
        mgr.CONFIG_DIR = tmp_path
        mgr.DEFAULT_CONFIG = tmp_path / "app_config.yaml"

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load(mgr.DEFAULT_CONFIG)
        assert loaded == config

    def test_saved_yaml_has_comments(self, tmp_path: Path):
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "app_config.yaml"
        mgr.save(default_app_config())
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert "─── Vorgaben ───" in text
        assert "Gilt für Fächer ohne eigene Credits" in text

    def test_first_run_check_no_file(self, tmp_path: Path):
        """first_run_check gibt True zurück wenn keine Config existiert."""
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "nonexistent.yaml"
        assert mgr.first_run_check() is True

    def test_first_run_check_with_file(self, tmp_path: Path):
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "app_config.yaml"
        mgr.save(default_app_config())
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Laden einer nicht-existenten Datei → FileNotFoundError."""
        mgr = ConfigManager()
        with pytest.raises(FileNotFoundError):
            mgr.load(tmp_path / "not_there.yaml")

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        path = tmp_path / "app_config.yaml"
        path.write_text("defaults:\n  default_credits: 0\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager().load(path)

    def test_partial_yaml_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "app_config.yaml"
        path.write_text("institution_name: Nord-Campus\n", encoding="utf-8")
        config = ConfigManager().load(path)
        assert config.institution_name == "Nord-Campus"
        assert config.defaults == StructureDefaults()


# ─── QUIZ-EINSTELLUNGEN ───────────────────────────────────────────────────────

class TestQuizSettings:
    def test_defaults(self):
        s = QuizSettings()
        assert s.admin_override.enabled is False
        assert s.admin_override.trigger_buttons.button1 == "Ctrl"
        assert s.admin_override.trigger_buttons.button2 == "6"
        assert s.admin_override.session_timeout == 300
        assert s.violation_settings.max_violations == 5
        assert s.logging_settings.retention_days == 30

    def test_merged_changes_only_given_fields(self):
        s = QuizSettings().merged({"violation_settings": {"max_violations": 8}})
        assert s.violation_settings.max_violations == 8
        assert s.violation_settings.warning_threshold == 3
        assert isinstance(s.last_updated_at, datetime)

    def test_merged_nested_trigger_buttons(self):
        s = QuizSettings().merged({"admin_override": {"trigger_buttons": {"button2": "9"}}})
        assert s.admin_override.trigger_buttons.button1 == "Ctrl"
        assert s.admin_override.trigger_buttons.button2 == "9"

    @pytest.mark.parametrize("patch", [
        {"violation_settings": {"max_violations": 21}},
        {"admin_override": {"session_timeout": 30}},
        {"logging_settings": {"retention_days": 400}},
        {"admin_override": {"trigger_buttons": {"button1": "Esc"}}},
    ])
    def test_merged_out_of_range(self, patch: dict):
        with pytest.raises(PydanticValidationError):
            QuizSettings().merged(patch)

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        assert ConfigManager().load_quiz_settings(tmp_path / "quiz.yaml") == QuizSettings()

    def test_save_and_load_roundtrip(self, tmp_path: Path):
        path = tmp_path / "quiz.yaml"
        settings = QuizSettings().merged({"emergency_access": {"enabled": False}})
        mgr = ConfigManager()
        mgr.save_quiz_settings(settings, path)
        loaded = mgr.load_quiz_settings(path)
        assert loaded.emergency_access.enabled is False
        assert loaded.last_updated_at == settings.last_updated_at


# ─── DATENMODELLE ─────────────────────────────────────────────────────────────

class TestModels:
    def test_detail_record_roundtrip(self):
        record = {"id": "x", "department": "CS", "year": 1, "semester": 2,
                  "sections": "a,B", "subjects": "Logic(CS102)", "credits": 4}
        detail = AcademicDetail.from_record(record)
        assert detail.sections == ["A", "B"]
        assert detail.subjects[0].credits == 4
        assert detail.to_record()["sections"] == "A,B"

    def test_from_record_missing_credits(self):
        detail = AcademicDetail.from_record({"department": "CS", "year": 1, "semester": 1})
        assert detail.credits == 3
        assert detail.sections == []

    def test_structure_data_save_and_load(self, tmp_path: Path):
        data = StructureData(
            departments=[Department(id="d1", name="CS", code="CSE")],
            academic_details=[DetailRecord(id="a", department="CS", year=1, semester=1,
                                           sections="A", subjects="Logic(CS102)")],
        )
        path = tmp_path / "structure.json"
        data.save_json(path)
        loaded = StructureData.load_json(path)
        assert loaded.departments == data.departments
        assert loaded.academic_details == data.academic_details
        assert loaded.created_at is not None
        assert "Fachbereiche: 1" in loaded.summary()

    def test_load_json_nonexistent_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            StructureData.load_json(tmp_path / "does_not_exist.json")


# ─── BEISPIELDATEN ────────────────────────────────────────────────────────────

class TestSampleData:
    def test_build_sample_structure(self):
        store = StructureStore(InMemoryBackend())
        stats = SampleDataBuilder(store).build()
        assert stats["departments"] == len(SAMPLE_DEPARTMENTS)
        assert stats["details"] == sum(len(v) for v in SAMPLE_CURRICULUM.values())
        assert store.check().is_valid
        assert store.sections_for("Electronics", 2, 1) == ["A"]

    def test_build_twice_is_idempotent(self):
        store = StructureStore(InMemoryBackend())
        SampleDataBuilder(store).build()
        count = len(store.details)
        stats = SampleDataBuilder(store).build()
        assert stats["departments"] == 0
        assert len(store.details) == count

    def test_app_config_type(self):
        assert isinstance(default_app_config(), AppConfig)
