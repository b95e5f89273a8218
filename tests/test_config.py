"""Tests for the configuration system and the demo data set."""

from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from config.defaults import default_app_config, demo_catalog, demo_events, demo_users
from config.manager import ConfigManager
from config.schema import AppConfig, CalendarConfig, CallerConfig, SemesterConfig
from models import CollisionKind, Role
from scheduling import detect_collisions, unscheduled_courses, validate_event


# ─── DEFAULT CONFIG ───────────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_app_config_valid(self):
        """Default config builds without errors."""
        config = default_app_config()
        assert config.calendar.day_first_hour == 8
        assert config.calendar.day_last_hour == 17
        assert config.calendar.evening_first_hour == 17
        assert config.calendar.evening_last_hour == 22
        assert config.caller.role == Role.ADMIN
        assert config.semester.start_date < config.semester.end_date

    def test_day_names_monday_to_saturday(self):
        assert CalendarConfig().day_names[0] == "Monday"
        assert len(CalendarConfig().day_names) == 6


# ─── VALIDATION ───────────────────────────────────────────────────────────────

class TestSchemaValidation:
    def test_empty_day_window_raises(self):
        with pytest.raises(ValidationError):
            CalendarConfig(day_first_hour=17, day_last_hour=8)

    def test_empty_evening_window_raises(self):
        with pytest.raises(ValidationError):
            CalendarConfig(evening_first_hour=22, evening_last_hour=22)

    def test_wrong_number_of_day_names(self):
        with pytest.raises(ValidationError):
            CalendarConfig(day_names=["Mon", "Tue"])

    def test_semester_end_before_start(self):
        """End date must be after start date."""
        with pytest.raises(ValidationError, match="must be after start date"):
            SemesterConfig(start_date=date(2025, 12, 1), end_date=date(2025, 9, 1))

    def test_semester_contains(self):
        sem = SemesterConfig(start_date=date(2025, 9, 1), end_date=date(2025, 12, 15))
        assert sem.contains(date(2025, 9, 1))
        assert sem.contains(date(2025, 12, 15))
        assert not sem.contains(date(2026, 1, 5))

    def test_caller_config_to_caller(self):
        caller = CallerConfig(id="U1", role="hod", departments=["D-CS"]).to_caller()
        assert caller.role == Role.HOD
        assert caller.departments == ["D-CS"]

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError):
            CallerConfig(role="dean")


# ─── MANAGER ──────────────────────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "schedule_config.yaml")
        config = default_app_config()
        mgr.save(config, quiet=True)
        assert mgr.load() == config

    def test_saved_file_has_section_comments(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "schedule_config.yaml")
        path = mgr.save(default_app_config(), quiet=True)
        text = path.read_text(encoding="utf-8")
        assert "─── Calendar ───" in text
        assert "role: admin | hod | lecturer" in text

    def test_only_used_settings_written(self, tmp_path: Path):
        """Every top-level key in the file is read by some command."""
        mgr = ConfigManager(tmp_path / "schedule_config.yaml")
        path = mgr.save(default_app_config(), quiet=True)
        text = path.read_text(encoding="utf-8")
        assert "faculty_id" not in text
        assert set(AppConfig.model_fields) == {
            "institution_name", "calendar", "semester", "store", "caller",
        }

    def test_first_run_check(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "nonexistent.yaml")
        assert mgr.first_run_check()
        mgr.save(AppConfig(), quiet=True)
        assert not mgr.first_run_check()

    def test_load_nonexistent_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(tmp_path / "not_there.yaml")

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("calendar:\n  day_first_hour: 18\n  day_last_hour: 9\n",
                        encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid config file"):
            ConfigManager().load(path)

    def test_load_or_default(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "missing.yaml")
        assert mgr.load_or_default() == AppConfig()


# ─── DEMO DATA ────────────────────────────────────────────────────────────────

class TestDemoData:
    def test_events_reference_catalog(self):
        catalog = demo_catalog()
        for e in demo_events(catalog):
            assert catalog.course(e.course_id) is not None
            assert e.room_id is None or catalog.room(e.room_id) is not None

    def test_events_pass_admin_validation(self):
        catalog = demo_catalog()
        for e in demo_events(catalog):
            assert validate_event(e, Role.ADMIN, None, catalog).ok, e.id

    def test_deliberate_conflicts(self):
        """One conflict of each kind is built into the demo data."""
        catalog = demo_catalog()
        collisions = detect_collisions(demo_events(catalog), catalog)
        by_kind = {k: [c.event_ids for c in collisions if c.kind == k] for k in CollisionKind}
        assert by_kind[CollisionKind.LECTURER] == [frozenset({"EV-001", "EV-002"})]
        assert by_kind[CollisionKind.ROOM] == [frozenset({"EV-004", "EV-005"})]
        assert frozenset({"EV-007", "EV-008"}) in by_kind[CollisionKind.STUDENT_GROUP]

    def test_one_course_unscheduled(self):
        catalog = demo_catalog()
        missing = unscheduled_courses(catalog.courses, demo_events(catalog))
        assert [c.id for c in missing] == ["C-CS3205"]

    def test_users_cover_every_lecturer(self):
        ids = {u.id for u in demo_users()}
        assert {c.lecturer_id for c in demo_catalog().courses if c.lecturer_id} <= ids
