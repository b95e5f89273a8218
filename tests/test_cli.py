"""Tests for the command line (click CliRunner against a temporary directory)."""

from datetime import timedelta
from pathlib import Path

import pytest
from click.testing import CliRunner

from config.manager import ConfigManager
from main import cli
from store import EventRepository, JsonFileStore


def _repo() -> EventRepository:
    return EventRepository(JsonFileStore(Path("data")))


def _monday_in_semester():
    """First Monday after the configured semester starts."""
    start = ConfigManager().load().semester.start_date
    return start + timedelta(days=7 - start.weekday())


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(runner, tmp_path, monkeypatch):
    """Initialised config plus demo data in an empty working directory."""
    monkeypatch.chdir(tmp_path)
    assert runner.invoke(cli, ["init", "--force"]).exit_code == 0
    assert runner.invoke(cli, ["seed", "--force"]).exit_code == 0
    return tmp_path


# ─── INIT / SEED ──────────────────────────────────────────────────────────────

class TestSetup:
    def test_init_writes_config(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(cli, ["init", "--force"])
        assert result.exit_code == 0
        assert (tmp_path / "config" / "schedule_config.yaml").exists()

    def test_commands_need_config(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(cli, ["events", "list"])
        assert result.exit_code == 1
        assert "No configuration found" in result.output

    def test_seed_writes_demo_data(self, project):
        repo = _repo()
        assert len(repo.events()) == 8
        assert repo.catalog().course("C-COM1100").is_cross_cutting
        assert (project / "data" / "scheduleEvents.json").exists()

    def test_config_show(self, runner, project):
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 0
        assert "Configuration" in result.output

    def test_verbose_flag(self, runner, project):
        assert runner.invoke(cli, ["-v", "events", "list"]).exit_code == 0


# ─── EVENTS ───────────────────────────────────────────────────────────────────

class TestEventsList:
    def test_admin(self, runner, project):
        result = runner.invoke(cli, ["events", "list"])
        assert result.exit_code == 0
        assert "Events (admin)" in result.output

    def test_role_override(self, runner, project):
        result = runner.invoke(cli, ["--role", "hod", "--department", "D-CS", "events", "list"])
        assert result.exit_code == 0
        assert "Events (hod)" in result.output

    def test_no_match(self, runner, project):
        result = runner.invoke(cli, ["events", "list", "--search", "astrophysics"])
        assert result.exit_code == 0
        assert "No events" in result.output


class TestEventsAdd:
    def test_saves_free_slot(self, runner, project):
        result = runner.invoke(cli, [
            "events", "add", "--course", "C-CS3101", "--day", "fri",
            "--start", "09:00", "--end", "11:00", "--room", "R-LAB3",
        ])
        assert result.exit_code == 0, result.output
        assert "Saved EV-009" in result.output
        saved = _repo().event("EV-009")
        assert saved.day_of_week == 5
        assert saved.lecturer_id == "L-WANJIKU"

    def test_conflict_refused(self, runner, project):
        result = runner.invoke(cli, [
            "events", "add", "--course", "C-BIT2101", "--day", "1",
            "--start", "11:30", "--end", "12:30", "--room", "R-LH1",
        ])
        assert result.exit_code == 1
        assert "not saved" in result.output
        assert len(_repo().events()) == 8

    def test_conflict_forced(self, runner, project):
        result = runner.invoke(cli, [
            "events", "add", "--course", "C-BIT2101", "--day", "1",
            "--start", "11:30", "--end", "12:30", "--room", "R-LH1", "--force",
        ])
        assert result.exit_code == 0, result.output
        assert len(_repo().events()) == 9

    def test_invalid_time_range(self, runner, project):
        result = runner.invoke(cli, [
            "events", "add", "--course", "C-CS3101", "--day", "5",
            "--start", "12:00", "--end", "10:00",
        ])
        assert result.exit_code == 1
        assert "InvalidTimeRange" in result.output

    def test_foreign_department_denied(self, runner, project):
        result = runner.invoke(cli, [
            "--role", "hod", "--department", "D-CS",
            "events", "add", "--course", "C-BCM1101", "--day", "5",
            "--start", "09:00", "--end", "10:00",
        ])
        assert result.exit_code == 1
        assert "PermissionDenied" in result.output

    def test_cross_cutting_course_normalised(self, runner, project):
        result = runner.invoke(cli, [
            "events", "add", "--course", "C-COM1100", "--day", "sat",
            "--start", "08:00", "--end", "10:00", "--id", "EV-CC",
        ])
        assert result.exit_code == 0, result.output
        saved = _repo().event("EV-CC")
        assert saved.is_cross_cutting
        assert saved.program_scopes == ["P-BIT", "P-BCOM"]
        assert set(saved.department_scopes) == {"D-CS", "D-BUS"}

    def test_date_outside_semester(self, runner, project):
        result = runner.invoke(cli, [
            "events", "add", "--course", "C-CS3101", "--day", "5",
            "--start", "09:00", "--end", "10:00", "--date", "2000-01-07",
        ])
        assert result.exit_code == 1
        assert "outside the semester" in result.output

    def test_unknown_course(self, runner, project):
        result = runner.invoke(cli, [
            "events", "add", "--course", "C-NOPE", "--day", "5",
            "--start", "09:00", "--end", "10:00",
        ])
        assert result.exit_code == 1

    def test_overwrite_foreign_event_denied(self, runner, project):
        """EV-006 belongs to D-BUS; --id must not let D-CS replace it."""
        result = runner.invoke(cli, [
            "--role", "hod", "--department", "D-CS",
            "events", "add", "--course", "C-CS3101", "--day", "fri",
            "--start", "09:00", "--end", "10:00", "--id", "EV-006", "--force",
        ])
        assert result.exit_code == 1
        assert "PermissionDenied" in result.output
        assert _repo().event("EV-006").department == "D-BUS"

    def test_overwrite_own_event(self, runner, project):
        result = runner.invoke(cli, [
            "--role", "hod", "--department", "D-CS",
            "events", "add", "--course", "C-CS3101", "--day", "fri",
            "--start", "09:00", "--end", "10:00", "--id", "EV-003",
        ])
        assert result.exit_code == 0, result.output
        assert _repo().event("EV-003").day_of_week == 5


class TestOneOffEvents:
    def _add_once(self, runner, day):
        return runner.invoke(cli, [
            "events", "add", "--course", "C-BIT2101", "--day", "mon",
            "--start", "10:30", "--end", "11:30", "--once", "--date", day.isoformat(),
        ])

    def test_one_off_beside_weekly_event(self, runner, project):
        """A dated one-off sitting does not clash with an undated weekly lecture."""
        result = self._add_once(runner, _monday_in_semester())
        assert result.exit_code == 0, result.output
        saved = _repo().event("EV-009")
        assert not saved.is_recurring
        assert saved.event_date == _monday_in_semester()

    def test_two_one_offs_same_date_clash(self, runner, project):
        assert self._add_once(runner, _monday_in_semester()).exit_code == 0
        result = self._add_once(runner, _monday_in_semester())
        assert result.exit_code == 1
        assert "not saved" in result.output

    def test_two_one_offs_different_dates(self, runner, project):
        first = _monday_in_semester()
        assert self._add_once(runner, first).exit_code == 0
        assert self._add_once(runner, first + timedelta(days=7)).exit_code == 0
        assert len(_repo().events()) == 10

    def test_once_needs_date(self, runner, project):
        result = runner.invoke(cli, [
            "events", "add", "--course", "C-BIT2101", "--day", "mon",
            "--start", "10:30", "--end", "11:30", "--once",
        ])
        assert result.exit_code == 1

    def test_date_must_match_day(self, runner, project):
        tuesday = _monday_in_semester() + timedelta(days=1)
        result = self._add_once(runner, tuesday)
        assert result.exit_code == 1
        assert "Tuesday" in result.output


class TestEventsDelete:
    def test_admin_deletes(self, runner, project):
        result = runner.invoke(cli, ["events", "delete", "EV-001"])
        assert result.exit_code == 0
        assert _repo().event("EV-001") is None

    def test_other_department_denied(self, runner, project):
        result = runner.invoke(cli, ["--role", "hod", "--department", "D-BUS",
                                     "events", "delete", "EV-001"])
        assert result.exit_code == 1
        assert _repo().event("EV-001") is not None

    def test_missing(self, runner, project):
        assert runner.invoke(cli, ["events", "delete", "EV-999"]).exit_code == 1


# ─── COLLISIONS / RESOLVE ─────────────────────────────────────────────────────

class TestCollisions:
    def test_report(self, runner, project):
        result = runner.invoke(cli, ["collisions"])
        assert result.exit_code == 0
        assert "COLLISION(S)" in result.output

    def test_strict_fails_on_conflicts(self, runner, project):
        assert runner.invoke(cli, ["collisions", "--strict"]).exit_code == 1

    def test_resolve_not_available(self, runner, project):
        result = runner.invoke(cli, ["resolve", "lecturer:EV-001:EV-002"])
        assert result.exit_code == 2

    def test_resolve_unknown_key(self, runner, project):
        assert runner.invoke(cli, ["resolve", "room:EV-001:EV-003"]).exit_code == 1

    def test_resolve_only_visible_conflicts(self, runner, project):
        """EV-001/EV-002 belong to D-CS; a D-BUS head cannot address them."""
        key = "lecturer:EV-001:EV-002"
        hidden = runner.invoke(cli, ["--role", "hod", "--department", "D-BUS", "resolve", key])
        own = runner.invoke(cli, ["--role", "hod", "--department", "D-CS", "resolve", key])
        assert hidden.exit_code == 1
        assert "No conflict" in hidden.output
        assert own.exit_code == 2


# ─── SHOW / UNSCHEDULED ───────────────────────────────────────────────────────

class TestShow:
    @pytest.mark.parametrize("view", ["day", "week", "month"])
    def test_views(self, runner, project, view):
        result = runner.invoke(cli, ["show", "--view", view, "--date", "2025-09-10"])
        assert result.exit_code == 0, result.output

    def test_evening(self, runner, project):
        result = runner.invoke(cli, ["show", "--type", "evening"])
        assert result.exit_code == 0, result.output

    def test_unscheduled(self, runner, project):
        result = runner.invoke(cli, ["unscheduled"])
        assert result.exit_code == 0
        assert "CS 3205" in result.output


# ─── EXPORT ───────────────────────────────────────────────────────────────────

class TestExport:
    def test_csv_scoped_to_caller(self, runner, project):
        result = runner.invoke(cli, ["--role", "hod", "--department", "D-CS",
                                     "export", "--format", "csv", "-o", "out"])
        assert result.exit_code == 0, result.output
        (path,) = (project / "out").glob("*.csv")
        assert path.name.startswith("lecture-schedule-Computer-Science-All-Programs-Week-")
        lines = path.read_text(encoding="utf-8").splitlines()
        # Header plus EV-001..EV-004 and the cross-cutting EV-008
        assert len(lines) == 6

    @pytest.mark.parametrize("fmt", ["xlsx", "pdf"])
    def test_binary_formats(self, runner, project, fmt):
        result = runner.invoke(cli, ["export", "--format", fmt, "-o", "out"])
        assert result.exit_code == 0, result.output
        (path,) = (project / "out").glob(f"*.{fmt}")
        assert path.name.startswith("lecture-schedule-All-Departments-All-Programs-")
        assert path.stat().st_size > 0
