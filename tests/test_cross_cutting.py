"""Tests for cross-cutting scope validation and entry validation."""

import pytest

from models import Catalog, Course, Department, Program, Role, ScheduleEvent
from scheduling import ScheduleErrorKind, validate_cross_cutting, validate_event


@pytest.fixture(scope="module")
def catalog() -> Catalog:
    return Catalog(
        departments=[
            Department(id="D1", name="Computing", program_ids=["P1", "P2"]),
            Department(id="D2", name="Business", program_ids=["P3"]),
            Department(id="D3", name="Languages", program_ids=["P4"]),
        ],
        programs=[
            Program(id="P1", name="BSc IT", department_id="D1"),
            Program(id="P2", name="BSc CS", department_id="D1"),
            Program(id="P3", name="BCom", department_id="D2"),
            Program(id="P4", name="BA", department_id="D3"),
        ],
        courses=[
            Course(id="C-OWN", code="IT 101", name="Programming", department="D1"),
            Course(id="C-BUS", code="BC 101", name="Accounting", department="D2"),
            Course(id="C-CROSS", code="COM 100", name="Communication Skills",
                   department="D3", is_cross_cutting=True,
                   cross_cutting_departments=["D2"], cross_cutting_programs=["P1", "P3"]),
        ],
    )


def _make_event(course_id: str = "C-OWN", department: str = "D1", **kwargs) -> ScheduleEvent:
    fields = dict(
        id="EV-1", title="Lecture", course_id=course_id, day_of_week=2,
        start_time="09:00", end_time="11:00", department=department,
    )
    fields.update(kwargs)
    return ScheduleEvent(**fields)


# ─── NON-CROSS-CUTTING ────────────────────────────────────────────────────────

class TestPlainEvents:
    def test_cleared_scopes_succeed(self, catalog):
        """A plain event with empty scopes is always accepted for the own department."""
        result = validate_cross_cutting(_make_event(), Role.HOD, "D1", catalog)
        assert result.ok
        assert result.error is None
        assert not result.event.is_cross_cutting

    @pytest.mark.parametrize("course_id,department", [
        ("C-OWN", "D1"), ("C-BUS", "D2"), ("C-CROSS", "D3"),
    ])
    def test_admin_cleared_scopes_always_succeed(self, catalog, course_id, department):
        result = validate_cross_cutting(
            _make_event(course_id, department), Role.ADMIN, None, catalog
        )
        assert result.ok

    def test_scopes_without_flag_rejected(self, catalog):
        event = _make_event(program_scopes=["P1"])
        result = validate_cross_cutting(event, Role.ADMIN, None, catalog)
        assert not result.ok
        assert result.error == ScheduleErrorKind.INVALID_SCOPE
        assert result.event is None

    def test_department_scope_without_flag_rejected(self, catalog):
        event = _make_event(department_scopes=["D1"])
        result = validate_cross_cutting(event, Role.HOD, "D1", catalog)
        assert result.error == ScheduleErrorKind.INVALID_SCOPE

    def test_foreign_course_denied(self, catalog):
        """An HoD cannot schedule another department's plain course."""
        result = validate_cross_cutting(_make_event("C-BUS", "D2"), Role.HOD, "D1", catalog)
        assert result.error == ScheduleErrorKind.PERMISSION_DENIED

    def test_membership_in_second_department(self, catalog):
        result = validate_cross_cutting(
            _make_event("C-BUS", "D2"), Role.LECTURER, ["D1", "D2"], catalog
        )
        assert result.ok

    def test_unknown_course(self, catalog):
        result = validate_cross_cutting(_make_event("C-NONE"), Role.ADMIN, None, catalog)
        assert result.error == ScheduleErrorKind.INVALID_SCOPE


# ─── COURSE OVERRIDE ──────────────────────────────────────────────────────────

class TestCourseOverride:
    def test_cross_cutting_course_forces_flag(self, catalog):
        """Submitted false, course says true: overridden, not an error."""
        event = _make_event("C-CROSS", "D3", is_cross_cutting=False)
        result = validate_cross_cutting(event, Role.ADMIN, None, catalog)
        assert result.ok
        assert result.event.is_cross_cutting

    def test_course_defaults_fill_scopes(self, catalog):
        event = _make_event("C-CROSS", "D3")
        result = validate_cross_cutting(event, Role.ADMIN, None, catalog)
        assert result.event.program_scopes == ["P1", "P3"]
        assert set(result.event.department_scopes) == {"D1", "D2"}

    def test_input_not_mutated(self, catalog):
        event = _make_event("C-CROSS", "D3")
        validate_cross_cutting(event, Role.ADMIN, None, catalog)
        assert not event.is_cross_cutting
        assert event.program_scopes == []

    def test_hod_gets_implied_departments(self, catalog):
        """Department scope of a cross-cutting course is implied, not chosen."""
        event = _make_event("C-CROSS", "D3", is_cross_cutting=True, program_scopes=["P3"])
        result = validate_cross_cutting(event, Role.HOD, "D1", catalog)
        assert result.ok
        assert "D2" in result.event.department_scopes

    def test_hod_may_pick_implied_department_scope(self, catalog):
        event = _make_event("C-CROSS", "D3", is_cross_cutting=True,
                            department_scopes=["D2"], program_scopes=["P1"])
        assert validate_cross_cutting(event, Role.HOD, "D1", catalog).ok


# ─── DEPARTMENT-SCOPED CALLERS ────────────────────────────────────────────────

class TestScopedCallers:
    def test_own_programs_free(self, catalog):
        event = _make_event(is_cross_cutting=True, department_scopes=["D1"],
                            program_scopes=["P1", "P2"])
        result = validate_cross_cutting(event, Role.HOD, "D1", catalog)
        assert result.ok
        assert result.event.program_scopes == ["P1", "P2"]

    def test_outside_department_scope_denied(self, catalog):
        """Own course is not cross-cutting by record: no foreign department scope."""
        event = _make_event(is_cross_cutting=True, department_scopes=["D1", "D2"])
        result = validate_cross_cutting(event, Role.HOD, "D1", catalog)
        assert result.error == ScheduleErrorKind.PERMISSION_DENIED

    def test_foreign_program_denied(self, catalog):
        event = _make_event(is_cross_cutting=True, program_scopes=["P3"])
        result = validate_cross_cutting(event, Role.LECTURER, "D1", catalog)
        assert result.error == ScheduleErrorKind.PERMISSION_DENIED

    def test_program_outside_course_scope_denied(self, catalog):
        """P4 is neither the caller's nor listed by the cross-cutting course."""
        event = _make_event("C-CROSS", "D3", is_cross_cutting=True, program_scopes=["P4"])
        result = validate_cross_cutting(event, Role.HOD, "D1", catalog)
        assert result.error == ScheduleErrorKind.PERMISSION_DENIED

    def test_foreign_plain_course_flagged_cross_cutting_denied(self, catalog):
        event = _make_event("C-BUS", "D2", is_cross_cutting=True)
        result = validate_cross_cutting(event, Role.HOD, "D1", catalog)
        assert result.error == ScheduleErrorKind.PERMISSION_DENIED

    def test_unknown_program(self, catalog):
        event = _make_event(is_cross_cutting=True, program_scopes=["P-NONE"])
        result = validate_cross_cutting(event, Role.HOD, "D1", catalog)
        assert result.error == ScheduleErrorKind.INVALID_SCOPE


# ─── ADMIN ────────────────────────────────────────────────────────────────────

class TestAdmin:
    def test_program_without_department_is_mismatch(self, catalog):
        """programScopes=[P1], departmentScopes=[] → ScopeMismatch."""
        event = _make_event(is_cross_cutting=True, program_scopes=["P1"], department_scopes=[])
        result = validate_cross_cutting(event, Role.ADMIN, None, catalog)
        assert not result.ok
        assert result.error == ScheduleErrorKind.SCOPE_MISMATCH

    def test_any_departments_allowed(self, catalog):
        event = _make_event(is_cross_cutting=True, department_scopes=["D1", "D2", "D3"],
                            program_scopes=["P1", "P3", "P4"])
        result = validate_cross_cutting(event, Role.ADMIN, None, catalog)
        assert result.ok
        assert result.event.department_scopes == ["D1", "D2", "D3"]

    def test_partial_departments_mismatch(self, catalog):
        event = _make_event(is_cross_cutting=True, department_scopes=["D1"],
                            program_scopes=["P1", "P3"])
        result = validate_cross_cutting(event, Role.ADMIN, None, catalog)
        assert result.error == ScheduleErrorKind.SCOPE_MISMATCH
        assert "P3" in result.message


# ─── ENTRY VALIDATION ─────────────────────────────────────────────────────────

class TestValidateEvent:
    @pytest.mark.parametrize("start,end", [("11:00", "09:00"), ("10:00", "10:00")])
    def test_invalid_time_range(self, catalog, start, end):
        event = _make_event(start_time=start, end_time=end)
        result = validate_event(event, Role.ADMIN, None, catalog)
        assert result.error == ScheduleErrorKind.INVALID_TIME_RANGE

    def test_time_checked_before_scopes(self, catalog):
        event = _make_event(start_time="11:00", end_time="09:00", program_scopes=["P1"])
        result = validate_event(event, Role.ADMIN, None, catalog)
        assert result.error == ScheduleErrorKind.INVALID_TIME_RANGE

    def test_valid_event_delegates(self, catalog):
        result = validate_event(_make_event(), Role.HOD, "D1", catalog)
        assert result.ok
