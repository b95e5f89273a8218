"""Scope validation for cross-cutting events.

A cross-cutting event is visible to several departments and programs. Before
an event is written back to the store, its cross-cutting flag and scope sets
are recomputed here instead of trusting what the client sent:

  - a course flagged cross-cutting forces the event to cross-cutting
  - a non-cross-cutting event carries no scopes
  - department-scoped callers stay within their own department, except for
    the scope a cross-cutting course brings along
  - admins may pick any department, but every program needs its parent
    department selected too

All outcomes are returned as a ScopeResult; nothing is raised.
"""

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from models.caller import Role
from models.catalog import Catalog
from models.schedule_event import ScheduleEvent

logger = logging.getLogger(__name__)


class ScheduleErrorKind(str, Enum):
    INVALID_SCOPE = "InvalidScope"
    SCOPE_MISMATCH = "ScopeMismatch"
    INVALID_TIME_RANGE = "InvalidTimeRange"
    PERMISSION_DENIED = "PermissionDenied"


class ScopeResult(BaseModel):
    """Outcome of validating one event."""

    ok: bool
    error: Optional[ScheduleErrorKind] = None
    message: str = ""
    event: Optional[ScheduleEvent] = None  # normalised event, set when ok

    @classmethod
    def success(cls, event: ScheduleEvent) -> "ScopeResult":
        return cls(ok=True, event=event)

    @classmethod
    def failure(cls, error: ScheduleErrorKind, message: str) -> "ScopeResult":
        logger.debug(f"Validation failed ({error.value}): {message}")
        return cls(ok=False, error=error, message=message)


def _own_departments(department: Union[str, Iterable[str], None]) -> set[str]:
    if department is None:
        return set()
    if isinstance(department, str):
        return {department}
    return set(department)


def _merge(first: Iterable[str], second: Iterable[str]) -> list[str]:
    """Order-preserving union without duplicates."""
    out: list[str] = []
    for x in [*first, *second]:
        if x not in out:
            out.append(x)
    return out


def validate_cross_cutting(
    event: ScheduleEvent,
    role: Role,
    department: Union[str, Iterable[str], None],
    catalog: Catalog,
) -> ScopeResult:
    """Checks and normalises the cross-cutting flag and scope sets of an event."""
    course = catalog.course(event.course_id)
    if course is None:
        return ScopeResult.failure(
            ScheduleErrorKind.INVALID_SCOPE,
            f"Unknown course '{event.course_id}'.",
        )

    own = _own_departments(department)
    scoped = role.is_department_scoped
    is_cross = event.is_cross_cutting
    dept_scopes = list(event.department_scopes)
    prog_scopes = list(event.program_scopes)

    # The course record decides, not the submitted flag
    if course.is_cross_cutting:
        if not is_cross:
            logger.debug(f"Event {event.id}: course {course.code} is cross-cutting, overriding flag")
        is_cross = True
        if not prog_scopes:
            prog_scopes = list(course.cross_cutting_programs)

    if not is_cross:
        if dept_scopes or prog_scopes:
            return ScopeResult.failure(
                ScheduleErrorKind.INVALID_SCOPE,
                "Only cross-cutting events may carry department or program scopes.",
            )
        if scoped and (course.department not in own or event.department not in own):
            return ScopeResult.failure(
                ScheduleErrorKind.PERMISSION_DENIED,
                f"You can only schedule courses of your own department "
                f"({', '.join(sorted(own)) or 'none'}) or cross-cutting courses.",
            )
        return ScopeResult.success(event.model_copy(update={"is_cross_cutting": False}))

    unknown = [p for p in prog_scopes if catalog.parent_department(p) is None]
    if unknown:
        return ScopeResult.failure(
            ScheduleErrorKind.INVALID_SCOPE,
            f"Unknown program(s): {', '.join(unknown)}.",
        )

    # Departments a cross-cutting course brings along, including the parents
    # of its default programs
    implied: list[str] = []
    if course.is_cross_cutting:
        implied = _merge(
            course.cross_cutting_departments,
            [d for d in map(catalog.parent_department, course.cross_cutting_programs) if d],
        )

    if scoped:
        if not course.is_cross_cutting and course.department not in own:
            return ScopeResult.failure(
                ScheduleErrorKind.PERMISSION_DENIED,
                f"Course {course.code} belongs to {course.department}; "
                f"it is not cross-cutting.",
            )

        allowed_depts = set(own)
        allowed_programs: set[str] = set()
        for d in own:
            allowed_programs |= catalog.programs_of(d)
        if course.is_cross_cutting:
            allowed_depts |= set(implied)
            allowed_programs |= set(course.cross_cutting_programs)

        outside = [d for d in dept_scopes if d not in allowed_depts]
        if outside:
            return ScopeResult.failure(
                ScheduleErrorKind.PERMISSION_DENIED,
                f"Department scope outside your department: {', '.join(outside)}.",
            )
        foreign = [p for p in prog_scopes if p not in allowed_programs]
        if foreign:
            return ScopeResult.failure(
                ScheduleErrorKind.PERMISSION_DENIED,
                f"Program(s) not in your department: {', '.join(foreign)}.",
            )

        # Implied by the course record, never chosen separately
        dept_scopes = _merge(dept_scopes, implied)
    else:
        dept_scopes = _merge(dept_scopes, implied)
        missing = [
            p for p in prog_scopes
            if catalog.parent_department(p) not in dept_scopes
        ]
        if missing:
            return ScopeResult.failure(
                ScheduleErrorKind.SCOPE_MISMATCH,
                f"Program(s) {', '.join(missing)} selected without their department.",
            )

    return ScopeResult.success(event.model_copy(update={
        "is_cross_cutting": True,
        "department_scopes": dept_scopes,
        "program_scopes": prog_scopes,
    }))


def validate_event(
    event: ScheduleEvent,
    role: Role,
    department: Union[str, Iterable[str], None],
    catalog: Catalog,
) -> ScopeResult:
    """Entry validation before an event is written: time range, then scopes."""
    if not event.has_valid_time_range:
        return ScopeResult.failure(
            ScheduleErrorKind.INVALID_TIME_RANGE,
            f"Start time {event.start_time} must be before end time {event.end_time}.",
        )
    return validate_cross_cutting(event, role, department, catalog)
