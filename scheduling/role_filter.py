"""Role-scoped visibility of schedule events.

Admins see everything. Department-scoped roles (HoD, lecturer) see the events
of their own department plus every cross-cutting event.
"""

from collections.abc import Iterable, Mapping
from typing import Optional, Union

from models.caller import Role
from models.catalog import Catalog
from models.course import Course
from models.schedule_event import ProgramType, ScheduleEvent


def _as_department_set(department: Union[str, Iterable[str], None]) -> set[str]:
    if department is None:
        return set()
    if isinstance(department, str):
        return {department}
    return set(department)


def visible_events(
    events: Iterable[ScheduleEvent],
    role: Role,
    department: Union[str, Iterable[str], None],
) -> list[ScheduleEvent]:
    """Returns the events the caller may see, in input order.

    `department` is the caller's department, or the collection of all
    departments the caller belongs to (membership decides).
    """
    events = list(events)
    if role is Role.ADMIN:
        return events
    own = _as_department_set(department)
    return [e for e in events if e.department in own or e.is_cross_cutting]


def filter_events(
    events: Iterable[ScheduleEvent],
    program_id: Optional[str] = None,
    program_type: Optional[ProgramType] = None,
    search: Optional[str] = None,
    catalog: Optional[Catalog] = None,
    lecturer_names: Optional[Mapping[str, str]] = None,
) -> list[ScheduleEvent]:
    """Narrows an already role-filtered list by program, day/evening and free text.

    A cross-cutting event matches a program when the program is in its
    program scopes. The search looks at title, course code, lecturer name
    and room name; names are resolved through `catalog` and
    `lecturer_names` when given, otherwise the raw ids are searched.
    """
    result = list(events)

    if program_type is not None:
        result = [e for e in result if e.program_type == program_type]

    if program_id:
        result = [
            e for e in result
            if e.program_id == program_id
            or (e.is_cross_cutting and program_id in e.program_scopes)
        ]

    query = (search or "").strip().lower()
    if query:
        names = lecturer_names or {}

        def haystack(e: ScheduleEvent) -> str:
            course = catalog.course(e.course_id) if catalog else None
            room = catalog.room(e.room_id) if catalog else None
            parts = [
                e.title,
                course.code if course else e.course_id,
                names.get(e.lecturer_id or "", e.lecturer_id or ""),
                room.name if room else (e.room_id or ""),
            ]
            return " ".join(parts).lower()

        result = [e for e in result if query in haystack(e)]

    return result


def unscheduled_courses(
    courses: Iterable[Course], events: Iterable[ScheduleEvent]
) -> list[Course]:
    """Courses that do not have a single scheduled event yet."""
    scheduled = {e.course_id for e in events}
    return [c for c in courses if c.id not in scheduled]
