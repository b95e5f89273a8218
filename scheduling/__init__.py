"""Scheduling rules: visibility, collisions, cross-cutting scopes, calendar layout."""

from .role_filter import visible_events, filter_events, unscheduled_courses
from .collisions import (
    detect_collisions,
    collisions_for,
    build_report,
    CollisionReport,
    CollisionResolver,
    UnimplementedResolver,
)
from .cross_cutting import (
    validate_cross_cutting,
    validate_event,
    ScopeResult,
    ScheduleErrorKind,
)
from .projection import layout, display_window, CalendarGrid, DayColumn, EventPlacement, ViewRange

__all__ = [
    "visible_events",
    "filter_events",
    "unscheduled_courses",
    "detect_collisions",
    "collisions_for",
    "build_report",
    "CollisionReport",
    "CollisionResolver",
    "UnimplementedResolver",
    "validate_cross_cutting",
    "validate_event",
    "ScopeResult",
    "ScheduleErrorKind",
    "layout",
    "display_window",
    "CalendarGrid",
    "DayColumn",
    "EventPlacement",
    "ViewRange",
]
