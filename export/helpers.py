"""Shared helpers for the CSV, Excel, PDF and terminal exports."""

import re
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Optional

from models.catalog import Catalog
from models.schedule_event import ScheduleEvent, SessionType
from scheduling.projection import ViewRange

# ─── Colour palette (RRGGBB, no #) ────────────────────────────────────────────

COLORS: dict[str, str] = {
    "LH":            "B3D4FF",   # lecture
    "PH":            "B3FFB3",   # practical
    "TH":            "FFF2B3",   # tutorial
    "CH":            "FFB3E6",   # clinical
    "cross_cutting": "D4B3FF",
    "collision":     "FF9999",
    "free":          "F5F5F5",
    "header":        "4472C4",
}


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Converts an RRGGBB string to an (r, g, b) tuple."""
    h = hex_color.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def today_str() -> str:
    return date.today().strftime("%d %b %Y")


# ─── Event colour / label ─────────────────────────────────────────────────────

def session_label(session_type: SessionType) -> str:
    return SessionType(session_type).label


def event_color(event: ScheduleEvent, collided: bool = False) -> str:
    """Cell colour: conflicts first, then cross-cutting, then session type."""
    if collided:
        return COLORS["collision"]
    if event.is_cross_cutting:
        return COLORS["cross_cutting"]
    return COLORS.get(event.session_type.value, COLORS["free"])


# ─── File names ───────────────────────────────────────────────────────────────

def _slug(text: str) -> str:
    return re.sub(r"\s+", "-", text.strip())


def export_filename(
    department: Optional[str],
    program: Optional[str],
    view: ViewRange,
    day: Optional[date] = None,
    extension: str = "",
) -> str:
    """lecture-schedule-<dept>-<program>-<View>-<YYYY-MM-DD>[.ext]"""
    view_text = ViewRange(view).value.capitalize()
    stamp = (day or date.today()).isoformat()
    name = "-".join([
        "lecture-schedule",
        _slug(department or "All-Departments"),
        _slug(program or "All-Programs"),
        view_text,
        stamp,
    ])
    if extension:
        name += "." + extension.lstrip(".")
    return name


# ─── Ordering and display ─────────────────────────────────────────────────────

def sort_events(events: Iterable[ScheduleEvent]) -> list[ScheduleEvent]:
    """By weekday, then start time."""
    return sorted(events, key=lambda e: (e.day_of_week, e.start_minutes, e.id))


def events_for_view(
    events: Iterable[ScheduleEvent], view: ViewRange, current_date: Optional[date] = None
) -> list[ScheduleEvent]:
    """The day view only exports the weekday of current_date."""
    events = list(events)
    if ViewRange(view) == ViewRange.DAY:
        weekday = (current_date or date.today()).isoweekday()
        events = [e for e in events if e.day_of_week == weekday]
    return sort_events(events)


class EventDetails:
    """Display strings for one event, resolved through the catalog."""

    def __init__(self, catalog: Catalog, lecturer_names: Optional[Mapping[str, str]] = None):
        self.catalog = catalog
        self.lecturer_names = dict(lecturer_names or {})

    def course_code(self, e: ScheduleEvent) -> str:
        course = self.catalog.course(e.course_id)
        return course.code if course else e.course_id

    def room(self, e: ScheduleEvent) -> str:
        if not e.room_id:
            return "TBA"
        room = self.catalog.room(e.room_id)
        return room.name if room else e.room_id

    def lecturer(self, e: ScheduleEvent) -> str:
        if not e.lecturer_id:
            return "TBA"
        return self.lecturer_names.get(e.lecturer_id, e.lecturer_id)

    def cell_text(self, e: ScheduleEvent) -> str:
        """Grid cell: code, time, room."""
        return f"{self.course_code(e)}\n{e.start_time}-{e.end_time}\n{self.room(e)}"
