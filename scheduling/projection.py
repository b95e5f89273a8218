"""Calendar projection: events laid out on an hour grid.

Events are bucketed by their own day_of_week, never by calendar date. The
reference date only labels the columns (and picks the month for the month
view). The one exception is a non-recurring event in the month view, which
shows only on its event_date. Layout works in whole hours: an event starting at 09:30 sits in the
09:00 row. Collision detection stays minute-precise; this is display only.
"""

import calendar
import logging
from collections.abc import Iterable
from datetime import date, timedelta
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from models.schedule_event import DAY_NAMES, ProgramType, ScheduleEvent

logger = logging.getLogger(__name__)

# Monday..Saturday; teaching never happens on Sunday
WEEK_DAYS = [1, 2, 3, 4, 5, 6]

DEFAULT_WINDOWS = {
    ProgramType.DAY: (8, 17),
    ProgramType.EVENING: (17, 22),
}


class ViewRange(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class EventPlacement(BaseModel):
    """Position of one event in a day column."""

    event: ScheduleEvent
    row: int    # start_hour - first_hour
    span: int   # end_hour - start_hour, at least 1


class DayColumn(BaseModel):
    """One column of the grid."""

    day_of_week: int                  # 1=Monday .. 7=Sunday
    day_date: Optional[date] = None   # label only
    placements: list[EventPlacement] = []

    @property
    def label(self) -> str:
        name = DAY_NAMES[self.day_of_week - 1]
        if self.day_date is None:
            return name
        return f"{name[:3]} {self.day_date.strftime('%d %b')}"


class CalendarGrid(BaseModel):
    """Result of layout(): columns × hour rows.

    Cells are keyed by day_of_week in the day and week views and by date in
    the month view, where the same weekday appears several times.
    """

    view: ViewRange
    first_hour: int
    last_hour: int
    columns: list[DayColumn]
    hidden: list[ScheduleEvent] = []   # outside the displayed hours

    @property
    def hours(self) -> list[int]:
        return list(range(self.first_hour, self.last_hour))

    def _key(self, col: DayColumn) -> Union[int, date]:
        if self.view == ViewRange.MONTH and col.day_date is not None:
            return col.day_date
        return col.day_of_week

    def column(self, day: Union[int, date]) -> Optional[DayColumn]:
        if isinstance(day, date):
            return next((c for c in self.columns if c.day_date == day), None)
        return next((c for c in self.columns if c.day_of_week == day), None)

    def cell(self, day: Union[int, date], hour: int) -> list[ScheduleEvent]:
        """Events starting in this (day, hour) cell, stacked in start order."""
        col = self.column(day)
        if col is None:
            return []
        row = hour - self.first_hour
        return [p.event for p in col.placements if p.row == row]

    def cells(self) -> dict[tuple, list[ScheduleEvent]]:
        """All non-empty cells as {(day key, hour): [events]}."""
        out: dict[tuple, list[ScheduleEvent]] = {}
        for col in self.columns:
            for p in col.placements:
                out.setdefault((self._key(col), self.first_hour + p.row), []).append(p.event)
        return out


def display_window(program_type: ProgramType, calendar_config=None) -> tuple[int, int]:
    """(first_hour, last_hour) for day or evening programmes."""
    if calendar_config is None:
        return DEFAULT_WINDOWS[program_type]
    if program_type == ProgramType.EVENING:
        return calendar_config.evening_first_hour, calendar_config.evening_last_hour
    return calendar_config.day_first_hour, calendar_config.day_last_hour


def _place(
    event: ScheduleEvent, first_hour: int, last_hour: int
) -> Optional[EventPlacement]:
    start, end = event.start_hour, event.end_hour
    # An event ending at 10:30 still occupies part of the 10:00 row
    visible_end = end + 1 if event.end_minutes % 60 else end
    if visible_end <= first_hour or start >= last_hour:
        return None
    row = max(start, first_hour) - first_hour
    span = max(1, min(end, last_hour) - max(start, first_hour))
    return EventPlacement(event=event, row=row, span=span)


def _sits_in(event: ScheduleEvent, col: DayColumn, view: ViewRange) -> bool:
    """Weekday match; in the month view a one-off sitting also needs its date."""
    if event.day_of_week != col.day_of_week:
        return False
    if view == ViewRange.MONTH and not event.is_recurring and event.event_date is not None:
        return event.event_date == col.day_date
    return True


def _columns_for(view: ViewRange, current_date: Optional[date]) -> list[DayColumn]:
    if view == ViewRange.DAY:
        ref = current_date or date.today()
        return [DayColumn(day_of_week=ref.isoweekday(), day_date=ref)]

    if view == ViewRange.WEEK:
        if current_date is None:
            return [DayColumn(day_of_week=d) for d in WEEK_DAYS]
        monday = current_date - timedelta(days=current_date.weekday())
        return [
            DayColumn(day_of_week=d, day_date=monday + timedelta(days=d - 1))
            for d in WEEK_DAYS
        ]

    ref = current_date or date.today()
    _, days_in_month = calendar.monthrange(ref.year, ref.month)
    columns: list[DayColumn] = []
    for day in range(1, days_in_month + 1):
        d = date(ref.year, ref.month, day)
        if d.isoweekday() in WEEK_DAYS:
            columns.append(DayColumn(day_of_week=d.isoweekday(), day_date=d))
    return columns


def layout(
    events: Iterable[ScheduleEvent],
    view_range: ViewRange = ViewRange.WEEK,
    current_date: Optional[date] = None,
    first_hour: int = 8,
    last_hour: int = 17,
) -> CalendarGrid:
    """Projects events onto a day/week/month grid of hour rows.

    week:  six columns Monday..Saturday, whatever weekday current_date is
    day:   the single weekday of current_date
    month: every Monday..Saturday date of current_date's month; one-off
           sittings appear only on their event_date
    """
    if first_hour >= last_hour:
        raise ValueError(f"first_hour ({first_hour}) must be before last_hour ({last_hour})")

    view_range = ViewRange(view_range)
    ordered = sorted(events, key=lambda e: (e.day_of_week, e.start_minutes, e.id))
    columns = _columns_for(view_range, current_date)

    placements: dict[str, EventPlacement] = {}
    hidden: list[ScheduleEvent] = []
    for e in ordered:
        p = _place(e, first_hour, last_hour)
        if p is None:
            logger.debug(f"Event {e.id} ({e.start_time}-{e.end_time}) outside {first_hour}-{last_hour}h")
            hidden.append(e)
            continue
        placements[e.id] = p

    for col in columns:
        col.placements = [
            placements[e.id] for e in ordered
            if e.id in placements and _sits_in(e, col, view_range)
        ]

    return CalendarGrid(
        view=view_range,
        first_hour=first_hour,
        last_hour=last_hour,
        columns=columns,
        hidden=hidden,
    )
