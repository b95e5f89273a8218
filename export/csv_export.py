"""CSV export of a schedule (one row per event)."""

import csv
import io
from collections.abc import Iterable, Mapping
from datetime import date
from pathlib import Path
from typing import Optional

from models.catalog import Catalog
from models.schedule_event import ScheduleEvent
from scheduling.projection import ViewRange

from export.helpers import EventDetails, events_for_view, session_label

HEADERS = ["Course", "Course Code", "Day", "Start Time", "End Time",
           "Room", "Lecturer", "Session Type"]


class CsvExporter:
    """Writes the events of one view as CSV, sorted by day then start time."""

    def __init__(self, events: Iterable[ScheduleEvent], catalog: Catalog,
                 lecturer_names: Optional[Mapping[str, str]] = None):
        self.events = list(events)
        self.details = EventDetails(catalog, lecturer_names)

    def rows(self, view: ViewRange = ViewRange.WEEK,
             current_date: Optional[date] = None) -> list[list[str]]:
        d = self.details
        return [
            [
                e.title,
                d.course_code(e),
                e.day_name,
                e.start_time,
                e.end_time,
                d.room(e),
                d.lecturer(e),
                session_label(e.session_type),
            ]
            for e in events_for_view(self.events, view, current_date)
        ]

    def render(self, view: ViewRange = ViewRange.WEEK,
               current_date: Optional[date] = None) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\r\n")
        writer.writerow(HEADERS)
        writer.writerows(self.rows(view, current_date))
        return buf.getvalue()

    def export(self, output_path: Path, view: ViewRange = ViewRange.WEEK,
               current_date: Optional[date] = None) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            f.write(self.render(view, current_date))
