"""Excel export of the schedule (openpyxl)."""

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Optional

from config.schema import AppConfig
from models.catalog import Catalog
from models.collision import Collision
from models.schedule_event import ProgramType, ScheduleEvent
from scheduling.collisions import detect_collisions
from scheduling.projection import CalendarGrid, ViewRange, display_window, layout

from export.helpers import (
    COLORS, EventDetails, event_color, session_label, sort_events, today_str,
)


class ExcelExporter:
    """Exports events to a workbook: overview, one week grid per programme type, conflicts."""

    # Column widths (Excel units)
    COL_TIME_W = 13
    COL_DAY_W  = 22

    # Row heights (points)
    ROW_HEADER_H = 22
    ROW_HOUR_H   = 48

    def __init__(self, events: Iterable[ScheduleEvent], catalog: Catalog,
                 config: Optional[AppConfig] = None,
                 lecturer_names: Optional[Mapping[str, str]] = None):
        self.events  = sort_events(events)
        self.catalog = catalog
        self.config  = config or AppConfig()
        self.details = EventDetails(catalog, lecturer_names)
        self.collisions: list[Collision] = detect_collisions(self.events, catalog)
        self._collided = {i for c in self.collisions for i in c.event_ids}

    # ─── Public API ───────────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Creates the workbook with all sheets."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # drop the empty default sheet

        self._sheet_overview(wb)

        for program_type in ProgramType:
            subset = [e for e in self.events if e.program_type == program_type]
            if subset:
                self._sheet_week(wb, program_type, subset)

        self._sheet_collisions(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _center_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="center", vertical="center")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _header_row(self, ws, headers: list[str], row: int = 1) -> None:
        from openpyxl.styles import Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = self._center_align(wrap=False)
            cell.border = border
        ws.row_dimensions[row].height = self.ROW_HEADER_H

    # ─── Sheet: overview ──────────────────────────────────────────────────────

    def _sheet_overview(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Overview", index=0)

        ws.cell(row=1, column=1, value=self.config.institution_name).font = Font(bold=True, size=14)
        ws.cell(row=2, column=1, value=f"Created: {today_str()}")
        ws.cell(row=2, column=3, value=f"Events: {len(self.events)}")
        ws.cell(row=2, column=4, value=f"Conflicts: {len(self.collisions)}")

        headers = ["Course", "Course Code", "Day", "Start Time", "End Time",
                   "Room", "Lecturer", "Session Type", "Cross-cutting"]
        self._header_row(ws, headers, row=4)
        border = self._thin_border()
        d = self.details
        row = 5
        for e in self.events:
            values = [
                e.title, d.course_code(e), e.day_name, e.start_time, e.end_time,
                d.room(e), d.lecturer(e), session_label(e.session_type),
                "yes" if e.is_cross_cutting else "",
            ]
            for col, v in enumerate(values, 1):
                ws.cell(row=row, column=col, value=v).border = border
            if e.id in self._collided:
                ws.cell(row=row, column=1).fill = self._fill(COLORS["collision"])
            row += 1

        for letter, width in zip("ABCDEFGHI", [30, 12, 11, 10, 10, 12, 18, 13, 13]):
            ws.column_dimensions[letter].width = width

    # ─── Sheet: week grid ─────────────────────────────────────────────────────

    def _sheet_week(self, wb, program_type: ProgramType,
                    events: list[ScheduleEvent]) -> None:
        first, last = display_window(program_type, self.config.calendar)
        grid = layout(events, ViewRange.WEEK, first_hour=first, last_hour=last)
        ws = wb.create_sheet(title=f"Week ({program_type.value})"[:31])
        self._write_grid(ws, grid)

    def _write_grid(self, ws, grid: CalendarGrid) -> None:
        from openpyxl.styles import Font
        from openpyxl.utils import get_column_letter

        day_names = self.config.calendar.day_names
        headers = ["Time"] + [day_names[c.day_of_week - 1] for c in grid.columns]
        self._header_row(ws, headers)
        ws.column_dimensions["A"].width = self.COL_TIME_W
        for col in range(2, 2 + len(grid.columns)):
            ws.column_dimensions[get_column_letter(col)].width = self.COL_DAY_W

        border = self._thin_border()
        for i, hour in enumerate(grid.hours):
            row = i + 2
            c = ws.cell(row=row, column=1, value=f"{hour:02d}:00-{hour + 1:02d}:00")
            c.alignment = self._center_align(wrap=False)
            c.font = Font(bold=True, size=9)
            c.border = border
            ws.row_dimensions[row].height = self.ROW_HOUR_H
            for j in range(len(grid.columns)):
                c = ws.cell(row=row, column=j + 2)
                c.fill = self._fill(COLORS["free"])
                c.border = border

        # Colour the whole span, text only in the start row
        for j, column in enumerate(grid.columns):
            col = j + 2
            for p in column.placements:
                color = self._fill(event_color(p.event, p.event.id in self._collided))
                for r in range(p.row, p.row + p.span):
                    ws.cell(row=r + 2, column=col).fill = color
            for hour in grid.hours:
                here = grid.cell(column.day_of_week, hour)
                if not here:
                    continue
                c = ws.cell(row=hour - grid.first_hour + 2, column=col,
                            value="\n──\n".join(self.details.cell_text(e) for e in here))
                c.alignment = self._center_align()
                c.font = Font(size=8)

        if grid.hidden:
            row = len(grid.hours) + 3
            ws.cell(row=row, column=1,
                    value=f"Outside displayed hours: {', '.join(e.id for e in grid.hidden)}"
                    ).font = Font(italic=True, size=8, color="666666")

    # ─── Sheet: conflicts ─────────────────────────────────────────────────────

    def _sheet_collisions(self, wb) -> None:
        ws = wb.create_sheet(title="Conflicts")
        self._header_row(ws, ["Type", "Events", "Description"])
        border = self._thin_border()
        for row, c in enumerate(self.collisions, 2):
            ws.cell(row=row, column=1, value=c.kind.value).border = border
            ws.cell(row=row, column=2, value=", ".join(sorted(c.event_ids))).border = border
            ws.cell(row=row, column=3, value=c.description).border = border
        if not self.collisions:
            ws.cell(row=2, column=1, value="No conflicts")
        ws.column_dimensions["A"].width = 15
        ws.column_dimensions["B"].width = 20
        ws.column_dimensions["C"].width = 90
