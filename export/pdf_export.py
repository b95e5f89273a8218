"""PDF export of the weekly schedule (fpdf2)."""

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Optional

from config.schema import AppConfig
from models.catalog import Catalog
from models.schedule_event import ProgramType, ScheduleEvent
from scheduling.collisions import detect_collisions
from scheduling.projection import CalendarGrid, ViewRange, display_window, layout

from export.helpers import (
    COLORS, EventDetails, event_color, hex_to_rgb, sort_events, today_str,
)


def _pdf_safe(text: str) -> str:
    """Replaces characters the fpdf2 built-in fonts cannot encode (latin-1 only)."""
    return (
        text
        .replace("—", " - ")   # em dash
        .replace("–", "-")      # en dash
        .replace("─", "-")      # box drawing horizontal
        .replace("│", "|")      # box drawing vertical
        .replace("✓", "OK")     # check mark
        .encode("latin-1", errors="replace").decode("latin-1")
    )


# ─── A4 landscape dimensions ──────────────────────────────────────────────────
# Landscape A4: 297 × 210 mm
# Usable width (margin 10 left+right): 277 mm
# Columns: time(25) + 6×day(42) = 25 + 252 = 277 mm

_COLS = {
    "time": 25,
    "day":  42,    # per weekday
}
_ROW_HEADER_H  = 7    # mm
_ROW_HOUR_H    = 15   # mm
_FONT_HEADER   = 8    # pt
_FONT_CONTENT  = 7    # pt
_FONT_TINY     = 6    # pt
_LINE_H        = 3.2  # mm per line at 7pt


class _SchedulePdf:
    """Internal wrapper around fpdf.FPDF for schedule pages."""

    def __init__(self, institution_name: str):
        from fpdf import FPDF

        class _Pdf(FPDF):
            def __init__(inner, name):
                super().__init__(orientation="L", unit="mm", format="A4")
                inner._institution_name = name
                inner._page_title = ""
                inner.alias_nb_pages()
                inner.set_auto_page_break(auto=True, margin=18)
                inner.set_margins(left=10, top=22, right=10)

            def header(inner):
                inner.set_font("Helvetica", "B", 11)
                inner.set_xy(10, 8)
                inner.cell(130, 7, _pdf_safe(inner._institution_name), border=0, align="L")
                inner.cell(0,   7, _pdf_safe(inner._page_title), border=0, align="R")
                inner.ln(0)
                inner.set_draw_color(150, 150, 150)
                inner.line(10, 18, inner.w - 10, 18)

            def footer(inner):
                inner.set_y(-14)
                inner.set_font("Helvetica", "I", 7)
                inner.cell(
                    0, 8,
                    f"{today_str()}  |  Page {inner.page_no()}/{{nb}}",
                    border=0, align="C",
                )

        self._pdf = _Pdf(institution_name)

    def set_title(self, title: str) -> None:
        self._pdf._page_title = title

    def add_page(self) -> None:
        self._pdf.add_page()

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._pdf.output(str(path))

    # ─── Cell drawing ─────────────────────────────────────────────────────────

    def draw_cell(
        self,
        x: float, y: float,
        w: float, h: float,
        text: str = "",
        bg_hex: str | None = None,
        bold: bool = False,
        font_size: int = _FONT_CONTENT,
        text_color: tuple[int, int, int] = (0, 0, 0),
        align: str = "C",
        border: bool = True,
    ) -> None:
        """Draws a cell with background, border and centred text."""
        pdf = self._pdf

        if bg_hex:
            r, g, b = hex_to_rgb(bg_hex)
            pdf.set_fill_color(r, g, b)
            pdf.rect(x, y, w, h, style="F")

        if border:
            pdf.set_draw_color(180, 180, 180)
            pdf.rect(x, y, w, h, style="D")

        if text:
            style = "B" if bold else ""
            pdf.set_font("Helvetica", style, font_size)
            pdf.set_text_color(*text_color)

            max_lines = max(1, int(h // _LINE_H))
            lines = [ln for ln in _pdf_safe(text).split("\n") if ln][:max_lines]
            total_text_h = len(lines) * _LINE_H
            y_text = y + max(0.5, (h - total_text_h) / 2)

            for line in lines:
                pdf.set_xy(x, y_text)
                pdf.cell(w, _LINE_H, line[:26], border=0, align=align)
                y_text += _LINE_H

            pdf.set_text_color(0, 0, 0)

    def draw_header_row(self, x: float, y: float, day_names: list[str]) -> float:
        """Draws the header row and returns the y position below it."""
        cols = [("Time", _COLS["time"])] + [(name, _COLS["day"]) for name in day_names]
        cx = x
        for label, w in cols:
            self.draw_cell(
                cx, y, w, _ROW_HEADER_H, label,
                bg_hex=COLORS["header"],
                bold=True,
                font_size=_FONT_HEADER,
                text_color=(255, 255, 255),
            )
            cx += w
        return y + _ROW_HEADER_H


class PdfExporter:
    """Exports events as a landscape week grid, one page per programme type."""

    def __init__(self, events: Iterable[ScheduleEvent], catalog: Catalog,
                 config: Optional[AppConfig] = None,
                 lecturer_names: Optional[Mapping[str, str]] = None):
        self.events  = sort_events(events)
        self.config  = config or AppConfig()
        self.details = EventDetails(catalog, lecturer_names)
        self.collisions = detect_collisions(self.events, catalog)
        self._collided = {i for c in self.collisions for i in c.event_ids}
        self._table_x = 10.0

    # ─── Public API ───────────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        pdf = _SchedulePdf(self.config.institution_name)
        pages = 0
        for program_type in ProgramType:
            subset = [e for e in self.events if e.program_type == program_type]
            if not subset:
                continue
            first, last = display_window(program_type, self.config.calendar)
            grid = layout(subset, ViewRange.WEEK, first_hour=first, last_hour=last)
            pdf.set_title(
                f"Weekly schedule ({program_type.value} programmes) | {len(subset)} events"
            )
            pdf.add_page()
            self._draw_grid(pdf, grid)
            pages += 1

        if self.collisions or pages == 0:
            pdf.set_title(f"Conflicts: {len(self.collisions)}")
            pdf.add_page()
            self._draw_collisions(pdf)
        pdf.save(output_path)

    # ─── Drawing ──────────────────────────────────────────────────────────────

    def _draw_grid(self, pdf: _SchedulePdf, grid: CalendarGrid) -> None:
        x = self._table_x
        y = 22.0   # below the header line
        day_names = [self.config.calendar.day_names[c.day_of_week - 1] for c in grid.columns]
        y = pdf.draw_header_row(x, y, day_names)

        # Background first, so spans are coloured over several rows
        for i, hour in enumerate(grid.hours):
            row_y = y + i * _ROW_HOUR_H
            pdf.draw_cell(x, row_y, _COLS["time"], _ROW_HOUR_H,
                          f"{hour:02d}:00\n{hour + 1:02d}:00", font_size=_FONT_TINY)
            for j in range(len(grid.columns)):
                pdf.draw_cell(x + _COLS["time"] + j * _COLS["day"], row_y,
                              _COLS["day"], _ROW_HOUR_H, bg_hex=COLORS["free"])

        for j, column in enumerate(grid.columns):
            cx = x + _COLS["time"] + j * _COLS["day"]
            stacked: dict[int, int] = {}
            for p in column.placements:
                # Events sharing a start row are drawn side by side
                n = len([q for q in column.placements if q.row == p.row])
                k = stacked.get(p.row, 0)
                stacked[p.row] = k + 1
                w = _COLS["day"] / n
                pdf.draw_cell(
                    cx + k * w, y + p.row * _ROW_HOUR_H, w, p.span * _ROW_HOUR_H,
                    self.details.cell_text(p.event),
                    bg_hex=event_color(p.event, p.event.id in self._collided),
                    font_size=_FONT_CONTENT if n == 1 else _FONT_TINY,
                )

        if grid.hidden:
            p = pdf._pdf
            p.set_font("Helvetica", "I", 7)
            p.set_xy(x, y + len(grid.hours) * _ROW_HOUR_H + 2)
            p.cell(0, 5, _pdf_safe(
                f"Outside displayed hours: {', '.join(e.id for e in grid.hidden)}"
            ), border=0, align="L")

    def _draw_collisions(self, pdf: _SchedulePdf) -> None:
        p = pdf._pdf
        p.set_xy(self._table_x, 24)
        if not self.collisions:
            p.set_font("Helvetica", "", 9)
            p.cell(0, 6, "No events and no conflicts.", border=0, align="L")
            return
        for c in self.collisions:
            p.set_font("Helvetica", "B", 8)
            p.set_x(self._table_x)
            p.cell(30, 5, _pdf_safe(c.kind.value), border=0, align="L")
            p.set_font("Helvetica", "", 8)
            p.multi_cell(0, 5, _pdf_safe(c.description), border=0, align="L")
