"""Row builder for the terminal calendar (used by `show`)."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from collections.abc import Mapping
    from models.catalog import Catalog
    from scheduling.projection import CalendarGrid


def render_grid_rows(
    grid: "CalendarGrid",
    catalog: "Catalog",
    lecturer_names: Optional["Mapping[str, str]"] = None,
    collided: Optional[set[str]] = None,
) -> list[list[str]]:
    """Table rows for a calendar grid.

    Each row: [time_label, one cell per column]. The start cell shows the
    course code and room, the following rows of a longer event show '│'.
    Conflicting events are marked with '!'.
    """
    from export.helpers import EventDetails

    details = EventDetails(catalog, lecturer_names)
    collided = collided or set()
    rows: list[list[str]] = []

    for hour in grid.hours:
        row_idx = hour - grid.first_hour
        cells = [f"{hour:02d}:00"]
        for col in grid.columns:
            parts: list[str] = []
            for p in col.placements:
                if p.row == row_idx:
                    mark = "! " if p.event.id in collided else ""
                    text = f"{mark}{details.course_code(p.event)}"
                    if p.event.is_cross_cutting:
                        text += " ✦"
                    parts.append(f"{text}\n{details.room(p.event)}")
                elif p.row < row_idx < p.row + p.span:
                    parts.append("│")
            cells.append("\n".join(parts) if parts else "—")
        rows.append(cells)

    return rows


def column_headers(grid: "CalendarGrid") -> list[str]:
    return ["Time"] + [col.label for col in grid.columns]
