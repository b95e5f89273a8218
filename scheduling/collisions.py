"""Collision detection over a snapshot of schedule events.

Two events collide when they fall on the same weekday and their time
ranges overlap:

    s1 < e2 AND s2 < e1      (closed-open, minute precision)

Each overlapping pair is checked along three independent dimensions
(lecturer, room, student group), so one pair yields up to three records.
The detector only reports; it never moves or removes events.
"""

import logging
from collections.abc import Iterable
from typing import Optional, Protocol

from pydantic import BaseModel

from models.catalog import Catalog
from models.collision import Collision, CollisionKind
from models.schedule_event import ScheduleEvent

logger = logging.getLogger(__name__)

_KIND_ORDER = {
    CollisionKind.LECTURER: 0,
    CollisionKind.ROOM: 1,
    CollisionKind.STUDENT_GROUP: 2,
}


def student_group_scope(event: ScheduleEvent) -> set[tuple[str, str]]:
    """Owning department, primary program and the program scopes of an event.

    Entries are tagged so a department id can never match a program id.
    """
    scope = {("department", event.department)}
    if event.program_id:
        scope.add(("program", event.program_id))
    scope.update(("program", p) for p in event.program_scopes)
    return scope


def _label(event: ScheduleEvent, catalog: Optional[Catalog]) -> str:
    course = catalog.course(event.course_id) if catalog else None
    if course is not None:
        return f"{course.code} {course.name}"
    return event.title or event.course_id


def _pair_collisions(
    a: ScheduleEvent, b: ScheduleEvent, catalog: Optional[Catalog]
) -> list[Collision]:
    """All collision records for one overlapping pair."""
    found: list[Collision] = []
    ids = frozenset({a.id, b.id})
    names = f"{_label(a, catalog)} and {_label(b, catalog)}"
    when = f"{a.day_name} {max(a.start_time, b.start_time)}-{min(a.end_time, b.end_time)}"

    if a.lecturer_id and a.lecturer_id == b.lecturer_id:
        found.append(Collision(
            kind=CollisionKind.LECTURER,
            event_ids=ids,
            description=f"Lecturer {a.lecturer_id} has overlapping classes ({when}): {names}",
        ))

    if a.room_id and a.room_id == b.room_id:
        room = catalog.room(a.room_id) if catalog else None
        room_name = room.name if room else a.room_id
        found.append(Collision(
            kind=CollisionKind.ROOM,
            event_ids=ids,
            description=f"Room {room_name} is double-booked ({when}): {names}",
        ))

    shared = student_group_scope(a) & student_group_scope(b)
    if shared:
        groups = ", ".join(sorted(value for _, value in shared))
        found.append(Collision(
            kind=CollisionKind.STUDENT_GROUP,
            event_ids=ids,
            description=f"Students of {groups} have overlapping classes ({when}): {names}",
        ))

    return found


def _sort_key(c: Collision) -> tuple:
    return (_KIND_ORDER[c.kind], tuple(sorted(c.event_ids)))


def detect_collisions(
    events: Iterable[ScheduleEvent], catalog: Optional[Catalog] = None
) -> list[Collision]:
    """Finds lecturer, room and student-group double bookings.

    Pure function of its input: the same event set always gives the same
    list in the same order. `catalog` only improves the descriptions.
    """
    valid: list[ScheduleEvent] = []
    for e in events:
        if not e.has_valid_time_range:
            logger.debug(f"Skipping event {e.id}: {e.start_time}-{e.end_time} is not a valid range")
            continue
        valid.append(e)

    # Bucket by weekday first; only same-day pairs can overlap
    by_day: dict[int, list[ScheduleEvent]] = {}
    for e in valid:
        by_day.setdefault(e.day_of_week, []).append(e)

    seen: dict[str, Collision] = {}
    for day_events in by_day.values():
        day_events = sorted(day_events, key=lambda e: (e.start_minutes, e.id))
        for i, a in enumerate(day_events):
            for b in day_events[i + 1:]:
                if b.start_minutes >= a.end_minutes:
                    break  # sorted by start: nothing later can overlap a
                if a.id == b.id:
                    continue
                for c in _pair_collisions(a, b, catalog):
                    seen.setdefault(c.key, c)

    return sorted(seen.values(), key=_sort_key)


def _sittings_meet(a: ScheduleEvent, b: ScheduleEvent) -> bool:
    """Two weekly events meet every week; anything one-off needs equal dates."""
    if a.is_recurring and b.is_recurring:
        return True
    return a.event_date is not None and a.event_date == b.event_date


def collisions_for(
    candidate: ScheduleEvent,
    existing: Iterable[ScheduleEvent],
    catalog: Optional[Catalog] = None,
) -> list[Collision]:
    """Collisions a new or edited event would introduce.

    Events sharing the candidate's id are ignored so an edit does not
    collide with its own stored version. Only events of the same programme
    type are compared, and one-off sittings only meet on the same date.
    """
    if not candidate.has_valid_time_range:
        return []
    found: list[Collision] = []
    for other in existing:
        if other.id == candidate.id or not other.has_valid_time_range:
            continue
        if other.program_type != candidate.program_type:
            continue
        if _sittings_meet(candidate, other) and candidate.overlaps(other):
            found.extend(_pair_collisions(candidate, other, catalog))
    return sorted(found, key=_sort_key)


# ─── Report ───────────────────────────────────────────────────────────────────

class CollisionReport(BaseModel):
    """Collisions of one snapshot, ready for display."""

    collisions: list[Collision]
    event_count: int

    @property
    def is_clean(self) -> bool:
        return not self.collisions

    def by_kind(self, kind: CollisionKind) -> list[Collision]:
        return [c for c in self.collisions if c.kind == kind]

    def print_rich(self) -> None:
        """Prints the report with Rich."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ NO COLLISIONS[/bold green]"
            if self.is_clean
            else f"[bold red]✗ {len(self.collisions)} COLLISION(S)[/bold red]"
        )
        counts = " | ".join(
            f"{kind.value}: {len(self.by_kind(kind))}" for kind in CollisionKind
        )
        console.print(Panel(
            f"{status}\nEvents checked: {self.event_count}\n{counts}",
            title="Scheduling conflicts",
            border_style="cyan",
        ))
        if self.is_clean:
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Type", width=14)
        table.add_column("Events", width=24)
        table.add_column("Description")
        for c in self.collisions:
            table.add_row(
                f"[red]{c.kind.value}[/red]",
                ", ".join(sorted(c.event_ids)),
                c.description,
            )
        console.print(table)


def build_report(
    events: Iterable[ScheduleEvent], catalog: Optional[Catalog] = None
) -> CollisionReport:
    events = list(events)
    return CollisionReport(
        collisions=detect_collisions(events, catalog),
        event_count=len(events),
    )


# ─── Resolution hook ──────────────────────────────────────────────────────────

class CollisionResolver(Protocol):
    """Collaborator that turns a reported collision into an edit."""

    def resolve(self, collision: Collision) -> None: ...


class UnimplementedResolver:
    """Placeholder until a resolution workflow exists."""

    def resolve(self, collision: Collision) -> None:
        raise NotImplementedError(
            f"No resolution workflow for {collision.kind.value} collisions yet "
            f"({', '.join(sorted(collision.event_ids))})."
        )
