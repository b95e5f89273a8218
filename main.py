"""Lecture schedule: main CLI.

Usage:
  python main.py init                     Write the default config
  python main.py config show              Show the config
  python main.py seed                     Write demo catalog and events to the store
  python main.py events list              Events visible to the caller
  python main.py events add ...           Validate, check conflicts, save
  python main.py events delete <id>       Delete an event
  python main.py collisions               Conflict report
  python main.py resolve <key>            Resolve a conflict (not available yet)
  python main.py show --view week         Calendar in the terminal
  python main.py unscheduled              Courses without events
  python main.py export --format xlsx     CSV / Excel / PDF export

Global options --role and --department override the configured caller.
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

from models.caller import Caller, Role
from models.schedule_event import DAY_NAMES, ProgramType, SessionType

console = Console()
logger = logging.getLogger(__name__)


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


def _load_config_or_abort():
    """Loads the config or aborts with a message."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]No configuration found.[/red]\n"
            "Run [bold]python main.py init[/bold] first."
        )
        sys.exit(1)
    try:
        return mgr, mgr.load()
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


def _open_repository(config):
    from store import EventRepository, JsonFileStore, StoreError
    logger.debug(f"Opening store in {config.store.data_dir}")
    try:
        return EventRepository(JsonFileStore(Path(config.store.data_dir)))
    except StoreError as e:
        _fail(f"Store error: {e}")


def _caller(config) -> Caller:
    """Configured caller, with the --role/--department overrides applied."""
    from store import StaticAuth

    ctx = click.get_current_context()
    opts = (ctx.find_root().obj or {})
    caller = config.caller.to_caller()
    if opts.get("role"):
        caller = caller.model_copy(update={"role": Role(opts["role"])})
    if opts.get("departments"):
        caller = Caller(id=caller.id, role=caller.role,
                        departments=list(opts["departments"]),
                        display_name=caller.display_name)
    return StaticAuth(caller).current_user()


def _parse_day(value: str) -> int:
    """'3', 'wed' or 'Wednesday' → 3."""
    value = value.strip()
    if value.isdigit():
        return int(value)
    for i, name in enumerate(DAY_NAMES, 1):
        if name.lower().startswith(value.lower()) and len(value) >= 3:
            return i
    raise click.BadParameter(f"Unknown day: {value}")


def _event_table(events, catalog, names, title: str) -> Table:
    from export.helpers import EventDetails, session_label

    d = EventDetails(catalog, names)
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("ID", style="bold")
    table.add_column("Day")
    table.add_column("Time")
    table.add_column("Course")
    table.add_column("Room")
    table.add_column("Lecturer")
    table.add_column("Type")
    table.add_column("Dept.")
    table.add_column("Scope")
    for e in events:
        scope = ""
        if e.is_cross_cutting:
            scope = "✦ " + ", ".join(e.department_scopes + e.program_scopes)
        table.add_row(
            e.id, e.day_name[:3], f"{e.start_time}-{e.end_time}",
            f"{d.course_code(e)} {e.title}", d.room(e), d.lecturer(e),
            session_label(e.session_type), e.department, scope,
        )
    return table


# ─── INIT ─────────────────────────────────────────────────────────────────────

@click.command("init")
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing config.")
def cmd_init(force: bool):
    """Writes the default configuration."""
    from config.defaults import default_app_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print("[yellow]A configuration already exists.[/yellow]")
        if not click.confirm("Overwrite it?", default=False):
            return
    mgr.save(default_app_config())
    console.print("Next: [bold]python main.py seed[/bold] for demo data.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Show the configuration."""


@cmd_config.command("show")
def config_show():
    """Shows the current configuration."""
    mgr, config = _load_config_or_abort()

    console.print(Panel(
        f"[bold]{config.institution_name}[/bold]  |  "
        f"Semester {config.semester.start_date} – {config.semester.end_date}",
        title="Configuration",
        border_style="cyan",
    ))

    cal = config.calendar
    table = Table(title="Calendar", box=box.ROUNDED)
    table.add_column("Programmes")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Slots")
    table.add_row("day", f"{cal.day_first_hour:02d}:00", f"{cal.day_last_hour:02d}:00",
                  str(cal.day_last_hour - cal.day_first_hour))
    table.add_row("evening", f"{cal.evening_first_hour:02d}:00",
                  f"{cal.evening_last_hour:02d}:00",
                  str(cal.evening_last_hour - cal.evening_first_hour))
    console.print(table)

    c = config.caller
    console.print(
        f"\n[bold]Store:[/bold] {config.store.data_dir}\n"
        f"[bold]Caller:[/bold] {c.display_name} ({c.id}) | role {c.role.value} | "
        f"departments: {', '.join(c.departments) or '—'}"
    )


# ─── SEED ─────────────────────────────────────────────────────────────────────

@click.command("seed")
@click.option("--force", is_flag=True, default=False,
              help="Write even if the store already holds events.")
def cmd_seed(force: bool):
    """Writes the demo catalog, users and events to the store."""
    from config.defaults import demo_catalog, demo_events, demo_users
    from store import StoreError

    mgr, config = _load_config_or_abort()
    repo = _open_repository(config)

    if repo.events() and not force:
        console.print("[yellow]The store already holds events.[/yellow]")
        if not click.confirm("Write the demo data anyway?", default=False):
            return

    catalog = demo_catalog()
    try:
        n_catalog = repo.save_catalog(catalog)
        n_users = repo.save_users(demo_users())
        events = demo_events(catalog)
        for e in events:
            repo.save_event(e)
    except StoreError as e:
        _fail(f"Store error: {e}")

    console.print(f"[green]✓[/green] Demo data written to {config.store.data_dir}")
    console.print(f"\n{catalog.summary()}")
    console.print(f"Users: {n_users} | Catalog records: {n_catalog} | Events: {len(events)}")


# ─── EVENTS ───────────────────────────────────────────────────────────────────

@click.group("events")
def cmd_events():
    """List, add or delete schedule events."""


@cmd_events.command("list")
@click.option("--program", default=None, help="Program id.")
@click.option("--type", "program_type", type=click.Choice(["day", "evening"]), default=None)
@click.option("--search", default=None, help="Title, course code, lecturer or room.")
def events_list(program: Optional[str], program_type: Optional[str], search: Optional[str]):
    """Lists the events visible to the caller."""
    from export.helpers import sort_events
    from scheduling import filter_events, visible_events

    mgr, config = _load_config_or_abort()
    repo = _open_repository(config)
    caller = _caller(config)
    catalog = repo.catalog()
    names = repo.lecturer_names()

    events = visible_events(repo.events(), caller.role, caller.departments)
    events = filter_events(
        events,
        program_id=program,
        program_type=ProgramType(program_type) if program_type else None,
        search=search,
        catalog=catalog,
        lecturer_names=names,
    )
    if not events:
        console.print("[dim]No events.[/dim]")
        return
    console.print(_event_table(sort_events(events), catalog, names,
                               f"Events ({caller.role.value})"))


@cmd_events.command("add")
@click.option("--course", "course_id", required=True, help="Course id.")
@click.option("--day", required=True, help="1-6 or day name (Monday..Saturday).")
@click.option("--start", required=True, help="HH:MM")
@click.option("--end", required=True, help="HH:MM")
@click.option("--room", "room_id", default=None, help="Room id (optional).")
@click.option("--lecturer", "lecturer_id", default=None,
              help="Lecturer id (default: the course lecturer).")
@click.option("--session-type", type=click.Choice([s.value for s in SessionType]),
              default=SessionType.LECTURE.value)
@click.option("--type", "program_type", type=click.Choice(["day", "evening"]), default="day")
@click.option("--program", "program_id", default=None, help="Primary program id.")
@click.option("--cross-cutting", is_flag=True, default=False)
@click.option("--dept-scope", multiple=True, help="Department scope (repeatable).")
@click.option("--program-scope", multiple=True, help="Program scope (repeatable).")
@click.option("--date", "event_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="First sitting (YYYY-MM-DD).")
@click.option("--once", is_flag=True, default=False,
              help="One-off sitting on --date instead of a weekly event.")
@click.option("--id", "event_id", default=None, help="Event id (default: next free id).")
@click.option("--title", default=None)
@click.option("--force", is_flag=True, default=False, help="Save despite conflicts.")
def events_add(course_id, day, start, end, room_id, lecturer_id, session_type,
               program_type, program_id, cross_cutting, dept_scope, program_scope,
               event_date, once, event_id, title, force):
    """Validates a new event, checks it for conflicts and saves it."""
    from models.schedule_event import ScheduleEvent
    from scheduling import collisions_for, validate_event
    from store import StoreError

    mgr, config = _load_config_or_abort()
    repo = _open_repository(config)
    caller = _caller(config)
    catalog = repo.catalog()

    course = catalog.course(course_id)
    if course is None:
        _fail(f"Unknown course '{course_id}'.")

    first_sitting: Optional[date] = event_date.date() if event_date else None
    if first_sitting and not config.semester.contains(first_sitting):
        _fail(f"Date {first_sitting} is outside the semester "
              f"({config.semester.start_date} – {config.semester.end_date}).")
    if once and first_sitting is None:
        _fail("--once needs --date.")
    day_of_week = _parse_day(day)
    if once and 1 <= day_of_week <= 6 and first_sitting.isoweekday() != day_of_week:
        _fail(f"Date {first_sitting} is a {DAY_NAMES[first_sitting.weekday()]}, "
              f"not a {DAY_NAMES[day_of_week - 1]}.")

    if event_id:
        stored = repo.event(event_id)
        if (stored is not None and caller.role.is_department_scoped
                and not caller.belongs_to(stored.department)):
            _fail(f"PermissionDenied: event {event_id} belongs to {stored.department}.")

    try:
        event = ScheduleEvent(
            id=event_id or repo.next_event_id(),
            title=title or course.name,
            course_id=course.id,
            lecturer_id=lecturer_id or course.lecturer_id,
            room_id=room_id,
            day_of_week=day_of_week,
            start_time=start,
            end_time=end,
            is_cross_cutting=cross_cutting,
            department_scopes=list(dept_scope),
            program_scopes=list(program_scope),
            department=course.department,
            session_type=SessionType(session_type),
            program_type=ProgramType(program_type),
            program_id=program_id or course.program_id,
            event_date=first_sitting,
            is_recurring=not once,
            created_by=caller.id,
        )
    except ValueError as e:
        _fail(f"Invalid event: {e}")

    result = validate_event(event, caller.role, caller.departments, catalog)
    if not result.ok:
        _fail(f"{result.error.value}: {result.message}")
    event = result.event

    conflicts = collisions_for(event, repo.events(), catalog)
    if conflicts:
        for c in conflicts:
            console.print(f"[red]✗ {c.kind.value}:[/red] {c.description}")
        if not force:
            _fail(f"{len(conflicts)} conflict(s); not saved. Use --force to save anyway.")
        console.print("[yellow]Saving despite conflicts (--force).[/yellow]")

    if room_id is None:
        console.print("[yellow]No room assigned (room conflicts are not checked).[/yellow]")

    try:
        repo.save_event(event)
    except StoreError as e:
        _fail(f"Store error: {e}")
    console.print(
        f"[green]✓[/green] Saved {event.id}: {course.code} {event.day_name} "
        f"{event.start_time}-{event.end_time}"
        + (" (cross-cutting)" if event.is_cross_cutting else "")
    )


@cmd_events.command("delete")
@click.argument("event_id")
def events_delete(event_id: str):
    """Deletes an event (department-scoped callers: own department only)."""
    from store import StoreError

    mgr, config = _load_config_or_abort()
    repo = _open_repository(config)
    caller = _caller(config)

    event = repo.event(event_id)
    if event is None:
        _fail(f"Event '{event_id}' not found.")
    if caller.role.is_department_scoped and not caller.belongs_to(event.department):
        _fail(f"PermissionDenied: event {event_id} belongs to {event.department}.")
    try:
        repo.delete_event(event_id)
    except StoreError as e:
        _fail(f"Store error: {e}")
    console.print(f"[green]✓[/green] Deleted {event_id}")


# ─── COLLISIONS ───────────────────────────────────────────────────────────────

@click.command("collisions")
@click.option("--strict", is_flag=True, default=False,
              help="Exit with status 1 when conflicts exist.")
def cmd_collisions(strict: bool):
    """Conflict report over the events visible to the caller."""
    from scheduling import build_report, visible_events

    mgr, config = _load_config_or_abort()
    repo = _open_repository(config)
    caller = _caller(config)

    events = visible_events(repo.events(), caller.role, caller.departments)
    report = build_report(events, repo.catalog())
    report.print_rich()
    if strict and not report.is_clean:
        sys.exit(1)


@click.command("resolve")
@click.argument("key")
def cmd_resolve(key: str):
    """Resolves a conflict by its key (e.g. room:EV-004:EV-005)."""
    from scheduling import UnimplementedResolver, detect_collisions, visible_events

    mgr, config = _load_config_or_abort()
    repo = _open_repository(config)
    caller = _caller(config)

    events = visible_events(repo.events(), caller.role, caller.departments)
    match = next(
        (c for c in detect_collisions(events, repo.catalog()) if c.key == key), None
    )
    if match is None:
        _fail(f"No conflict with key '{key}'.")
    try:
        UnimplementedResolver().resolve(match)
    except NotImplementedError as e:
        console.print(f"[yellow]{e}[/yellow]")
        sys.exit(2)


# ─── SHOW ─────────────────────────────────────────────────────────────────────

@click.command("show")
@click.option("--view", type=click.Choice(["day", "week", "month"]), default="week")
@click.option("--date", "ref_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Reference date (default: today).")
@click.option("--type", "program_type", type=click.Choice(["day", "evening"]), default="day")
@click.option("--program", default=None, help="Program id.")
def cmd_show(view: str, ref_date, program_type: str, program: Optional[str]):
    """Shows the calendar as a table in the terminal."""
    from export.tui_renderer import column_headers, render_grid_rows
    from scheduling import (
        ViewRange, detect_collisions, display_window, filter_events, layout,
        visible_events,
    )

    mgr, config = _load_config_or_abort()
    repo = _open_repository(config)
    caller = _caller(config)
    catalog = repo.catalog()

    ptype = ProgramType(program_type)
    events = visible_events(repo.events(), caller.role, caller.departments)
    events = filter_events(events, program_id=program, program_type=ptype)
    first, last = display_window(ptype, config.calendar)
    current = ref_date.date() if ref_date else None

    try:
        grid = layout(events, ViewRange(view), current, first_hour=first, last_hour=last)
    except ValueError as e:
        _fail(str(e))

    collided = {i for c in detect_collisions(events, catalog) for i in c.event_ids}
    headers = column_headers(grid)
    rows = render_grid_rows(grid, catalog, repo.lecturer_names(), collided)

    # The month view has up to 27 columns; print it week by week
    chunk = 6
    day_headers, day_rows = headers[1:], [r[1:] for r in rows]
    for start in range(0, max(len(day_headers), 1), chunk):
        table = Table(title=f"{view.capitalize()} view ({program_type} programmes)",
                      box=box.ROUNDED, show_lines=True)
        table.add_column(headers[0], style="bold")
        for h in day_headers[start:start + chunk]:
            table.add_column(h, justify="center")
        for hour_row, cells in zip(rows, day_rows):
            table.add_row(hour_row[0], *cells[start:start + chunk])
        console.print(table)

    if grid.hidden:
        console.print(
            f"[dim]Outside {first:02d}:00-{last:02d}:00: "
            f"{', '.join(e.id for e in grid.hidden)}[/dim]"
        )


# ─── UNSCHEDULED ──────────────────────────────────────────────────────────────

@click.command("unscheduled")
def cmd_unscheduled():
    """Lists courses that have no scheduled event yet."""
    from scheduling import unscheduled_courses

    mgr, config = _load_config_or_abort()
    repo = _open_repository(config)
    caller = _caller(config)

    courses = repo.catalog().courses
    if caller.role.is_department_scoped:
        courses = [c for c in courses
                   if caller.belongs_to(c.department) or c.is_cross_cutting]
    missing = unscheduled_courses(courses, repo.events())
    if not missing:
        console.print("[green]✓[/green] Every course has at least one event.")
        return

    table = Table(title="Unscheduled courses", box=box.ROUNDED)
    table.add_column("Code", style="bold")
    table.add_column("Name")
    table.add_column("Department")
    table.add_column("Year")
    for c in missing:
        table.add_row(c.code, c.name, c.department,
                      str(c.year_of_study) if c.year_of_study else "")
    console.print(table)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
@click.option("--format", "fmt", type=click.Choice(["csv", "xlsx", "pdf"]), default="csv")
@click.option("--view", type=click.Choice(["day", "week", "month"]), default="week")
@click.option("--date", "ref_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--program", default=None, help="Program id.")
@click.option("--type", "program_type", type=click.Choice(["day", "evening"]), default=None)
@click.option("--output-dir", "-o", default="output", type=click.Path(path_type=Path))
def cmd_export(fmt: str, view: str, ref_date, program: Optional[str],
               program_type: Optional[str], output_dir: Path):
    """Exports the visible schedule as CSV, Excel or PDF."""
    from export import CsvExporter, ExcelExporter, PdfExporter
    from export.helpers import export_filename
    from scheduling import ViewRange, filter_events, visible_events

    mgr, config = _load_config_or_abort()
    repo = _open_repository(config)
    caller = _caller(config)
    catalog = repo.catalog()
    names = repo.lecturer_names()

    events = visible_events(repo.events(), caller.role, caller.departments)
    events = filter_events(
        events, program_id=program,
        program_type=ProgramType(program_type) if program_type else None,
    )
    current = ref_date.date() if ref_date else None

    dept = caller.primary_department
    dept_name = (catalog.department(dept).name if catalog.department(dept) else dept)
    prog = catalog.program(program)
    path = output_dir / export_filename(
        dept_name, prog.name if prog else None, ViewRange(view), extension=fmt,
    )

    if fmt == "csv":
        CsvExporter(events, catalog, names).export(path, ViewRange(view), current)
    elif fmt == "xlsx":
        ExcelExporter(events, catalog, config, names).export(path)
    else:
        PdfExporter(events, catalog, config, names).export(path)
    console.print(f"[green]✓[/green] {len(events)} event(s) exported: {path}")


# ─── MAIN CLI ─────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging.")
@click.option("--role", type=click.Choice([r.value for r in Role]), default=None,
              help="Act as this role instead of the configured one.")
@click.option("--department", "departments", multiple=True,
              help="Caller department (repeatable).")
@click.pass_context
def cli(ctx, verbose: bool, role: Optional[str], departments: tuple[str, ...]):
    """Lecture schedule: visibility, conflicts and calendar of a university timetable.

    Start with: python main.py init
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    ctx.obj = {"role": role, "departments": departments}


def main():
    """Entry point."""
    cli()


# Register commands
cli.add_command(cmd_init)
cli.add_command(cmd_config)
cli.add_command(cmd_seed)
cli.add_command(cmd_events)
cli.add_command(cmd_collisions)
cli.add_command(cmd_resolve)
cli.add_command(cmd_show)
cli.add_command(cmd_unscheduled)
cli.add_command(cmd_export)


if __name__ == "__main__":
    main()
