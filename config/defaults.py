"""Default configuration and a small demo data set.

The demo catalog covers three faculties with day and evening programmes and
one cross-cutting course. The demo events contain deliberate conflicts so
the collision report has something to show:

  1. Lecturer conflict: L-OTIENO teaches BIT 2101 and BIT 2203 on Monday 10:00
  2. Room conflict: LH-1 is booked twice on Wednesday afternoon
  3. Student-group conflict: Communication Skills overlaps a BCOM lecture
"""

from datetime import date

from config.schema import AppConfig, CalendarConfig, CallerConfig, SemesterConfig
from models.caller import Caller, Role
from models.catalog import Catalog
from models.course import Course
from models.department import Department, Program
from models.room import Room
from models.schedule_event import ProgramType, ScheduleEvent, SessionType


def default_calendar() -> CalendarConfig:
    """Display windows: day programmes 08-17 (9 slots), evening 17-22 (5 slots)."""
    return CalendarConfig(
        day_first_hour=8,
        day_last_hour=17,
        evening_first_hour=17,
        evening_last_hour=22,
    )


def default_app_config() -> AppConfig:
    today = date.today()
    # Autumn semester of the current academic year
    year = today.year if today.month >= 8 else today.year - 1
    return AppConfig(
        institution_name="University Lecture Schedule",
        calendar=default_calendar(),
        semester=SemesterConfig(
            start_date=date(year, 9, 1),
            end_date=date(year, 12, 15),
        ),
        caller=CallerConfig(id="admin", role=Role.ADMIN, departments=[],
                            display_name="Administrator"),
    )


# ─── Demo catalog ─────────────────────────────────────────────────────────────

def demo_catalog() -> Catalog:
    departments = [
        Department(id="D-CS", name="Computer Science", head_id="U-HOD-CS",
                   program_ids=["P-BIT", "P-BSCS"], faculty_id="F-SCI"),
        Department(id="D-BUS", name="Business Administration", head_id="U-HOD-BUS",
                   program_ids=["P-BCOM", "P-EBCOM"], faculty_id="F-BUS"),
        Department(id="D-LANG", name="Languages & Communication",
                   program_ids=["P-BAL"], faculty_id="F-ART"),
    ]
    programs = [
        Program(id="P-BIT", name="BSc Information Technology", department_id="D-CS", code="BIT"),
        Program(id="P-BSCS", name="BSc Computer Science", department_id="D-CS", code="BSCS"),
        Program(id="P-BCOM", name="Bachelor of Commerce", department_id="D-BUS", code="BCOM"),
        Program(id="P-EBCOM", name="Bachelor of Commerce (Evening)", department_id="D-BUS",
                code="EBCOM"),
        Program(id="P-BAL", name="BA Linguistics", department_id="D-LANG", code="BAL"),
    ]
    courses = [
        Course(id="C-BIT2101", code="BIT 2101", name="Data Structures",
               department="D-CS", lecturer_id="L-OTIENO", program_id="P-BIT",
               year_of_study=2, semester=1),
        Course(id="C-BIT2203", code="BIT 2203", name="Database Systems",
               department="D-CS", lecturer_id="L-OTIENO", program_id="P-BIT",
               year_of_study=2, semester=1),
        Course(id="C-CS3101", code="CS 3101", name="Operating Systems",
               department="D-CS", lecturer_id="L-WANJIKU", program_id="P-BSCS",
               year_of_study=3, semester=1),
        Course(id="C-BCM1101", code="BCM 1101", name="Principles of Accounting",
               department="D-BUS", lecturer_id="L-MUTUA", program_id="P-BCOM",
               year_of_study=1, semester=1),
        Course(id="C-BCM1102", code="BCM 1102", name="Business Mathematics",
               department="D-BUS", lecturer_id="L-MUTUA", program_id="P-EBCOM",
               year_of_study=1, semester=1),
        Course(id="C-COM1100", code="COM 1100", name="Communication Skills",
               department="D-LANG", lecturer_id="L-ACHIENG",
               is_cross_cutting=True, year_of_study=1, semester=1,
               cross_cutting_departments=["D-CS", "D-BUS"],
               cross_cutting_programs=["P-BIT", "P-BCOM"]),
        # Not scheduled yet
        Course(id="C-CS3205", code="CS 3205", name="Computer Networks",
               department="D-CS", program_id="P-BSCS", year_of_study=3, semester=2),
    ]
    rooms = [
        Room(id="R-LH1", name="LH-1", capacity=120, building="Main Block"),
        Room(id="R-LH2", name="LH-2", capacity=80, building="Main Block"),
        Room(id="R-LAB3", name="Lab 3", capacity=40, building="Science Complex",
             room_type="computer_lab"),
    ]
    return Catalog(courses=courses, rooms=rooms, departments=departments, programs=programs)


def demo_users() -> list[Caller]:
    return [
        Caller(id="admin", role=Role.ADMIN, display_name="Administrator"),
        Caller(id="U-HOD-CS", role=Role.HOD, departments=["D-CS"], display_name="Dr. Kamau"),
        Caller(id="U-HOD-BUS", role=Role.HOD, departments=["D-BUS"], display_name="Dr. Njeri"),
        Caller(id="L-OTIENO", role=Role.LECTURER, departments=["D-CS"],
               display_name="J. Otieno"),
        Caller(id="L-WANJIKU", role=Role.LECTURER, departments=["D-CS"],
               display_name="M. Wanjiku"),
        Caller(id="L-MUTUA", role=Role.LECTURER, departments=["D-BUS"],
               display_name="P. Mutua"),
        Caller(id="L-ACHIENG", role=Role.LECTURER, departments=["D-LANG", "D-BUS"],
               display_name="S. Achieng"),
    ]


def _event(id: str, course: Course, day: int, start: str, end: str,
           room_id: str, **kwargs) -> ScheduleEvent:
    return ScheduleEvent(
        id=id,
        title=course.name,
        course_id=course.id,
        lecturer_id=course.lecturer_id,
        room_id=room_id,
        day_of_week=day,
        start_time=start,
        end_time=end,
        department=course.department,
        program_id=course.program_id,
        created_by="admin",
        **kwargs,
    )


def demo_events(catalog: Catalog) -> list[ScheduleEvent]:
    c = catalog.course
    return [
        _event("EV-001", c("C-BIT2101"), 1, "10:00", "12:00", "R-LH2"),
        # Same lecturer, same Monday slot
        _event("EV-002", c("C-BIT2203"), 1, "11:00", "13:00", "R-LAB3",
               session_type=SessionType.PRACTICAL),
        _event("EV-003", c("C-CS3101"), 2, "08:00", "10:00", "R-LH1"),
        _event("EV-004", c("C-CS3101"), 3, "14:00", "16:00", "R-LH1",
               session_type=SessionType.TUTORIAL),
        # LH-1 double-booked with EV-004
        _event("EV-005", c("C-BCM1101"), 3, "15:00", "17:00", "R-LH1"),
        _event("EV-006", c("C-BCM1102"), 2, "18:00", "20:00", "R-LH2",
               program_type=ProgramType.EVENING),
        _event("EV-007", c("C-BCM1101"), 4, "09:00", "11:00", "R-LH2"),
        # Cross-cutting; shares BCOM students with EV-007
        _event("EV-008", c("C-COM1100"), 4, "10:00", "12:00", "R-LH1",
               is_cross_cutting=True,
               department_scopes=["D-CS", "D-BUS"],
               program_scopes=["P-BIT", "P-BCOM"]),
    ]
