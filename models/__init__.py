from models.schedule_event import ScheduleEvent, SessionType, ProgramType, time_to_minutes
from models.course import Course
from models.room import Room
from models.department import Department, Program
from models.caller import Caller, Role
from models.collision import Collision, CollisionKind
from models.catalog import Catalog

__all__ = [
    "ScheduleEvent",
    "SessionType",
    "ProgramType",
    "time_to_minutes",
    "Course",
    "Room",
    "Department",
    "Program",
    "Caller",
    "Role",
    "Collision",
    "CollisionKind",
    "Catalog",
]
