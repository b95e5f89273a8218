"""Data model for a scheduled lecture (Pydantic v2)."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class SessionType(str, Enum):
    LECTURE = "LH"
    PRACTICAL = "PH"
    TUTORIAL = "TH"
    CLINICAL = "CH"

    @property
    def label(self) -> str:
        return {
            "LH": "Lecture",
            "PH": "Practical",
            "TH": "Tutorial",
            "CH": "Clinical",
        }[self.value]


class ProgramType(str, Enum):
    DAY = "day"
    EVENING = "evening"


def time_to_minutes(hhmm: str) -> int:
    """Converts 'HH:MM' to minutes since midnight.

    Raises ValueError for malformed or out-of-range values.
    """
    parts = str(hhmm).strip().split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid time format: {hhmm!r}")
    try:
        h = int(parts[0])
        m = int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid time format: {hhmm!r}") from None
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValueError(f"Invalid time value: {hhmm!r}")
    return h * 60 + m


class ScheduleEvent(BaseModel):
    """One weekly lecture sitting: course, lecturer, room and time window.

    `start_time < end_time` and "no scopes unless cross-cutting" are NOT
    enforced here. Entry validation (scheduling.cross_cutting.validate_event)
    reports them as typed errors instead.
    """

    id: str
    title: str
    course_id: str
    lecturer_id: Optional[str] = None
    room_id: Optional[str] = None
    day_of_week: int = Field(ge=1, le=6)  # 1=Monday .. 6=Saturday
    start_time: str                       # "HH:MM"
    end_time: str                         # "HH:MM", same day
    is_recurring: bool = True
    is_cross_cutting: bool = False
    department_scopes: list[str] = []     # only set for cross-cutting events
    program_scopes: list[str] = []        # only set for cross-cutting events
    department: str                       # owning department
    session_type: SessionType = SessionType.LECTURE
    program_type: ProgramType = ProgramType.DAY
    program_id: Optional[str] = None
    event_date: Optional[date] = None     # first sitting; the only sitting when not recurring
    created_by: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, v: str) -> str:
        minutes = time_to_minutes(v)
        return f"{minutes // 60:02d}:{minutes % 60:02d}"

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    @property
    def start_hour(self) -> int:
        return self.start_minutes // 60

    @property
    def end_hour(self) -> int:
        return self.end_minutes // 60

    @property
    def has_valid_time_range(self) -> bool:
        return self.start_minutes < self.end_minutes

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week - 1]

    def overlaps(self, other: "ScheduleEvent") -> bool:
        """Same weekday and [s1, e1) intersects [s2, e2)."""
        if self.day_of_week != other.day_of_week:
            return False
        return (self.start_minutes < other.end_minutes
                and other.start_minutes < self.end_minutes)
