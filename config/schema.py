from datetime import date

from pydantic import BaseModel, Field, model_validator

from models.caller import Caller, Role


# ─── CALENDAR (display windows) ───

class CalendarConfig(BaseModel):
    """Hour windows of the calendar grid.

    Day programmes and evening programmes are shown on separate grids.
    Layout only; collision detection ignores these bounds.
    """
    # First displayed hour for day programmes (row 0)
    day_first_hour: int = Field(8, ge=0, le=23,
        description="First displayed hour, day programmes")
    # Displayed hours end before this hour
    day_last_hour: int = Field(17, ge=1, le=24,
        description="End of the displayed hours, day programmes")
    evening_first_hour: int = Field(17, ge=0, le=23,
        description="First displayed hour, evening programmes")
    evening_last_hour: int = Field(22, ge=1, le=24,
        description="End of the displayed hours, evening programmes")
    # Column labels Monday..Saturday
    day_names: list[str] = Field(
        default=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
        description="Names of the teaching days")

    @model_validator(mode='after')
    def validate_windows(self):
        if self.day_first_hour >= self.day_last_hour:
            raise ValueError(
                f"Day window {self.day_first_hour}-{self.day_last_hour} is empty")
        if self.evening_first_hour >= self.evening_last_hour:
            raise ValueError(
                f"Evening window {self.evening_first_hour}-{self.evening_last_hour} is empty")
        if len(self.day_names) != 6:
            raise ValueError("day_names needs exactly six entries (Monday..Saturday)")
        return self


# ─── SEMESTER ───

class SemesterConfig(BaseModel):
    """Semester date range; first sittings must fall inside it."""
    start_date: date = Field(date(2025, 9, 1), description="First day of the semester")
    end_date: date = Field(date(2025, 12, 15), description="Last day of the semester")

    @model_validator(mode='after')
    def validate_range(self):
        if self.start_date >= self.end_date:
            raise ValueError(
                f"End date {self.end_date} must be after start date {self.start_date}")
        return self

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


# ─── STORE ───

class StoreConfig(BaseModel):
    """Where the document store keeps its collections."""
    # Directory with one JSON file per collection
    data_dir: str = Field("data", description="Directory of the JSON document store")


# ─── CALLER ───

class CallerConfig(BaseModel):
    """Identity used by the command line (stands in for the sign-in)."""
    id: str = Field("admin", description="User id")
    role: Role = Field(Role.ADMIN, description="admin / hod / lecturer")
    departments: list[str] = Field(default=[], description="Department ids of the user")
    display_name: str = Field("Administrator")

    def to_caller(self) -> Caller:
        return Caller(id=self.id, role=self.role, departments=self.departments,
                      display_name=self.display_name)


# ─── OVERALL CONFIG ───

class AppConfig(BaseModel):
    """Complete configuration of the scheduling tool."""
    # Shown in report and export headers
    institution_name: str = Field("University Lecture Schedule",
        description="Name of the institution")
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    semester: SemesterConfig = Field(default_factory=SemesterConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    caller: CallerConfig = Field(default_factory=CallerConfig)
