"""Data model for a course (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel


class Course(BaseModel):
    """A course offered by one department, optionally shared across others."""

    id: str
    code: str                          # "BIT 2101"
    name: str
    department: str                    # owning department id
    is_cross_cutting: bool = False     # forces every event of this course to cross-cutting
    lecturer_id: Optional[str] = None  # assigned lecturer, if any
    program_id: Optional[str] = None
    year_of_study: Optional[int] = None
    semester: Optional[int] = None
    # Default scope of a cross-cutting course
    cross_cutting_departments: list[str] = []
    cross_cutting_programs: list[str] = []
