"""Data models for departments and their programs (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel


class Program(BaseModel):
    """A study program. Each program belongs to exactly one department."""

    id: str
    name: str
    department_id: str
    code: str = ""
    head_id: Optional[str] = None
    is_active: bool = True


class Department(BaseModel):
    """An academic department (one-to-many with programs)."""

    id: str
    name: str
    head_id: Optional[str] = None     # Head of Department (user id)
    program_ids: list[str] = []
    faculty_id: Optional[str] = None
    is_active: bool = True
