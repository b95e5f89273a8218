"""Caller identity and roles (Pydantic v2)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator


class Role(str, Enum):
    ADMIN = "admin"
    HOD = "hod"
    LECTURER = "lecturer"

    @property
    def is_department_scoped(self) -> bool:
        return self is not Role.ADMIN


class Caller(BaseModel):
    """The signed-in user as seen by the rules layer.

    Department membership is a list; `primary_department` exists for
    display only and is never used for scope checks.
    """

    id: str
    role: Role
    departments: list[str] = []
    display_name: str = ""

    @field_validator("departments")
    @classmethod
    def drop_blank(cls, v: list[str]) -> list[str]:
        return [d for d in (x.strip() for x in v) if d]

    @property
    def primary_department(self) -> Optional[str]:
        return self.departments[0] if self.departments else None

    def belongs_to(self, department: Optional[str]) -> bool:
        return department is not None and department in self.departments
