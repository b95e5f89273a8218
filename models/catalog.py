"""Catalog: read-only reference data for scheduling (Pydantic v2)."""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from models.course import Course
from models.department import Department, Program
from models.room import Room


class Catalog(BaseModel):
    """Courses, rooms, departments and programs, consumed read-only.

    Maintained by the management screens; scheduling only looks things up.
    """

    courses: list[Course] = []
    rooms: list[Room] = []
    departments: list[Department] = []
    programs: list[Program] = []

    # ─── Lookups ───

    def course(self, course_id: Optional[str]) -> Optional[Course]:
        return next((c for c in self.courses if c.id == course_id), None)

    def room(self, room_id: Optional[str]) -> Optional[Room]:
        return next((r for r in self.rooms if r.id == room_id), None)

    def department(self, department_id: Optional[str]) -> Optional[Department]:
        return next((d for d in self.departments if d.id == department_id), None)

    def program(self, program_id: Optional[str]) -> Optional[Program]:
        return next((p for p in self.programs if p.id == program_id), None)

    def programs_of(self, department_id: str) -> set[str]:
        """Program ids of a department.

        Combines Program.department_id with Department.program_ids, since
        either side may be the one that was kept up to date.
        """
        ids = {p.id for p in self.programs if p.department_id == department_id}
        dept = self.department(department_id)
        if dept is not None:
            ids.update(dept.program_ids)
        return ids

    def parent_department(self, program_id: str) -> Optional[str]:
        prog = self.program(program_id)
        if prog is not None:
            return prog.department_id
        for dept in self.departments:
            if program_id in dept.program_ids:
                return dept.id
        return None

    # ─── Overview ───

    def summary(self) -> str:
        """Short overview of the reference data."""
        cross = sum(1 for c in self.courses if c.is_cross_cutting)
        lines = [
            f"Departments: {len(self.departments)}",
            f"Programs: {len(self.programs)}",
            f"Courses: {len(self.courses)} ({cross} cross-cutting)",
            f"Rooms: {len(self.rooms)}",
        ]
        return "\n".join(lines)

    # ─── Persistence ───

    def save_json(self, path: Path) -> None:
        """Writes the catalog to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "Catalog":
        """Loads a catalog from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Catalog file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate(json.load(f))
