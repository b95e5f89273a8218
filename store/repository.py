"""Maps store documents to models and back.

Documents that do not validate are skipped with a warning; one bad record
must not hide the rest of the schedule.
"""

import logging
from collections.abc import Iterable
from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError

from models.caller import Caller
from models.catalog import Catalog
from models.course import Course
from models.department import Department, Program
from models.room import Room
from models.schedule_event import ScheduleEvent
from store.document_store import DocumentStore, Predicate, WriteResult

logger = logging.getLogger(__name__)

EVENTS = "scheduleEvents"
COURSES = "courses"
ROOMS = "rooms"
DEPARTMENTS = "departments"
PROGRAMS = "programs"
USERS = "users"

M = TypeVar("M", bound=BaseModel)


class EventRepository:
    """Typed access to the schedule collections of a DocumentStore."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def _load(self, collection: str, model: type[M],
              predicate: Optional[Predicate] = None) -> list[M]:
        out: list[M] = []
        for doc in self.store.snapshot(collection, predicate):
            try:
                out.append(model.model_validate(doc))
            except ValidationError as e:
                logger.warning(
                    f"Skipping {collection}/{doc.get('id', '?')}: "
                    f"{e.error_count()} validation error(s)"
                )
                logger.debug(str(e))
        return out

    def _write(self, collection: str, item: BaseModel) -> WriteResult:
        fields = item.model_dump(mode="json")
        return self.store.write(collection, fields["id"], fields)

    # ─── Events ───

    def events(self, predicate: Optional[Predicate] = None) -> list[ScheduleEvent]:
        return self._load(EVENTS, ScheduleEvent, predicate)

    def event(self, event_id: str) -> Optional[ScheduleEvent]:
        return next((e for e in self.events() if e.id == event_id), None)

    def save_event(self, event: ScheduleEvent) -> WriteResult:
        return self._write(EVENTS, event)

    def delete_event(self, event_id: str) -> WriteResult:
        return self.store.delete(EVENTS, event_id)

    def next_event_id(self) -> str:
        """Next free id of the form EV-001."""
        numbers = [
            int(doc["id"][3:]) for doc in self.store.snapshot(EVENTS)
            if str(doc.get("id", "")).startswith("EV-") and doc["id"][3:].isdigit()
        ]
        return f"EV-{max(numbers, default=0) + 1:03d}"

    # ─── Reference data ───

    def catalog(self) -> Catalog:
        return Catalog(
            courses=self._load(COURSES, Course),
            rooms=self._load(ROOMS, Room),
            departments=self._load(DEPARTMENTS, Department),
            programs=self._load(PROGRAMS, Program),
        )

    def save_catalog(self, catalog: Catalog) -> int:
        """Writes every catalog record. Returns the number of documents written."""
        count = 0
        for collection, items in (
            (COURSES, catalog.courses),
            (ROOMS, catalog.rooms),
            (DEPARTMENTS, catalog.departments),
            (PROGRAMS, catalog.programs),
        ):
            for item in items:
                self._write(collection, item)
                count += 1
        return count

    def users(self) -> list[Caller]:
        return self._load(USERS, Caller)

    def save_users(self, users: Iterable[Caller]) -> int:
        count = 0
        for user in users:
            self._write(USERS, user)
            count += 1
        return count

    def lecturer_names(self) -> dict[str, str]:
        """{user id: display name}, used for search and exports."""
        return {u.id: u.display_name or u.id for u in self.users()}
