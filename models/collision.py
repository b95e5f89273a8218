"""Derived collision record. Recomputed on demand, never persisted."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class CollisionKind(str, Enum):
    LECTURER = "lecturer"
    ROOM = "room"
    STUDENT_GROUP = "student-group"


class Collision(BaseModel):
    """Two overlapping events that share a lecturer, a room or a student group."""

    model_config = ConfigDict(frozen=True)

    kind: CollisionKind
    description: str
    event_ids: frozenset[str]

    @property
    def key(self) -> str:
        """Stable identity, e.g. 'room:ev-1:ev-2'."""
        return ":".join([self.kind.value, *sorted(self.event_ids)])
