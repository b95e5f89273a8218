"""Data model for a room (Pydantic v2)."""

from pydantic import BaseModel, Field


class Room(BaseModel):
    """A lecture room. Reference data, read-only for scheduling."""

    id: str          # "LH-101"
    name: str        # "Lecture Hall 101"
    capacity: int = Field(0, ge=0)
    building: str = ""
    room_type: str = "lecture_hall"  # lecture_hall / lab / seminar
