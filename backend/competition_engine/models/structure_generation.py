from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class StructureGeneration(SQLModel, table=True):
    """Marks that heats or a bracket have been generated for an event.

    One row per event at most. Generation inserts the row in the same transaction
    as the structures it creates, so a second concurrent generation fails on the
    unique constraint instead of racing the existence check.
    """

    __table_args__ = (SAUniqueConstraint("event_id", name="uq_structure_generation_event"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id")
    kind: str  # "heats" | "bracket"
    created_at: datetime = Field(default_factory=datetime.utcnow)
