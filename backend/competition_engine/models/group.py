from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from competition_engine.models.event import Event
    from competition_engine.models.match import Match
    from competition_engine.models.registration import Registration


class Group(SQLModel, table=True):
    """Round-robin group, also used as the container for a heat."""

    __tablename__ = "eventgroup"

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    name: str  # "A", "B", ... "AA"
    completed: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    event: "Event" = Relationship(back_populates="groups")
    registrations: List["Registration"] = Relationship(back_populates="group")
    matches: List["Match"] = Relationship(back_populates="group")
