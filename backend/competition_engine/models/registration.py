from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from competition_engine.models.event import Event
    from competition_engine.models.group import Group


class Registration(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)

    # Set by group creation / heat generation, nulled again on reset or group deletion
    group_id: Optional[int] = Field(default=None, foreign_key="eventgroup.id", index=True)

    player_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    display_name: Optional[str] = None
    seed: Optional[int] = Field(default=None)  # 1-based, written by bracket generation

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    event: "Event" = Relationship(back_populates="registrations")
    group: Optional["Group"] = Relationship(back_populates="registrations")
