from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from competition_engine.models.group import Group
    from competition_engine.models.match import Match
    from competition_engine.models.registration import Registration


class EventFormat(str, Enum):
    groups = "groups"
    groups_knockout = "groups-knockout"
    single_elimination = "single-elimination"
    double_elimination = "double-elimination"
    tests = "tests"


class Event(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    format: EventFormat = Field(sa_column=Column(String, nullable=False))
    best_of: int = Field(default=1)  # odd, >= 1
    players_per_heat: Optional[int] = Field(default=None)  # heats default when not given per request
    has_third_place_match: bool = Field(default=False)
    points_schema_id: Optional[int] = Field(default=None)  # owned by the points subsystem

    # Derived by the completion aggregator; never written by request handlers
    completed: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    registrations: List["Registration"] = Relationship(back_populates="event")
    groups: List["Group"] = Relationship(back_populates="event")
    matches: List["Match"] = Relationship(back_populates="event")
