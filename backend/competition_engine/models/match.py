from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from competition_engine.models.event import Event
    from competition_engine.models.group import Group
    from competition_engine.models.match_set import MatchSet


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    group_id: Optional[int] = Field(default=None, foreign_key="eventgroup.id", index=True)  # null for bracket matches
    round: int
    match_number: int

    # Null on one side = bye; null on both sides = bracket slot waiting for advancement
    registration1_id: Optional[int] = Field(default=None, foreign_key="registration.id")
    registration2_id: Optional[int] = Field(default=None, foreign_key="registration.id")

    # Bracket wiring (single elimination only)
    bracket_position: Optional[int] = Field(default=None)
    winner_to: Optional[int] = Field(default=None, foreign_key="match.id")
    winner_to_slot: Optional[int] = Field(default=None)  # 1 | 2
    loser_to: Optional[int] = Field(default=None, foreign_key="match.id")  # semifinals -> third place
    loser_to_slot: Optional[int] = Field(default=None)
    is_third_place: bool = Field(default=False)

    played: bool = Field(default=False)
    winner_id: Optional[int] = Field(default=None, foreign_key="registration.id")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    event: "Event" = Relationship(back_populates="matches")
    group: Optional["Group"] = Relationship(back_populates="matches")
    sets: List["MatchSet"] = Relationship(back_populates="match")
