from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from competition_engine.models.match import Match


class MatchSet(SQLModel, table=True):
    # Two concurrent submissions of "set N" for one match cannot both land
    __table_args__ = (SAUniqueConstraint("match_id", "set_number", name="uq_match_set_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: int = Field(foreign_key="match.id", index=True)
    set_number: int  # 1-based, contiguous
    registration1_score: int = Field(default=0)
    registration2_score: int = Field(default=0)
    played: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    match: "Match" = Relationship(back_populates="sets")
