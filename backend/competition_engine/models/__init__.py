from competition_engine.models.event import Event, EventFormat
from competition_engine.models.group import Group
from competition_engine.models.match import Match
from competition_engine.models.match_set import MatchSet
from competition_engine.models.registration import Registration
from competition_engine.models.structure_generation import StructureGeneration

__all__ = [
    "Event",
    "EventFormat",
    "Group",
    "Match",
    "MatchSet",
    "Registration",
    "StructureGeneration",
]
