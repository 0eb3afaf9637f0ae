# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from competition_engine.models.event import Event  # noqa: F401
from competition_engine.models.group import Group  # noqa: F401
from competition_engine.models.match import Match  # noqa: F401
from competition_engine.models.match_set import MatchSet  # noqa: F401
from competition_engine.models.registration import Registration  # noqa: F401
from competition_engine.models.structure_generation import StructureGeneration  # noqa: F401
