"""
Heat generation for test events.

Heats are fixed-size groups of registrations (like swimming races). They reuse
the Group table and carry no matches.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from competition_engine.repository import EngineRepository
from competition_engine.services.completion import recompute_completion
from competition_engine.services.format_rules import (
    DEFAULT_PLAYERS_PER_HEAT,
    GENERATION_KIND_HEATS,
    MAX_PLAYERS_PER_HEAT,
    heat_count,
    structure_name,
    supports_heats,
)
from competition_engine.services.result import Ok, Result, conflict, not_found, validation_error

logger = logging.getLogger(__name__)

HEATS_EXIST_MESSAGE = "Heats already generated. Set regenerate=true to delete and regenerate."


@dataclass
class HeatSummary:
    id: int
    name: str
    registration_count: int


@dataclass
class GenerateHeatsResult:
    heats: List[HeatSummary] = field(default_factory=list)
    total_heats: int = 0
    total_registrations: int = 0


@dataclass
class ResetResult:
    deleted_heats: int
    deleted_matches: int


def resolve_players_per_heat(requested: Optional[int], event_default: Optional[int]) -> int:
    """Request value, then the event's configured value, then the global default."""
    if requested is not None:
        return requested
    if event_default is not None:
        return event_default
    return DEFAULT_PLAYERS_PER_HEAT


def structures_exist(repo: EngineRepository, event_id: int) -> bool:
    return (
        repo.get_generation_marker(event_id) is not None
        or repo.count_groups(event_id) > 0
        or repo.has_matches(event_id)
    )


def generate_heats(
    repo: EngineRepository,
    event_id: int,
    players_per_heat: Optional[int] = None,
    shuffle: bool = True,
    regenerate: bool = False,
    rng: Optional[random.Random] = None,
) -> Result:
    """Partition the event's registrations into consecutive heats.

    The last heat may be smaller; it is never padded. Refuses when heats already
    exist unless ``regenerate`` is set, in which case the old heats are removed
    in the same transaction.
    """

    def operation() -> Result:
        event = repo.get_event(event_id)
        if event is None:
            return not_found("Event not found")
        if not supports_heats(event.format):
            return validation_error('Event format must be "tests" to generate heats', field="format")

        size = resolve_players_per_heat(players_per_heat, event.players_per_heat)
        if not isinstance(size, int) or size < 1 or size > MAX_PLAYERS_PER_HEAT:
            return validation_error(
                f"playersPerHeat must be an integer between 1 and {MAX_PLAYERS_PER_HEAT}, got {size}",
                field="players_per_heat",
            )

        if structures_exist(repo, event_id):
            if not regenerate:
                logger.debug("Heat generation refused for event %d: heats exist", event_id)
                return conflict(HEATS_EXIST_MESSAGE)
            deleted_groups, deleted_matches = repo.delete_event_structures(event_id)
            logger.info(
                "Regenerating heats for event %d: removed %d heats, %d matches",
                event_id,
                deleted_groups,
                deleted_matches,
            )

        registrations = repo.find_registrations_by_event(event_id)
        if not registrations:
            recompute_completion(repo, event_id)
            return Ok(GenerateHeatsResult())

        repo.insert_generation_marker(event_id, GENERATION_KIND_HEATS)

        ordered = list(registrations)
        if shuffle:
            (rng or random.Random()).shuffle(ordered)

        total_heats = heat_count(len(ordered), size)
        heats: List[HeatSummary] = []
        for heat_index in range(total_heats):
            chunk = ordered[heat_index * size : (heat_index + 1) * size]
            heat = repo.insert_group(event_id, structure_name(heat_index))
            repo.assign_registrations_to_group([r.id for r in chunk], heat.id)
            heats.append(HeatSummary(id=heat.id, name=heat.name, registration_count=len(chunk)))

        recompute_completion(repo, event_id)
        logger.info(
            "Generated %d heats for event %d (%d registrations, %d per heat, shuffle=%s)",
            total_heats,
            event_id,
            len(ordered),
            size,
            shuffle,
        )
        return Ok(GenerateHeatsResult(heats=heats, total_heats=total_heats, total_registrations=len(ordered)))

    return repo.atomic(operation, conflict_message=HEATS_EXIST_MESSAGE)


def delete_all_heats(repo: EngineRepository, event_id: int) -> Result:
    """Delete every heat/group, match and set of the event and detach registrations.

    Also serves as the bracket reset. Fails when there is nothing to delete.
    """

    def operation() -> Result:
        event = repo.get_event(event_id)
        if event is None:
            return not_found("Event not found")
        if not structures_exist(repo, event_id):
            return conflict("No heats or bracket matches exist for this event")

        deleted_heats, deleted_matches = repo.delete_event_structures(event_id)
        recompute_completion(repo, event_id)
        logger.info("Reset event %d: deleted %d heats, %d matches", event_id, deleted_heats, deleted_matches)
        return Ok(ResetResult(deleted_heats=deleted_heats, deleted_matches=deleted_matches))

    return repo.atomic(operation)
