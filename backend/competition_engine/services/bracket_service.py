"""
Single elimination bracket generation.

Persists a plan from ``bracket_seeding`` in two passes: every match is inserted
first, then winner_to / loser_to are translated from bracket positions to match
ids. Byes are stored as decided walkovers (played, winner set, no sets).
There is no implicit regenerate; the bracket has to be reset first.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from competition_engine.models.match import Match
from competition_engine.repository import EngineRepository
from competition_engine.services.bracket_seeding import (
    SeedAssignment,
    build_single_elimination,
    order_registrations,
    validate_seeds,
)
from competition_engine.services.completion import recompute_completion
from competition_engine.services.format_rules import GENERATION_KIND_BRACKET, supports_bracket
from competition_engine.services.heat_service import structures_exist
from competition_engine.services.result import Ok, Result, conflict, not_found, validation_error

logger = logging.getLogger(__name__)

BRACKET_EXISTS_MESSAGE = "Bracket already exists. Delete matches to regenerate."


@dataclass
class GenerateBracketResult:
    total_rounds: int
    bracket_size: int
    bye_count: int
    total_registrations: int
    match_count: int
    matches: List[Match] = field(default_factory=list)


def generate_bracket(
    repo: EngineRepository,
    event_id: int,
    seeds: Optional[Sequence[SeedAssignment]] = None,
    shuffle: bool = True,
    rng: Optional[random.Random] = None,
) -> Result:
    def operation() -> Result:
        event = repo.get_event(event_id)
        if event is None:
            return not_found("Event not found")
        if not supports_bracket(event.format):
            return validation_error(
                f"Bracket generation is not supported for format '{event.format}'", field="format"
            )

        registration_ids = repo.find_registration_ids_by_event(event_id)
        if len(registration_ids) < 2:
            return validation_error("At least 2 registrations required to generate a bracket")

        check = validate_seeds(seeds, registration_ids)
        if not check.valid:
            return validation_error(check.error, field="seeds", invalid_ids=[check.invalid_id])

        if structures_exist(repo, event_id):
            logger.debug("Bracket generation refused for event %d: structures exist", event_id)
            return conflict(BRACKET_EXISTS_MESSAGE)

        repo.insert_generation_marker(event_id, GENERATION_KIND_BRACKET)

        ordered = order_registrations(registration_ids, seeds, shuffle=shuffle, rng=rng)
        plan = build_single_elimination(ordered, has_third_place_match=event.has_third_place_match)

        # Pass 1: insert
        by_position: Dict[int, Match] = {}
        for planned in plan.matches:
            by_position[planned.bracket_position] = repo.insert_match(
                event_id=event_id,
                group_id=None,
                round=planned.round,
                match_number=planned.match_number,
                bracket_position=planned.bracket_position,
                registration1_id=planned.registration1_id,
                registration2_id=planned.registration2_id,
                is_third_place=planned.is_third_place,
                played=planned.is_bye,
                winner_id=planned.bye_winner,
            )

        # Pass 2: link
        for planned in plan.matches:
            match = by_position[planned.bracket_position]
            if planned.winner_to is not None:
                match.winner_to = by_position[planned.winner_to].id
                match.winner_to_slot = planned.winner_to_slot
            if planned.loser_to is not None:
                match.loser_to = by_position[planned.loser_to].id
                match.loser_to_slot = planned.loser_to_slot
            repo.save(match)
        repo.flush()

        for s in seeds or []:
            repo.set_registration_seed(s.registration_id, s.seed)

        recompute_completion(repo, event_id)
        logger.info(
            "Generated bracket for event %d: %d registrations, size %d, %d byes, %d rounds, %d matches",
            event_id,
            len(registration_ids),
            plan.bracket_size,
            plan.bye_count,
            plan.total_rounds,
            len(plan.matches),
        )
        return Ok(
            GenerateBracketResult(
                total_rounds=plan.total_rounds,
                bracket_size=plan.bracket_size,
                bye_count=plan.bye_count,
                total_registrations=len(registration_ids),
                match_count=len(plan.matches),
                matches=[by_position[p.bracket_position] for p in plan.matches],
            )
        )

    return repo.atomic(operation, conflict_message=BRACKET_EXISTS_MESSAGE)
