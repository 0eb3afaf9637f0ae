"""
Match and set transitions.

Each public function runs as one transaction. Completing a match (by majority
when a set is marked played, or by an explicit completion request) advances the
winner in the bracket and recomputes group and event completion.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from competition_engine.models.match import Match
from competition_engine.models.match_set import MatchSet
from competition_engine.repository import EngineRepository
from competition_engine.services.advancement_service import apply_advancement_for_completed_match
from competition_engine.services.completion import recompute_completion
from competition_engine.services.match_validation import (
    count_set_wins,
    majority,
    match_state,
    validate_match_completion,
    validate_scores,
    validate_set_addition,
    validate_set_order,
)
from competition_engine.services.result import Ok, Result, conflict, not_found, validation_error

logger = logging.getLogger(__name__)


@dataclass
class MatchDetail:
    match: Match
    sets: List[MatchSet] = field(default_factory=list)
    state: str = "scheduled"


@dataclass
class SetPlayedResult:
    match_set: MatchSet
    match_completed: bool
    winner_id: Optional[int] = None


def _check_scores_non_negative(registration1_score: Optional[int], registration2_score: Optional[int]) -> Optional[Result]:
    for name, value in (("registration1_score", registration1_score), ("registration2_score", registration2_score)):
        if value is not None and value < 0:
            return validation_error("Scores cannot be negative", field=name)
    return None


def _best_of(repo: EngineRepository, match: Match) -> int:
    event = repo.get_event(match.event_id)
    return event.best_of if event is not None and event.best_of else 1


def _on_match_completed(repo: EngineRepository, match: Match) -> None:
    repo.flush()
    apply_advancement_for_completed_match(repo, match)
    recompute_completion(repo, match.event_id)
    logger.info("Match %d completed, winner registration %s", match.id, match.winner_id)


# ----------------------------------------------------------------------
# Reads
# ----------------------------------------------------------------------


def _detail(repo: EngineRepository, match: Match) -> MatchDetail:
    sets = repo.sets_for_match(match.id)
    return MatchDetail(match=match, sets=sets, state=match_state(match, sets))


def get_match_detail(repo: EngineRepository, match_id: int) -> Result:
    match = repo.get_match(match_id)
    if match is None:
        return not_found("Match not found")
    return Ok(_detail(repo, match))


def list_matches(repo: EngineRepository, event_id: int) -> Result:
    if repo.get_event(event_id) is None:
        return not_found("Event not found")
    return Ok([_detail(repo, m) for m in repo.matches_for_event(event_id)])


# ----------------------------------------------------------------------
# Sets
# ----------------------------------------------------------------------


def add_set(
    repo: EngineRepository, match_id: int, set_number: int, registration1_score: int, registration2_score: int
) -> Result:
    """Record the next set of a match (unplayed)."""

    def operation() -> Result:
        match = repo.get_match(match_id)
        if match is None:
            return not_found("Match not found")
        if match.registration1_id is None or match.registration2_id is None:
            return conflict("Both competitors must be known before sets can be recorded")

        negative = _check_scores_non_negative(registration1_score, registration2_score)
        if negative is not None:
            return negative

        existing = repo.sets_for_match(match_id)
        expected = len(existing) + 1
        if set_number != expected:
            return validation_error(f"Next set number must be {expected}, got {set_number}", field="set_number")

        check = validate_set_addition(match.played, _best_of(repo, match), existing)
        if not check.valid:
            logger.debug("Set rejected for match %d: %s", match_id, check.error)
            return conflict(check.error)

        return Ok(repo.insert_set(match_id, set_number, registration1_score, registration2_score))

    result = repo.atomic(operation, conflict_message=f"Set {set_number} was already recorded for this match")
    if result.ok:
        repo.refresh(result.value)
    return result


def update_set(
    repo: EngineRepository,
    set_id: int,
    registration1_score: Optional[int] = None,
    registration2_score: Optional[int] = None,
) -> Result:
    def operation() -> Result:
        match_set = repo.get_set(set_id)
        if match_set is None:
            return not_found("Set not found")
        match = repo.get_match(match_set.match_id)
        if match_set.played or match.played:
            return conflict("Cannot update a played set or a set of a completed match")

        negative = _check_scores_non_negative(registration1_score, registration2_score)
        if negative is not None:
            return negative

        if registration1_score is not None:
            match_set.registration1_score = registration1_score
        if registration2_score is not None:
            match_set.registration2_score = registration2_score
        repo.save(match_set)
        return Ok(match_set)

    result = repo.atomic(operation)
    if result.ok:
        repo.refresh(result.value)
    return result


def delete_set(repo: EngineRepository, set_id: int) -> Result:
    """Delete the last set of a match, while neither it nor the match is played."""

    def operation() -> Result:
        match_set = repo.get_set(set_id)
        if match_set is None:
            return not_found("Set not found")
        match = repo.get_match(match_set.match_id)
        if match_set.played or match.played:
            return conflict("Cannot delete a played set or a set of a completed match")
        last = repo.sets_for_match(match.id)[-1]
        if last.id != match_set.id:
            return conflict(f"Only the last set (set {last.set_number}) can be deleted")
        repo.delete_set(match_set)
        return Ok(set_id)

    return repo.atomic(operation)


def check_majority_and_complete_match(repo: EngineRepository, match: Match) -> bool:
    """Finalise the match if a competitor has reached the majority of played sets.

    Remaining unplayed sets are marked played. Returns True if the match completed.
    """
    if match.played:
        return False
    sets = repo.sets_for_match(match.id)
    wins1, wins2 = count_set_wins(sets)
    needed = majority(_best_of(repo, match))
    if wins1 < needed and wins2 < needed:
        return False

    match.winner_id = match.registration1_id if wins1 >= needed else match.registration2_id
    match.played = True
    repo.save(match)
    for s in sets:
        if not s.played:
            s.played = True
            repo.save(s)
    _on_match_completed(repo, match)
    return True


def mark_set_played(repo: EngineRepository, set_id: int) -> Result:
    def operation() -> Result:
        match_set = repo.get_set(set_id)
        if match_set is None:
            return not_found("Set not found")
        if match_set.played:
            return conflict("Set is already played")
        match = repo.get_match(match_set.match_id)
        if match.played:
            return conflict("Match is already completed")

        scores = validate_scores(match_set.registration1_score, match_set.registration2_score)
        if not scores.valid:
            return validation_error(scores.error, field="scores")
        order = validate_set_order(match_set.set_number, repo.sets_for_match(match.id))
        if not order.valid:
            return conflict(order.error)

        match_set.played = True
        repo.save(match_set)
        repo.flush()

        completed = check_majority_and_complete_match(repo, match)
        return Ok(SetPlayedResult(match_set=match_set, match_completed=completed, winner_id=match.winner_id))

    result = repo.atomic(operation)
    if result.ok:
        repo.refresh(result.value.match_set)
    return result


# ----------------------------------------------------------------------
# Matches
# ----------------------------------------------------------------------


def complete_match(repo: EngineRepository, match_id: int) -> Result:
    """Explicitly mark a match played. All recorded sets must be played and decisive."""

    def operation() -> Result:
        match = repo.get_match(match_id)
        if match is None:
            return not_found("Match not found")
        if match.played:
            return conflict("Match is already completed")

        check = validate_match_completion(_best_of(repo, match), repo.sets_for_match(match_id))
        if not check.valid:
            logger.debug("Completion rejected for match %d: %s", match_id, check.error)
            return conflict(check.error)

        match.winner_id = match.registration1_id if check.winner_slot == 1 else match.registration2_id
        match.played = True
        repo.save(match)
        _on_match_completed(repo, match)
        return Ok(match)

    result = repo.atomic(operation)
    if not result.ok:
        return result
    repo.refresh(result.value)
    return Ok(_detail(repo, result.value))
