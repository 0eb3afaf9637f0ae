"""
Match scoring rules (pure, no DB).

A match is best-of-N sets (N odd). Sets are recorded in order and only count once
played. The first competitor to win ``majority(best_of)`` sets wins the match.

State derivation:
    completed    match.played
    in_progress  at least one set played
    scheduled    otherwise
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

STATE_SCHEDULED = "scheduled"
STATE_IN_PROGRESS = "in_progress"
STATE_COMPLETED = "completed"


@dataclass
class RuleCheck:
    valid: bool
    error: Optional[str] = None
    winner_slot: Optional[int] = None  # 1 | 2, only from validate_match_completion


def majority(best_of: int) -> int:
    """Sets needed to win: ceil(best_of / 2)."""
    return (best_of + 1) // 2


def count_set_wins(sets: Sequence[Any]) -> Tuple[int, int]:
    """(wins1, wins2) over played sets. Sets need ``played`` and both scores."""
    wins1 = 0
    wins2 = 0
    for s in sets:
        if not s.played:
            continue
        if s.registration1_score > s.registration2_score:
            wins1 += 1
        elif s.registration2_score > s.registration1_score:
            wins2 += 1
    return wins1, wins2


def validate_set_addition(match_played: bool, best_of: int, existing_sets: Sequence[Any]) -> RuleCheck:
    if match_played:
        return RuleCheck(False, "Cannot add sets to a completed match")
    if len(existing_sets) >= best_of:
        return RuleCheck(False, f"Maximum number of sets ({best_of}) reached")
    if any(not s.played for s in existing_sets):
        return RuleCheck(False, "All previous sets must be played before adding a new one")
    wins1, wins2 = count_set_wins(existing_sets)
    if max(wins1, wins2) >= majority(best_of):
        return RuleCheck(False, "A competitor has already won the majority of sets")
    return RuleCheck(True)


def validate_scores(registration1_score: int, registration2_score: int) -> RuleCheck:
    """Scores a set needs before it can be marked played."""
    if registration1_score == registration2_score:
        return RuleCheck(False, "Set scores cannot be equal")
    if registration1_score <= 0 and registration2_score <= 0:
        return RuleCheck(False, "At least one score must be greater than 0")
    return RuleCheck(True)


def validate_set_order(set_number: int, existing_sets: Sequence[Any]) -> RuleCheck:
    """Every lower-numbered set must exist and be played."""
    by_number = {s.set_number: s for s in existing_sets}
    for n in range(1, set_number):
        previous = by_number.get(n)
        if previous is None:
            return RuleCheck(False, f"Set {n} does not exist")
        if not previous.played:
            return RuleCheck(False, f"Set {n} must be played first")
    return RuleCheck(True)


def validate_set_played(
    set_number: int, registration1_score: int, registration2_score: int, existing_sets: Sequence[Any]
) -> RuleCheck:
    scores = validate_scores(registration1_score, registration2_score)
    if not scores.valid:
        return scores
    return validate_set_order(set_number, existing_sets)


def validate_match_completion(best_of: int, sets: Sequence[Any]) -> RuleCheck:
    if not sets:
        return RuleCheck(False, "No sets recorded")
    if any(not s.played for s in sets):
        return RuleCheck(False, "All sets must be played before completing the match")
    wins1, wins2 = count_set_wins(sets)
    if wins1 == wins2:
        return RuleCheck(False, "Match cannot end in a tie")
    needed = majority(best_of)
    if max(wins1, wins2) < needed:
        return RuleCheck(False, f"A competitor needs {needed} set wins to complete the match")
    return RuleCheck(True, winner_slot=1 if wins1 > wins2 else 2)


def match_state(match: Any, sets: Sequence[Any]) -> str:
    if match.played:
        return STATE_COMPLETED
    if any(s.played for s in sets):
        return STATE_IN_PROGRESS
    return STATE_SCHEDULED
