"""
Advancement: when a bracket match is completed, fill the downstream match slots.

The winner goes to ``winner_to`` / ``winner_to_slot``; the loser, where wired
(semifinals only), goes to ``loser_to`` / ``loser_to_slot``. Only registration
slots on future matches change. Group matches carry no wiring and are a no-op.
"""
import logging
from typing import Optional

from competition_engine.models.match import Match
from competition_engine.repository import EngineRepository

logger = logging.getLogger(__name__)


def _fill_slot(repo: EngineRepository, target_id: Optional[int], slot: Optional[int], registration_id: int) -> int:
    """Put ``registration_id`` into slot 1 or 2 of the target match.

    Only sets the slot if it is null or already holds the same registration, so
    calling twice produces the same state. Returns 1 if the slot changed.
    """
    if target_id is None or slot not in (1, 2):
        return 0
    target = repo.get_match(target_id)
    if target is None:
        return 0
    attr = "registration1_id" if slot == 1 else "registration2_id"
    current = getattr(target, attr)
    if current is not None:
        if current != registration_id:
            logger.warning(
                "Match %d slot %d already holds registration %d; not overwriting with %d",
                target.id,
                slot,
                current,
                registration_id,
            )
        return 0
    setattr(target, attr, registration_id)
    repo.save(target)
    return 1


def loser_of(match: Match) -> Optional[int]:
    if match.winner_id is None:
        return None
    if match.winner_id == match.registration1_id:
        return match.registration2_id
    if match.winner_id == match.registration2_id:
        return match.registration1_id
    return None


def apply_advancement_for_completed_match(repo: EngineRepository, match: Match) -> int:
    """Advance the winner (and route the loser) of a completed match.

    Returns the number of downstream slots filled.
    """
    if not match.played or match.winner_id is None:
        return 0

    updated = _fill_slot(repo, match.winner_to, match.winner_to_slot, match.winner_id)
    loser = loser_of(match)
    if loser is not None:
        updated += _fill_slot(repo, match.loser_to, match.loser_to_slot, loser)

    if updated:
        repo.flush()
        logger.info("Match %d advanced %d registration(s) downstream", match.id, updated)
    return updated
