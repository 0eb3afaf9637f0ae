"""
Completion aggregation: group and event ``completed`` flags.

Always a full recomputation from the persisted Match/Group rows, never an
incremental update, so the flags cannot drift from the data whatever triggered
the recompute. Caller owns the transaction.
"""
import logging
from typing import Optional

from competition_engine.repository import EngineRepository

logger = logging.getLogger(__name__)


def recompute_group_completion(repo: EngineRepository, group_id: int) -> Optional[bool]:
    """A group is completed when every one of its matches is played.

    A group without matches (e.g. a heat) is vacuously completed.
    Returns the new flag, or None if the group no longer exists.
    """
    group = repo.get_group(group_id)
    if group is None:
        return None
    completed = all(m.played for m in repo.matches_for_group(group_id))
    if group.completed != completed:
        group.completed = completed
        repo.save(group)
    return completed


def recompute_event_completion(repo: EngineRepository, event_id: int) -> Optional[bool]:
    """An event is completed when it has at least one group and every group is completed."""
    event = repo.get_event(event_id)
    if event is None:
        return None
    groups = repo.groups_for_event(event_id)
    completed = len(groups) > 0 and all(g.completed for g in groups)
    if event.completed != completed:
        logger.info("Event %d completed flag -> %s", event_id, completed)
        event.completed = completed
        repo.save(event)
    return completed


def recompute_completion(repo: EngineRepository, event_id: int) -> Optional[bool]:
    """Recompute every group of the event, then the event itself."""
    for group in repo.groups_for_event(event_id):
        recompute_group_completion(repo, group.id)
    repo.flush()
    return recompute_event_completion(repo, event_id)
