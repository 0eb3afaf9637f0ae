"""Round-robin group creation and removal."""
import logging
from dataclasses import dataclass
from typing import List, Sequence

from competition_engine.models.group import Group
from competition_engine.repository import EngineRepository
from competition_engine.services.completion import recompute_completion
from competition_engine.services.format_rules import is_bye_pair, round_robin, structure_name, supports_groups
from competition_engine.services.registration_validator import validate_registrations
from competition_engine.services.result import Ok, Result, conflict, not_found, validation_error

logger = logging.getLogger(__name__)


@dataclass
class CreateGroupResult:
    group: Group
    match_count: int


def next_group_name(repo: EngineRepository, event_id: int) -> str:
    """Letter for the next group, based on how many groups the event has right now.

    Names are not reserved: after deleting "B" out of A, B, C the next group is "C" again.
    """
    return structure_name(repo.count_groups(event_id))


def generate_group_matches(
    repo: EngineRepository, event_id: int, group_id: int, registration_ids: Sequence[int]
) -> int:
    """Persist one match per scheduled pair. Returns the number of matches created."""
    rounds = round_robin(len(registration_ids), list(registration_ids))
    match_count = 0
    for round_index, pairs in enumerate(rounds, start=1):
        match_number = 0
        for pair in pairs:
            if is_bye_pair(pair):
                continue
            match_number += 1
            repo.insert_match(
                event_id=event_id,
                group_id=group_id,
                round=round_index,
                match_number=match_number,
                registration1_id=pair[0],
                registration2_id=pair[1],
            )
            match_count += 1
    return match_count


def create_group(repo: EngineRepository, event_id: int, registration_ids: List[int]) -> Result:
    """Create the next lettered group, assign its registrations and schedule its round robin."""

    def operation() -> Result:
        event = repo.get_event(event_id)
        if event is None:
            return not_found("Event not found")
        if not supports_groups(event.format):
            return validation_error(
                "Groups can only be created for events with groups format. "
                "Use the bracket endpoint for single-elimination events.",
                field="format",
            )
        if len(set(registration_ids)) != len(registration_ids):
            duplicates = sorted({rid for rid in registration_ids if registration_ids.count(rid) > 1})
            return validation_error(
                "Duplicate registration ids", field="registration_ids", invalid_ids=duplicates
            )
        if len(registration_ids) < 2:
            return validation_error("A group needs at least 2 registrations", field="registration_ids")

        check = validate_registrations(repo, event_id, registration_ids)
        if not check.valid:
            return validation_error(
                f"Invalid registration IDs: {', '.join(str(i) for i in check.invalid_ids)}",
                field="registration_ids",
                invalid_ids=check.invalid_ids,
            )

        already_grouped = [r.id for r in repo.find_registrations_by_ids(registration_ids) if r.group_id is not None]
        if already_grouped:
            return conflict(
                f"Registrations already assigned to a group: {', '.join(str(i) for i in sorted(already_grouped))}"
            )

        group = repo.insert_group(event_id, next_group_name(repo, event_id))
        repo.assign_registrations_to_group(registration_ids, group.id)
        match_count = generate_group_matches(repo, event_id, group.id, registration_ids)

        recompute_completion(repo, event_id)
        logger.info(
            "Created group %s (id=%d) for event %d: %d registrations, %d matches",
            group.name,
            group.id,
            event_id,
            len(registration_ids),
            match_count,
        )
        return Ok(CreateGroupResult(group=group, match_count=match_count))

    result = repo.atomic(operation)
    if result.ok:
        repo.refresh(result.value.group)
    return result


def delete_group(repo: EngineRepository, group_id: int) -> Result:
    """Delete a group, its matches and sets; detach its registrations; recompute event completion."""

    def operation() -> Result:
        group = repo.get_group(group_id)
        if group is None:
            return not_found("Group not found")
        event_id = group.event_id
        deleted_matches = repo.delete_group_cascade(group_id)
        recompute_completion(repo, event_id)
        logger.info("Deleted group %d of event %d (%d matches)", group_id, event_id, deleted_matches)
        return Ok(deleted_matches)

    return repo.atomic(operation)


def list_groups(repo: EngineRepository, event_id: int) -> Result:
    if repo.get_event(event_id) is None:
        return not_found("Event not found")
    return Ok(repo.groups_for_event(event_id))
