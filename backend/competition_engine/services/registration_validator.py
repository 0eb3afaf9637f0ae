"""Checks that registration ids belong to an event. Read-only."""
from dataclasses import dataclass, field
from typing import List, Sequence

from competition_engine.repository import EngineRepository


@dataclass
class RegistrationCheck:
    valid: bool
    invalid_ids: List[int] = field(default_factory=list)


def validate_registrations(
    repo: EngineRepository, event_id: int, registration_ids: Sequence[int]
) -> RegistrationCheck:
    """Valid only if every id is a registration of ``event_id``.

    Invalid ids are reported in input order.
    """
    event_registration_ids = set(repo.find_registration_ids_by_event(event_id))
    invalid_ids = [rid for rid in registration_ids if rid not in event_registration_ids]
    if invalid_ids:
        return RegistrationCheck(valid=False, invalid_ids=invalid_ids)
    return RegistrationCheck(valid=True)
