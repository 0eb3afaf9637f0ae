"""
Persistence interface for the competition engine.

Services never build queries themselves; they call one named function per access
pattern on ``EngineRepository``. Tests run the same class against an in-memory
SQLite database (see tests/conftest.py).
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from competition_engine.models.event import Event
from competition_engine.models.group import Group
from competition_engine.models.match import Match
from competition_engine.models.match_set import MatchSet
from competition_engine.models.registration import Registration
from competition_engine.models.structure_generation import StructureGeneration
from competition_engine.services.result import Err, Result, conflict, internal_error

logger = logging.getLogger(__name__)


class _Rollback(Exception):
    def __init__(self, result: Err):
        super().__init__(result.error.message)
        self.result = result


class EngineRepository:
    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator["EngineRepository"]:
        """Commit when the block exits normally, roll back on any exception."""
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def atomic(self, operation: Callable[[], Result], conflict_message: Optional[str] = None) -> Result:
        """Run ``operation`` as one transaction.

        An ``Err`` returned by the operation rolls back whatever it already wrote.
        A unique-constraint violation becomes a conflict (the concurrent-duplicate
        case); any other persistence failure becomes an internal error.
        """
        try:
            with self.transaction():
                result = operation()
                if isinstance(result, Err):
                    raise _Rollback(result)
            return result
        except _Rollback as rb:
            return rb.result
        except IntegrityError as exc:
            logger.info("Integrity conflict, rolled back: %s", exc.orig)
            return conflict(conflict_message or "Concurrent modification detected; nothing was saved")
        except SQLAlchemyError:
            logger.exception("Persistence failure, rolled back")
            return internal_error()

    def flush(self) -> None:
        self.session.flush()

    def save(self, obj: Any) -> Any:
        self.session.add(obj)
        return obj

    def refresh(self, obj: Any) -> Any:
        self.session.refresh(obj)
        return obj

    # ------------------------------------------------------------------
    # Events and registrations
    # ------------------------------------------------------------------

    def get_event(self, event_id: int) -> Optional[Event]:
        return self.session.get(Event, event_id)

    def find_registrations_by_event(self, event_id: int) -> List[Registration]:
        return list(
            self.session.exec(
                select(Registration).where(Registration.event_id == event_id).order_by(Registration.id)
            ).all()
        )

    def find_registration_ids_by_event(self, event_id: int) -> List[int]:
        return list(
            self.session.exec(
                select(Registration.id).where(Registration.event_id == event_id).order_by(Registration.id)
            ).all()
        )

    def find_registrations_by_ids(self, registration_ids: Sequence[int]) -> List[Registration]:
        if not registration_ids:
            return []
        return list(
            self.session.exec(select(Registration).where(Registration.id.in_(registration_ids))).all()
        )

    def assign_registrations_to_group(self, registration_ids: Sequence[int], group_id: int) -> None:
        if not registration_ids:
            return
        self.session.exec(
            update(Registration).where(Registration.id.in_(registration_ids)).values(group_id=group_id)
        )

    def set_registration_seed(self, registration_id: int, seed: int) -> None:
        self.session.exec(update(Registration).where(Registration.id == registration_id).values(seed=seed))

    def detach_registrations_from_event_groups(self, event_id: int) -> None:
        self.session.exec(
            update(Registration).where(Registration.event_id == event_id).values(group_id=None)
        )

    # ------------------------------------------------------------------
    # Groups / heats
    # ------------------------------------------------------------------

    def get_group(self, group_id: int) -> Optional[Group]:
        return self.session.get(Group, group_id)

    def groups_for_event(self, event_id: int) -> List[Group]:
        return list(self.session.exec(select(Group).where(Group.event_id == event_id).order_by(Group.id)).all())

    def count_groups(self, event_id: int) -> int:
        return self.session.exec(select(func.count(Group.id)).where(Group.event_id == event_id)).one()

    def insert_group(self, event_id: int, name: str) -> Group:
        group = Group(event_id=event_id, name=name)
        self.session.add(group)
        self.session.flush()
        return group

    def delete_group_cascade(self, group_id: int) -> int:
        """Delete a group with its matches and their sets; detach its registrations.

        Deleting the last structure of an event also releases its generation
        marker, so heats can be generated again. Returns the number of deleted matches.
        """
        event_id = self.session.exec(select(Group.event_id).where(Group.id == group_id)).first()
        match_ids = list(self.session.exec(select(Match.id).where(Match.group_id == group_id)).all())
        if match_ids:
            self.session.exec(delete(MatchSet).where(MatchSet.match_id.in_(match_ids)))
            self.session.exec(delete(Match).where(Match.id.in_(match_ids)))
        self.session.exec(update(Registration).where(Registration.group_id == group_id).values(group_id=None))
        self.session.exec(delete(Group).where(Group.id == group_id))
        if event_id is not None and self.count_groups(event_id) == 0 and not self.has_matches(event_id):
            self.session.exec(delete(StructureGeneration).where(StructureGeneration.event_id == event_id))
        self.session.flush()
        return len(match_ids)

    def delete_event_structures(self, event_id: int) -> Tuple[int, int]:
        """Delete every group, match, set and the generation marker of an event.

        Returns (deleted_groups, deleted_matches).
        """
        match_ids = list(self.session.exec(select(Match.id).where(Match.event_id == event_id)).all())
        group_count = self.count_groups(event_id)
        if match_ids:
            self.session.exec(delete(MatchSet).where(MatchSet.match_id.in_(match_ids)))
            self.session.exec(delete(Match).where(Match.event_id == event_id))
        self.detach_registrations_from_event_groups(event_id)
        self.session.exec(delete(Group).where(Group.event_id == event_id))
        self.session.exec(delete(StructureGeneration).where(StructureGeneration.event_id == event_id))
        self.session.flush()
        return group_count, len(match_ids)

    # ------------------------------------------------------------------
    # Generation marker
    # ------------------------------------------------------------------

    def get_generation_marker(self, event_id: int) -> Optional[StructureGeneration]:
        return self.session.exec(
            select(StructureGeneration).where(StructureGeneration.event_id == event_id)
        ).first()

    def insert_generation_marker(self, event_id: int, kind: str) -> StructureGeneration:
        """Claim the event for generation. Raises IntegrityError if already claimed."""
        marker = StructureGeneration(event_id=event_id, kind=kind)
        self.session.add(marker)
        self.session.flush()
        return marker

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def get_match(self, match_id: int) -> Optional[Match]:
        return self.session.get(Match, match_id)

    def matches_for_event(self, event_id: int) -> List[Match]:
        return list(
            self.session.exec(
                select(Match)
                .where(Match.event_id == event_id)
                .order_by(Match.group_id, Match.round, Match.match_number, Match.id)
            ).all()
        )

    def matches_for_group(self, group_id: int) -> List[Match]:
        return list(
            self.session.exec(
                select(Match).where(Match.group_id == group_id).order_by(Match.round, Match.match_number)
            ).all()
        )

    def has_matches(self, event_id: int) -> bool:
        return self.session.exec(select(Match.id).where(Match.event_id == event_id).limit(1)).first() is not None

    def insert_match(self, **fields: Any) -> Match:
        match = Match(**fields)
        self.session.add(match)
        self.session.flush()
        return match

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    def get_set(self, set_id: int) -> Optional[MatchSet]:
        return self.session.get(MatchSet, set_id)

    def sets_for_match(self, match_id: int) -> List[MatchSet]:
        return list(
            self.session.exec(
                select(MatchSet).where(MatchSet.match_id == match_id).order_by(MatchSet.set_number)
            ).all()
        )

    def insert_set(self, match_id: int, set_number: int, registration1_score: int, registration2_score: int) -> MatchSet:
        match_set = MatchSet(
            match_id=match_id,
            set_number=set_number,
            registration1_score=registration1_score,
            registration2_score=registration2_score,
            played=False,
        )
        self.session.add(match_set)
        self.session.flush()
        return match_set

    def delete_set(self, match_set: MatchSet) -> None:
        self.session.delete(match_set)
        self.session.flush()
