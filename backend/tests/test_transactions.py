"""Generation is all-or-nothing: concurrent duplicates conflict, persistence failures roll back."""
import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, SQLModel, select

from competition_engine.database import build_engine
from competition_engine.models.event import Event
from competition_engine.models.group import Group
from competition_engine.models.match import Match
from competition_engine.models.registration import Registration
from competition_engine.models.structure_generation import StructureGeneration
from competition_engine.repository import EngineRepository
from competition_engine.services import heat_service
from competition_engine.services.bracket_service import generate_bracket
from competition_engine.services.heat_service import generate_heats
from competition_engine.services.result import ErrorKind


def _fail_on_call(original, failing_call: int):
    calls = {"count": 0}

    def wrapper(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == failing_call:
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))
        return original(*args, **kwargs)

    return wrapper


@pytest.fixture
def file_engine(tmp_path):
    """Two connections only see each other's commits on a real file."""
    engine = build_engine(f"sqlite:///{tmp_path / 'race.db'}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


def test_concurrent_heat_generation_conflicts(file_engine, monkeypatch):
    with Session(file_engine) as first, Session(file_engine) as second:
        event = Event(name="Time trial", format="tests", best_of=1)
        first.add(event)
        first.commit()
        first.add_all(
            Registration(event_id=event.id, player_ids=[i + 1], display_name=f"Player {i + 1}") for i in range(6)
        )
        first.commit()
        event_id = event.id

        first_repo = EngineRepository(first)
        second_repo = EngineRepository(second)
        # both callers see an empty event before either writes
        assert heat_service.structures_exist(second_repo, event_id) is False
        assert heat_service.structures_exist(first_repo, event_id) is False

        winner = generate_heats(first_repo, event_id, players_per_heat=2, shuffle=False)
        assert winner.ok
        heat_ids = [h.id for h in winner.value.heats]
        assert len(heat_ids) == 3

        # the loser already passed its existence check
        monkeypatch.setattr(heat_service, "structures_exist", lambda repo, event_id: False)
        loser = generate_heats(second_repo, event_id, players_per_heat=2, shuffle=False)

        assert loser.error.kind == ErrorKind.conflict
        assert loser.error.message == heat_service.HEATS_EXIST_MESSAGE

    with Session(file_engine) as check:
        groups = check.exec(select(Group).where(Group.event_id == event_id).order_by(Group.id)).all()
        assert [g.id for g in groups] == heat_ids
        assert len(check.exec(select(StructureGeneration)).all()) == 1
        assert {r.group_id for r in check.exec(select(Registration)).all()} == set(heat_ids)


def test_heat_generation_persistence_failure_rolls_back(repo, session, make_event, make_registrations, monkeypatch):
    event = make_event(format="tests")
    make_registrations(event.id, 9)
    monkeypatch.setattr(repo, "insert_group", _fail_on_call(repo.insert_group, 2))

    result = generate_heats(repo, event.id, players_per_heat=4, shuffle=False)

    assert result.error.kind == ErrorKind.internal
    session.expire_all()
    assert session.exec(select(Group)).all() == []
    assert session.exec(select(Match)).all() == []
    assert session.exec(select(StructureGeneration)).all() == []
    assert all(r.group_id is None for r in session.exec(select(Registration)).all())


def test_bracket_generation_persistence_failure_rolls_back(repo, session, make_event, make_registrations, monkeypatch):
    event = make_event(format="single-elimination")
    make_registrations(event.id, 4)
    monkeypatch.setattr(repo, "insert_match", _fail_on_call(repo.insert_match, 3))

    result = generate_bracket(repo, event.id, shuffle=False)

    assert result.error.kind == ErrorKind.internal
    session.expire_all()
    assert session.exec(select(Match)).all() == []
    assert session.exec(select(StructureGeneration)).all() == []

    # nothing left behind, so a clean retry succeeds
    monkeypatch.undo()
    assert generate_bracket(repo, event.id, shuffle=False).ok
