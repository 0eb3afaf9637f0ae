from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from competition_engine.repository import EngineRepository
from competition_engine.routes.heats import ResetResponse, reset_response
from competition_engine.routes.matches import MatchResponse, match_response
from competition_engine.services.bracket_seeding import SeedAssignment
from competition_engine.services.bracket_service import generate_bracket
from competition_engine.utils.route_helpers import get_repository, unwrap

router = APIRouter()


class SeedInput(BaseModel):
    registration_id: int
    seed: int = Field(ge=1)


class BracketGenerateRequest(BaseModel):
    shuffle_registrations: bool = True
    seeds: Optional[List[SeedInput]] = None


class BracketGenerateResponse(BaseModel):
    total_rounds: int
    bracket_size: int
    bye_count: int
    total_registrations: int
    match_count: int
    matches: List[MatchResponse]


@router.post("/events/{event_id}/bracket/generate", response_model=BracketGenerateResponse, status_code=201)
def generate_event_bracket(
    event_id: int,
    payload: Optional[BracketGenerateRequest] = None,
    repo: EngineRepository = Depends(get_repository),
):
    """Generate the single elimination bracket. Seeded registrations take the standard seed slots."""
    payload = payload or BracketGenerateRequest()
    seeds = [SeedAssignment(registration_id=s.registration_id, seed=s.seed) for s in payload.seeds or []]
    bracket = unwrap(generate_bracket(repo, event_id, seeds=seeds, shuffle=payload.shuffle_registrations))
    return BracketGenerateResponse(
        total_rounds=bracket.total_rounds,
        bracket_size=bracket.bracket_size,
        bye_count=bracket.bye_count,
        total_registrations=bracket.total_registrations,
        match_count=bracket.match_count,
        matches=[match_response(m) for m in bracket.matches],
    )


@router.post("/events/{event_id}/bracket/reset", response_model=ResetResponse)
def reset_event_bracket(event_id: int, repo: EngineRepository = Depends(get_repository)):
    """Delete all bracket matches so the bracket can be generated again"""
    return reset_response(repo, event_id)
