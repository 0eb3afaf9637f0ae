"""
Match progression: sets are recorded in order, marked played one at a time, and the
match completes when a competitor reaches the majority (or on an explicit
{played: true} once all sets are decisive). Completion advances bracket winners.
"""
from typing import List, Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from competition_engine.models.match import Match
from competition_engine.models.match_set import MatchSet
from competition_engine.repository import EngineRepository
from competition_engine.services import match_service
from competition_engine.services.match_validation import match_state
from competition_engine.utils.route_helpers import get_repository, unwrap

router = APIRouter()


class SetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    match_id: int
    set_number: int
    registration1_score: int
    registration2_score: int
    played: bool


class MatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    group_id: Optional[int] = None
    round: int
    match_number: int
    registration1_id: Optional[int] = None
    registration2_id: Optional[int] = None
    bracket_position: Optional[int] = None
    winner_to: Optional[int] = None
    winner_to_slot: Optional[int] = None
    loser_to: Optional[int] = None
    loser_to_slot: Optional[int] = None
    is_third_place: bool = False
    played: bool
    winner_id: Optional[int] = None
    state: str = "scheduled"
    sets: List[SetResponse] = []


class MatchUpdate(BaseModel):
    played: bool


class SetCreate(BaseModel):
    set_number: int = Field(ge=1)
    registration1_score: int = Field(default=0, ge=0)
    registration2_score: int = Field(default=0, ge=0)


class SetUpdate(BaseModel):
    registration1_score: Optional[int] = Field(default=None, ge=0)
    registration2_score: Optional[int] = Field(default=None, ge=0)


class SetPlayedResponse(BaseModel):
    set: SetResponse
    match_completed: bool
    winner_id: Optional[int] = None


def match_response(match: Match, sets: Sequence[MatchSet] = ()) -> MatchResponse:
    response = MatchResponse.model_validate(match, from_attributes=True)
    response.sets = [SetResponse.model_validate(s) for s in sets]
    response.state = match_state(match, sets)
    return response


@router.get("/events/{event_id}/matches", response_model=List[MatchResponse])
def list_event_matches(event_id: int, repo: EngineRepository = Depends(get_repository)):
    """All matches of an event (groups first by group, then bracket) with sets and state"""
    details = unwrap(match_service.list_matches(repo, event_id))
    return [match_response(d.match, d.sets) for d in details]


@router.get("/matches/{match_id}", response_model=MatchResponse)
def get_match(match_id: int, repo: EngineRepository = Depends(get_repository)):
    detail = unwrap(match_service.get_match_detail(repo, match_id))
    return match_response(detail.match, detail.sets)


@router.patch("/matches/{match_id}", response_model=MatchResponse)
def update_match(match_id: int, payload: MatchUpdate, repo: EngineRepository = Depends(get_repository)):
    """Explicitly complete a match. Reverting a completed match is not supported."""
    if not payload.played:
        raise HTTPException(status_code=400, detail="Only {played: true} is supported")
    detail = unwrap(match_service.complete_match(repo, match_id))
    return match_response(detail.match, detail.sets)


@router.post("/matches/{match_id}/sets", response_model=SetResponse, status_code=201)
def add_set(match_id: int, payload: SetCreate, repo: EngineRepository = Depends(get_repository)):
    return unwrap(
        match_service.add_set(
            repo, match_id, payload.set_number, payload.registration1_score, payload.registration2_score
        )
    )


@router.patch("/sets/{set_id}", response_model=SetResponse)
def update_set(set_id: int, payload: SetUpdate, repo: EngineRepository = Depends(get_repository)):
    return unwrap(
        match_service.update_set(
            repo,
            set_id,
            registration1_score=payload.registration1_score,
            registration2_score=payload.registration2_score,
        )
    )


@router.patch("/sets/{set_id}/played", response_model=SetPlayedResponse)
def mark_set_played(set_id: int, repo: EngineRepository = Depends(get_repository)):
    """Mark a set played; completes the match when a competitor reaches the majority"""
    result = unwrap(match_service.mark_set_played(repo, set_id))
    return SetPlayedResponse(
        set=SetResponse.model_validate(result.match_set),
        match_completed=result.match_completed,
        winner_id=result.winner_id,
    )


@router.delete("/sets/{set_id}", status_code=204)
def delete_set(set_id: int, repo: EngineRepository = Depends(get_repository)):
    unwrap(match_service.delete_set(repo, set_id))
    return None
