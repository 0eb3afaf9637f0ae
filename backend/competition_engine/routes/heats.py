"""
Heats: fixed-size groups for "tests" events. Generation refuses when heats
exist unless regenerate=true; reset removes everything generated for the event.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from competition_engine.repository import EngineRepository
from competition_engine.services.heat_service import delete_all_heats, generate_heats
from competition_engine.utils.route_helpers import get_repository, unwrap

router = APIRouter()


class HeatGenerateRequest(BaseModel):
    players_per_heat: Optional[int] = None
    shuffle_registrations: bool = True
    regenerate: bool = False


class HeatResponse(BaseModel):
    id: int
    name: str
    registration_count: int


class HeatGenerateResponse(BaseModel):
    total_heats: int
    total_registrations: int
    heats: List[HeatResponse]


class ResetResponse(BaseModel):
    deleted_heats: int
    deleted_matches: int


def reset_response(repo: EngineRepository, event_id: int) -> ResetResponse:
    reset = unwrap(delete_all_heats(repo, event_id))
    return ResetResponse(deleted_heats=reset.deleted_heats, deleted_matches=reset.deleted_matches)


@router.post("/events/{event_id}/heats/generate", response_model=HeatGenerateResponse, status_code=201)
def generate_event_heats(
    event_id: int,
    payload: Optional[HeatGenerateRequest] = None,
    repo: EngineRepository = Depends(get_repository),
):
    """Shuffle (optionally) and cut the event's registrations into heats A, B, C, ..."""
    payload = payload or HeatGenerateRequest()
    generated = unwrap(
        generate_heats(
            repo,
            event_id,
            players_per_heat=payload.players_per_heat,
            shuffle=payload.shuffle_registrations,
            regenerate=payload.regenerate,
        )
    )
    return HeatGenerateResponse(
        total_heats=generated.total_heats,
        total_registrations=generated.total_registrations,
        heats=[HeatResponse(id=h.id, name=h.name, registration_count=h.registration_count) for h in generated.heats],
    )


@router.post("/events/{event_id}/heats/reset", response_model=ResetResponse)
def reset_event_heats(event_id: int, repo: EngineRepository = Depends(get_repository)):
    return reset_response(repo, event_id)
