from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session

from competition_engine.database import get_session
from competition_engine.models.event import Event, EventFormat
from competition_engine.models.registration import Registration
from competition_engine.repository import EngineRepository
from competition_engine.services.format_rules import MAX_PLAYERS_PER_HEAT

router = APIRouter()


class EventCreate(BaseModel):
    name: str
    format: EventFormat
    best_of: int = 1
    players_per_heat: Optional[int] = None
    has_third_place_match: bool = False
    points_schema_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()

    @field_validator("best_of")
    @classmethod
    def validate_best_of(cls, v):
        if v < 1 or v % 2 == 0:
            raise ValueError("best_of must be an odd number >= 1")
        return v

    @field_validator("players_per_heat")
    @classmethod
    def validate_players_per_heat(cls, v):
        if v is not None and not 1 <= v <= MAX_PLAYERS_PER_HEAT:
            raise ValueError(f"players_per_heat must be between 1 and {MAX_PLAYERS_PER_HEAT}")
        return v


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    format: str
    best_of: int
    players_per_heat: Optional[int] = None
    has_third_place_match: bool
    points_schema_id: Optional[int] = None
    completed: bool
    created_at: datetime
    updated_at: datetime


class RegistrationCreate(BaseModel):
    player_ids: List[int]
    display_name: Optional[str] = None

    @field_validator("player_ids")
    @classmethod
    def validate_player_ids(cls, v):
        if not v:
            raise ValueError("player_ids cannot be empty")
        return v


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    group_id: Optional[int] = None
    player_ids: List[int]
    display_name: Optional[str] = None
    seed: Optional[int] = None


@router.post("/events", response_model=EventResponse, status_code=201)
def create_event(event_data: EventCreate, session: Session = Depends(get_session)):
    """Create a new event"""
    data = event_data.model_dump()
    data["format"] = event_data.format.value
    event = Event(**data)
    session.add(event)
    session.commit()
    session.refresh(event)

    return event


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event(event_id: int, session: Session = Depends(get_session)):
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.post("/events/{event_id}/registrations", response_model=RegistrationResponse, status_code=201)
def create_registration(event_id: int, payload: RegistrationCreate, session: Session = Depends(get_session)):
    """Register a player (or a team of players) for an event"""
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    registration = Registration(event_id=event_id, player_ids=payload.player_ids, display_name=payload.display_name)
    session.add(registration)
    session.commit()
    session.refresh(registration)

    return registration


@router.get("/events/{event_id}/registrations", response_model=List[RegistrationResponse])
def list_registrations(event_id: int, session: Session = Depends(get_session)):
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return EngineRepository(session).find_registrations_by_event(event_id)
