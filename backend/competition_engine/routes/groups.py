from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from competition_engine.repository import EngineRepository
from competition_engine.services import groups_service
from competition_engine.utils.route_helpers import get_repository, unwrap

router = APIRouter()


class GroupCreate(BaseModel):
    event_id: int
    registration_ids: List[int]


class GroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    name: str
    completed: bool
    created_at: datetime


class GroupCreateResponse(BaseModel):
    group: GroupResponse
    match_count: int


@router.get("/events/{event_id}/groups", response_model=List[GroupResponse])
def list_event_groups(event_id: int, repo: EngineRepository = Depends(get_repository)):
    return unwrap(groups_service.list_groups(repo, event_id))


@router.post("/groups", response_model=GroupCreateResponse, status_code=201)
def create_group(payload: GroupCreate, repo: EngineRepository = Depends(get_repository)):
    """Create the next lettered group and its round-robin matches"""
    created = unwrap(groups_service.create_group(repo, payload.event_id, payload.registration_ids))
    return GroupCreateResponse(group=GroupResponse.model_validate(created.group), match_count=created.match_count)


@router.delete("/groups/{group_id}", status_code=204)
def delete_group(group_id: int, repo: EngineRepository = Depends(get_repository)):
    """Delete a group with its matches and sets; its registrations become ungrouped"""
    unwrap(groups_service.delete_group(repo, group_id))
    return None
