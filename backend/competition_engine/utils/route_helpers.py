"""
Route helpers

Bridges the services layer to HTTP:
- get_repository: FastAPI dependency wrapping the request session
- unwrap: Ok(value) -> value, Err(error) -> HTTPException with the mapped status
"""

import logging

from fastapi import Depends, HTTPException
from sqlmodel import Session

from competition_engine.database import get_session
from competition_engine.repository import EngineRepository
from competition_engine.services.result import Err, ErrorKind, Result

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.validation: 400,
    ErrorKind.conflict: 400,
    ErrorKind.not_found: 404,
    ErrorKind.internal: 500,
}


def get_repository(session: Session = Depends(get_session)) -> EngineRepository:
    return EngineRepository(session)


def unwrap(result: Result):
    """
    Return the value of an Ok result, or raise the HTTPException for an Err.

    Raises:
        HTTPException 400: validation or conflict
        HTTPException 404: not found
        HTTPException 500: internal (already rolled back)
    """
    if isinstance(result, Err):
        status_code = STATUS_BY_KIND.get(result.error.kind, 500)
        raise HTTPException(status_code=status_code, detail=result.error.to_dict())
    return result.value
