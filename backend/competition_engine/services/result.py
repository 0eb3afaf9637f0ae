"""
Engine results and error taxonomy.

Engine operations return ``Ok(value)`` or ``Err(EngineError)`` instead of raising
for domain failures. Only the HTTP layer turns an ``Err`` into a status code.

Kinds:
- validation: malformed or out-of-range input (no retry)
- conflict:   the current state forbids the operation (structures exist, set order, majority reached)
- not_found:  an id did not resolve
- internal:   persistence failed mid-transaction; everything was rolled back
"""
from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    validation = "validation"
    conflict = "conflict"
    not_found = "not_found"
    internal = "internal"


@dataclass(frozen=True)
class EngineError:
    kind: ErrorKind
    message: str
    field: Optional[str] = None
    invalid_ids: List[Any] = dataclass_field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.field:
            body["field"] = self.field
        if self.invalid_ids:
            body["invalid_ids"] = list(self.invalid_ids)
        return body


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: EngineError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def validation_error(message: str, field: Optional[str] = None, invalid_ids: Optional[List[Any]] = None) -> Err:
    return Err(EngineError(ErrorKind.validation, message, field, list(invalid_ids or [])))


def conflict(message: str) -> Err:
    return Err(EngineError(ErrorKind.conflict, message))


def not_found(message: str) -> Err:
    return Err(EngineError(ErrorKind.not_found, message))


def internal_error(message: str = "Internal error; no changes were saved") -> Err:
    return Err(EngineError(ErrorKind.internal, message))
