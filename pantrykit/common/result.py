"""
Tagged result types

Remote calls return ``Success(data)`` or ``Failure(error)`` instead of raising,
so callers branch on the tag rather than checking optional response fields.
Public repository operations return ``OperationResult``, the user-facing
``{success, error}`` shape.
"""
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from pantrykit.common.errors import (
    AuthenticationRequiredError,
    PantryError,
    RemoteError,
    ValidationError,
)

T = TypeVar("T")

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
NOT_AUTHENTICATED_MESSAGE = "Not authenticated"


@dataclass(frozen=True)
class Success(Generic[T]):
    """Remote call succeeded with a payload."""
    data: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Remote call failed; ``error`` says why."""
    error: PantryError

    @property
    def ok(self) -> bool:
        return False


RemoteResult = Union[Success[Dict[str, Any]], Failure]

EMPTY_RESPONSE = "EMPTY_RESPONSE"


def created_record(result: RemoteResult, field: str) -> RemoteResult:
    """
    Narrow a mutation result to the created record under ``field``.

    A server can answer a mutation with ``{"data": {"createX": null}}`` and no
    ``errors``; that, or a record without an ``id``, becomes a Failure so
    callers never index into a missing payload.
    """
    if not result.ok:
        return result
    record = (result.data or {}).get(field)
    if not isinstance(record, dict) or record.get("id") in (None, ""):
        return Failure(RemoteError(f"Empty response for {field}", code=EMPTY_RESPONSE))
    return Success(record)


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a public repository/resolver operation.

    Attributes:
        success: True when the operation (and its refetch) completed
        error: Human-readable message safe to show the user
        auth_required: True when no token was available; the caller should
            route to sign-in rather than show a generic error
        data: Optional payload (e.g. created item id)
    """
    success: bool
    error: Optional[str] = None
    auth_required: bool = False
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, data: Optional[Dict[str, Any]] = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def from_error(cls, error: PantryError) -> "OperationResult":
        """Map an internal error onto the user-facing shape."""
        if isinstance(error, AuthenticationRequiredError):
            return cls(success=False, error=NOT_AUTHENTICATED_MESSAGE, auth_required=True)
        if isinstance(error, RemoteError) and error.is_authorization:
            return cls(success=False, error=NOT_AUTHENTICATED_MESSAGE, auth_required=True)
        if isinstance(error, ValidationError):
            return cls(success=False, error=error.message)
        return cls(success=False, error=GENERIC_ERROR_MESSAGE)

    @classmethod
    def failed(cls, message: str) -> "OperationResult":
        return cls(success=False, error=message)
