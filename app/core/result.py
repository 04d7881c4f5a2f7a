"""Tagged results returned by every session-engine operation.

Services never raise for expected conditions. They return either ``Ok`` with
a payload or ``Err`` carrying an :class:`ErrorKind`; the HTTP layer decides
how each kind is rendered.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_AVAILABLE = "not_available"
    NOT_FOUND = "not_found"
    SESSION_CLOSED = "session_closed"
    ALREADY_STARTED = "already_started"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str = ""

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


class AlreadyStartedError(Exception):
    """Raised by the session store when an in-progress row already exists."""

    def __init__(self, user_id: int, assessment_id: int):
        self.user_id = user_id
        self.assessment_id = assessment_id
        super().__init__(
            f"User {user_id} already has an in-progress session for assessment {assessment_id}"
        )
