from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Idle:
    """Nothing is active."""


@dataclass(frozen=True)
class Active(Generic[T]):
    payload: T


@dataclass(frozen=True)
class Paused(Generic[T]):
    payload: T


State = Union[Idle, Active[T], Paused[T]]

IDLE = Idle()


def payload_of(state: "State[T]") -> "T | None":
    """
    Return the payload carried by ``state``, or None when idle.
    """
    if isinstance(state, (Active, Paused)):
        return state.payload
    return None
