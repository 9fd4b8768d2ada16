from typing import Any, Callable, Generic, Optional, TypeVar
from typing_extensions import override

T = TypeVar("T")

ON_ACTIVATED = "on_activated"
ON_PAUSED = "on_paused"
ON_STOPPED = "on_stopped"


class ObserverError(Exception):
    """Signals an expected failure in an observer callback that should be skipped."""


class Observer(Generic[T]):
    """
    Receiver of subject transitions.

    Every callback is optional; override only the ones you care about.
    Objects that do not subclass this are accepted as well, a missing
    callback is treated as a no-op.
    """

    def on_activated(self, payload: T) -> Any:
        pass

    def on_paused(self, payload: T) -> Any:
        pass

    def on_stopped(self) -> Any:
        pass


class CallbackObserver(Observer[T], Generic[T]):
    """
    Observer assembled from individual callback closures.

    Subjects only hold a weak reference to it, so keep it alive for as long
    as notifications are wanted.
    """

    def __init__(
        self,
        on_activated: Optional[Callable[[T], Any]] = None,
        on_paused: Optional[Callable[[T], Any]] = None,
        on_stopped: Optional[Callable[[], Any]] = None,
    ) -> None:
        self._on_activated = on_activated
        self._on_paused = on_paused
        self._on_stopped = on_stopped

    def activated(self, fn: Callable[[T], Any]) -> "CallbackObserver[T]":
        self._on_activated = fn
        return self

    def paused(self, fn: Callable[[T], Any]) -> "CallbackObserver[T]":
        self._on_paused = fn
        return self

    def stopped(self, fn: Callable[[], Any]) -> "CallbackObserver[T]":
        self._on_stopped = fn
        return self

    @override
    def on_activated(self, payload: T) -> Any:
        if self._on_activated is not None:
            return self._on_activated(payload)
        return None

    @override
    def on_paused(self, payload: T) -> Any:
        if self._on_paused is not None:
            return self._on_paused(payload)
        return None

    @override
    def on_stopped(self) -> Any:
        if self._on_stopped is not None:
            return self._on_stopped()
        return None


def callback_for(observer: object, name: str) -> Optional[Callable[..., Any]]:
    """
    Look up an optional callback on ``observer``; None means no-op.
    """
    callback = getattr(observer, name, None)
    if callback is None or not callable(callback):
        return None
    return callback
