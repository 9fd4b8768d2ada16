import logging
import threading
from collections import deque
from typing import Any, Callable, Generic, Optional, TypeVar

from .dispatch import DispatchPolicy, dispatch
from .observer import ON_ACTIVATED, ON_PAUSED, ON_STOPPED
from .registry import ObserverId, ObserverRegistry
from .state import IDLE, Active, Paused, State

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Subject(Generic[T]):
    """
    Holds the current state and broadcasts every transition to its observers.

    Observers are held weakly: registering one never extends its lifetime,
    and an observer that has been collected is dropped the next time a
    transition notifies.

    The ``on_start``, ``on_pause`` and ``on_stop`` hooks are the caller's
    side effects (start playback and so on). They run after the state is
    assigned and before observers are notified.

    A transition requested by a callback while a pass is running is queued
    and runs once that pass has reached every observer. If a pass raises,
    queued transitions are dropped.
    """

    def __init__(
        self,
        on_start: Optional[Callable[[T], Any]] = None,
        on_pause: Optional[Callable[[T], Any]] = None,
        on_stop: Optional[Callable[[], Any]] = None,
        policy: DispatchPolicy = DispatchPolicy.FAIL_FAST,
    ) -> None:
        self._state: State[T] = IDLE
        self._registry = ObserverRegistry()
        self._on_start = on_start
        self._on_pause = on_pause
        self._on_stop = on_stop
        self.policy = policy
        # Re-entrant so callbacks may call back in from the same thread.
        self._lock = threading.RLock()
        self._notifying = False
        self._pending: deque[tuple[Callable[..., None], tuple]] = deque()

    @property
    def state(self) -> "State[T]":
        return self._state

    def activate(self, payload: T) -> None:
        self._run_transition(self._activate, payload)

    def pause(self) -> None:
        self._run_transition(self._pause)

    def stop(self) -> None:
        self._run_transition(self._stop)

    def add_observer(self, observer: object) -> ObserverId:
        with self._lock:
            return self._registry.add(observer)

    def remove_observer(self, observer: object) -> bool:
        with self._lock:
            return self._registry.remove(observer)

    def observers(self) -> list[object]:
        """
        Live observers in notification order. Stale entries are pruned.
        """
        with self._lock:
            return self._registry.resolve_live()

    def entry_count(self) -> int:
        """Registered entries, including stale ones not yet pruned."""
        with self._lock:
            return len(self._registry)

    def live_count(self) -> int:
        with self._lock:
            return self._registry.live_count()

    def _run_transition(self, transition: Callable[..., None], *args: Any) -> None:
        with self._lock:
            if self._notifying:
                logger.debug(
                    "Deferring %s until the current pass ends", transition.__name__
                )
                self._pending.append((transition, args))
                return
            self._notifying = True
            try:
                transition(*args)
                while self._pending:
                    transition, args = self._pending.popleft()
                    transition(*args)
            finally:
                self._notifying = False
                self._pending.clear()

    def _activate(self, payload: T) -> None:
        self._set_state(Active(payload))
        if self._on_start is not None:
            self._on_start(payload)
        self._notify(ON_ACTIVATED, payload)

    def _pause(self) -> None:
        current = self._state
        if not isinstance(current, Active):
            logger.debug("Ignoring pause() while %s", type(current).__name__)
            return
        self._set_state(Paused(current.payload))
        if self._on_pause is not None:
            self._on_pause(current.payload)
        self._notify(ON_PAUSED, current.payload)

    def _stop(self) -> None:
        self._set_state(IDLE)
        if self._on_stop is not None:
            self._on_stop()
        self._notify(ON_STOPPED)

    def _set_state(self, state: "State[T]") -> None:
        self._state = state

    def _notify(self, callback_name: str, *args: Any) -> int:
        return dispatch(self._registry, callback_name, args, self.policy)
