import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from .dispatch import DispatchPolicy, handle_failure
from .observer import ON_ACTIVATED, ON_PAUSED, ON_STOPPED, ObserverError, callback_for
from .registry import ObserverId, ObserverRegistry
from .rwlock import RwLock
from .state import IDLE, Active, Paused, State

T = TypeVar("T")

Hook = Callable[..., Union[Any, Awaitable[Any]]]

logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _pause_state(state: "State[T]") -> "State[T]":
    if isinstance(state, Active):
        return Paused(state.payload)
    return state


class AsyncSubject(Generic[T]):
    """
    Subject whose transitions and observers may be asynchronous.

    Callbacks and hooks can be plain functions or coroutine functions. One
    notification pass calls every live observer concurrently.

    Transitions are serialized, so a callback must not await a transition
    on the subject that is notifying it; schedule it as a task instead.
    """

    def __init__(
        self,
        on_start: Optional[Hook] = None,
        on_pause: Optional[Hook] = None,
        on_stop: Optional[Hook] = None,
        policy: DispatchPolicy = DispatchPolicy.FAIL_FAST,
    ) -> None:
        self._state: RwLock[State[T]] = RwLock(IDLE)
        self._registry: RwLock[ObserverRegistry] = RwLock(ObserverRegistry())
        self._transition = asyncio.Lock()
        self._on_start = on_start
        self._on_pause = on_pause
        self._on_stop = on_stop
        self.policy = policy

    async def get_state(self) -> "State[T]":
        return await self._state.get()

    async def activate(self, payload: T) -> None:
        async with self._transition:
            await self._set_state(Active(payload))
            if self._on_start is not None:
                await _maybe_await(self._on_start(payload))
            await self._notify(ON_ACTIVATED, payload)

    async def pause(self) -> None:
        async with self._transition:
            async with self._state.write() as writer:
                current = writer.get_value()
                paused = writer.update(_pause_state)
            if paused is current:
                logger.debug("Ignoring pause() while %s", type(current).__name__)
                return
            if self._on_pause is not None:
                await _maybe_await(self._on_pause(paused.payload))
            await self._notify(ON_PAUSED, paused.payload)

    async def stop(self) -> None:
        async with self._transition:
            await self._set_state(IDLE)
            if self._on_stop is not None:
                await _maybe_await(self._on_stop())
            await self._notify(ON_STOPPED)

    async def add_observer(self, observer: object) -> ObserverId:
        async with self._registry.write() as writer:
            return writer.get_value().add(observer)

    async def remove_observer(self, observer: object) -> bool:
        async with self._registry.write() as writer:
            return writer.get_value().remove(observer)

    async def observers(self) -> list[object]:
        async with self._registry.write() as writer:
            return writer.get_value().resolve_live()

    async def _set_state(self, state: "State[T]") -> None:
        async with self._state.write() as writer:
            writer.set_value(state)

    async def _notify(self, callback_name: str, *args: Any) -> int:
        async with self._registry.read() as registry:
            entries = registry.snapshot()

        callbacks = []
        stale = []
        for key, observation in entries:
            observer = observation.resolve()
            if observer is None:
                stale.append((key, observation))
                continue
            callbacks.append(callback_for(observer, callback_name))
            del observer

        if stale:
            async with self._registry.write() as writer:
                for key, observation in stale:
                    writer.get_value().prune(key, observation)

        updates = [
            self._call(callback, callback_name, args)
            for callback in callbacks
            if callback is not None
        ]
        if not updates:
            return len(callbacks)

        if self.policy is DispatchPolicy.FAIL_FAST:
            await self._gather_fail_fast(updates)
            return len(callbacks)

        results = await asyncio.gather(*updates, return_exceptions=True)
        first_failure: Optional[BaseException] = None
        for result in results:
            if isinstance(result, BaseException):
                failure = handle_failure(self.policy, result, callback_name)
                if failure is not None and first_failure is None:
                    first_failure = failure
        if first_failure is not None:
            raise first_failure
        return len(callbacks)

    async def _gather_fail_fast(self, updates: list[Awaitable[None]]) -> None:
        """
        Run ``updates`` concurrently; on the first failure cancel and await
        the rest, then raise it. Nothing outlives the pass.
        """
        tasks = [asyncio.ensure_future(update) for update in updates]
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        for task in tasks:
            if task.cancelled():
                continue
            exc = task.exception()
            if exc is not None:
                raise exc

    async def _call(
        self, callback: Callable[..., Any], callback_name: str, args: tuple
    ) -> None:
        try:
            await _maybe_await(callback(*args))
        except ObserverError as e:
            handle_failure(self.policy, e, callback_name)
        except Exception:
            if self.policy is DispatchPolicy.FAIL_FAST:
                logger.exception("Observer %s failed.", callback_name)
            raise
