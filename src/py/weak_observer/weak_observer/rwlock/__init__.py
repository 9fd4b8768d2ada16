"""Async reader/writer lock wrapping a single value.

``read()`` yields the underlying shared reference; treat it as immutable
unless you currently hold the write lock.
"""

from contextlib import asynccontextmanager
from asyncio import Lock, Condition
from typing import AsyncGenerator, Callable, Generic, TypeVar

T = TypeVar("T")
TI = TypeVar("TI")


class RwLock(Generic[T]):
    def __init__(self, value: T):
        self._rlock = Lock()
        self._wlock = Lock()
        self._drained = Condition()
        self._readers = 0
        self._value = value

    @property
    def readers(self) -> int:
        return self._readers

    @asynccontextmanager
    async def read(self) -> AsyncGenerator["T", None]:
        # Writers hold _wlock for their whole critical section, so new
        # readers queue behind a pending writer.
        async with self._wlock:
            async with self._rlock:
                self._readers += 1
        try:
            yield self._value
        finally:
            async with self._rlock:
                self._readers -= 1
                if self._readers == 0:
                    async with self._drained:
                        self._drained.notify_all()

    async def get(self) -> T:
        async with self.read() as value:
            return value

    class Writer(Generic[TI]):
        def __init__(self, rwlock: "RwLock[TI]"):
            self._rwlock = rwlock

        def get_value(self) -> TI:
            return self._rwlock._value

        def set_value(self, value: TI) -> None:
            self._rwlock._value = value

        def update(self, fn: Callable[[TI], TI]) -> TI:
            """Replace the value with ``fn(value)`` and return the new one."""
            self._rwlock._value = fn(self._rwlock._value)
            return self._rwlock._value

    @asynccontextmanager
    async def write(self) -> AsyncGenerator["RwLock[T].Writer[T]", None]:
        async with self._wlock:
            while True:
                await self._rlock.acquire()
                if self._readers == 0:
                    self._rlock.release()
                    break
                async with self._drained:
                    # Release the read lock so active readers can finish
                    self._rlock.release()
                    await self._drained.wait()
            yield RwLock.Writer(self)
