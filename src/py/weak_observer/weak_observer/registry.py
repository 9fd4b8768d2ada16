import logging
import weakref
from dataclasses import dataclass, field
from typing import NewType, Optional

logger = logging.getLogger(__name__)

ObserverId = NewType("ObserverId", int)


def observer_id(observer: object) -> ObserverId:
    """
    Identity token for ``observer``; equal values with distinct identities
    get distinct tokens.
    """
    return ObserverId(id(observer))


@dataclass(eq=False)
class Observation:
    """Non-owning handle to one registered observer."""

    key: ObserverId
    ref: "weakref.ref[object]" = field(repr=False)

    @classmethod
    def of(cls, observer: object) -> "Observation":
        try:
            ref = weakref.ref(observer)
        except TypeError as e:
            raise TypeError(
                f"cannot observe with {type(observer).__name__!r}: "
                "object does not support weak references"
            ) from e
        return cls(observer_id(observer), ref)

    def resolve(self) -> Optional[object]:
        return self.ref()

    @property
    def alive(self) -> bool:
        return self.ref() is not None


class ObserverRegistry:
    """
    Identity keyed mapping of weakly held observers.

    Entries whose observer has been collected stay in the mapping until the
    next call to ``resolve_live`` prunes them.
    """

    def __init__(self) -> None:
        self._observations: dict[ObserverId, Observation] = {}

    def add(self, observer: object) -> ObserverId:
        observation = Observation.of(observer)
        # Overwriting an existing key keeps its original position.
        self._observations[observation.key] = observation
        logger.debug("Registered observer %s", observation.key)
        return observation.key

    def remove(self, observer: object) -> bool:
        key = observer_id(observer)
        observation = self._observations.get(key)
        if observation is None:
            return False
        # A dead entry can share its id with a new, unregistered object.
        resolved = observation.resolve()
        if resolved is not None and resolved is not observer:
            return False
        del self._observations[key]
        logger.debug("Removed observer %s", key)
        return True

    def snapshot(self) -> list[tuple[ObserverId, Observation]]:
        return list(self._observations.items())

    def prune(self, key: ObserverId, observation: Observation) -> bool:
        """
        Drop ``observation`` if it is still the entry for ``key``.
        """
        if self._observations.get(key) is not observation:
            return False
        del self._observations[key]
        logger.debug("Pruned stale observer %s", key)
        return True

    def resolve_live(self) -> list[object]:
        """
        Resolve every entry in registration order, pruning dead ones.
        """
        live: list[object] = []
        for key, observation in self.snapshot():
            observer = observation.resolve()
            if observer is None:
                self.prune(key, observation)
                continue
            live.append(observer)
        return live

    def live_count(self) -> int:
        return sum(1 for observation in self._observations.values() if observation.alive)

    def __len__(self) -> int:
        return len(self._observations)

    def __contains__(self, observer: object) -> bool:
        observation = self._observations.get(observer_id(observer))
        return observation is not None and observation.resolve() is observer
