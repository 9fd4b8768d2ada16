import gc

from weak_observer import Observer, ObserverRegistry


class Listener(Observer[int]):
    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Listener) and other.name == self.name

    def __hash__(self) -> int:
        return hash(self.name)


def test_identity_not_equality() -> None:
    registry = ObserverRegistry()
    first = Listener("same")
    second = Listener("same")

    assert registry.add(first) != registry.add(second)
    assert len(registry) == 2
    assert first in registry
    assert second in registry


def test_live_count_tracks_adds_and_removes() -> None:
    registry = ObserverRegistry()
    listeners = [Listener(str(i)) for i in range(5)]
    for listener in listeners:
        registry.add(listener)
    registry.add(listeners[0])
    registry.remove(listeners[1])
    registry.remove(listeners[1])
    registry.remove(Listener("never-added"))

    assert registry.live_count() == 4
    assert registry.resolve_live() == [listeners[0]] + listeners[2:]


def test_resolve_live_prunes_dead_entries() -> None:
    registry = ObserverRegistry()
    keep = Listener("keep")
    registry.add(keep)
    registry.add(Listener("gone"))
    gc.collect()

    assert len(registry) == 2
    assert registry.resolve_live() == [keep]
    assert len(registry) == 1


def test_prune_ignores_replaced_entry() -> None:
    registry = ObserverRegistry()
    listener = Listener("a")
    key = registry.add(listener)
    (_, stale), = registry.snapshot()

    registry.add(listener)
    assert registry.prune(key, stale) is False
    assert listener in registry


def test_readd_keeps_position() -> None:
    registry = ObserverRegistry()
    a = Listener("a")
    b = Listener("b")
    registry.add(a)
    registry.add(b)
    registry.add(a)

    assert registry.resolve_live() == [a, b]
