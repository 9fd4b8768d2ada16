"""A media player built on :class:`Subject`.

The player only tracks which item is playing; decoding and timing belong to
whatever ``Playback`` engine is plugged in.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from .dispatch import DispatchPolicy
from .observer import Observer
from .state import Active, payload_of
from .subject import Subject


@dataclass(frozen=True)
class MediaItem:
    title: str
    duration: float = 0.0


class Playback(Protocol):
    def start(self, item: MediaItem) -> None: ...

    def pause(self, item: MediaItem) -> None: ...

    def stop(self) -> None: ...


class PlayerObserver(Observer[MediaItem]):
    """Observer of a :class:`MediaPlayer`; override what you need."""


class MediaPlayer(Subject[MediaItem]):
    def __init__(
        self,
        playback: Optional[Playback] = None,
        policy: DispatchPolicy = DispatchPolicy.FAIL_FAST,
    ) -> None:
        self.playback = playback
        super().__init__(
            on_start=playback.start if playback is not None else None,
            on_pause=playback.pause if playback is not None else None,
            on_stop=playback.stop if playback is not None else None,
            policy=policy,
        )

    def play(self, item: MediaItem) -> None:
        self.activate(item)

    @property
    def now_playing(self) -> Optional[MediaItem]:
        """The current item, paused or not; None when stopped."""
        return payload_of(self.state)

    @property
    def is_playing(self) -> bool:
        return isinstance(self.state, Active)
