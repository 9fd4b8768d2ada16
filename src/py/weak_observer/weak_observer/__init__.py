"""Observer pattern implementation with weakly held observers and async support.

Subjects never own their observers: an observer that goes away is pruned the
next time a transition notifies.
"""

from .aio import AsyncSubject
from .dispatch import DispatchPolicy
from .observer import CallbackObserver, Observer, ObserverError
from .player import MediaItem, MediaPlayer, Playback, PlayerObserver
from .registry import Observation, ObserverId, ObserverRegistry
from .rwlock import RwLock
from .state import IDLE, Active, Idle, Paused, State
from .subject import Subject

__all__ = [
    "RwLock",
    "Subject",
    "AsyncSubject",
    "Observer",
    "CallbackObserver",
    "ObserverError",
    "DispatchPolicy",
    "ObserverRegistry",
    "Observation",
    "ObserverId",
    "State",
    "Idle",
    "Active",
    "Paused",
    "IDLE",
    "MediaItem",
    "MediaPlayer",
    "Playback",
    "PlayerObserver",
]
