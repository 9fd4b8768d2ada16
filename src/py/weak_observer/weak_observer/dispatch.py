import enum
import logging
from typing import Any, Iterable, Optional

from .observer import ObserverError, callback_for
from .registry import ObserverRegistry

logger = logging.getLogger(__name__)


class DispatchPolicy(enum.Enum):
    """What a notification pass does when an observer callback raises."""

    # Propagate the first failure; later observers in the pass are skipped.
    FAIL_FAST = "fail_fast"
    # Call every observer, then raise the first failure.
    COLLECT = "collect"
    # Log failures and carry on.
    SUPPRESS = "suppress"


def handle_failure(
    policy: DispatchPolicy, exc: BaseException, callback_name: str
) -> Optional[BaseException]:
    """
    Apply ``policy`` to a failed callback.

    Returns the exception when it has to reach the caller, None when it was
    handled here.
    """
    if isinstance(exc, ObserverError):
        logger.exception(
            "Observer %s skipped due to ObserverError.", callback_name, exc_info=exc
        )
        return None
    if not isinstance(exc, Exception):
        # KeyboardInterrupt, SystemExit and friends always propagate.
        return exc
    logger.exception("Observer %s failed.", callback_name, exc_info=exc)
    if policy is DispatchPolicy.SUPPRESS:
        return None
    return exc


def dispatch(
    registry: ObserverRegistry,
    callback_name: str,
    args: Iterable[Any],
    policy: DispatchPolicy,
) -> int:
    """
    Run one synchronous notification pass over ``registry``.

    Entries are resolved one by one from a snapshot taken at the start of
    the pass; dead ones are pruned instead of called. Returns the number of
    observers that were notified.
    """
    args = tuple(args)
    notified = 0
    first_failure: Optional[BaseException] = None
    for key, observation in registry.snapshot():
        observer = observation.resolve()
        if observer is None:
            registry.prune(key, observation)
            continue
        callback = callback_for(observer, callback_name)
        notified += 1
        if callback is None:
            continue
        try:
            callback(*args)
        except BaseException as e:
            failure = handle_failure(policy, e, callback_name)
            if failure is None:
                continue
            if policy is DispatchPolicy.FAIL_FAST or not isinstance(failure, Exception):
                raise
            if first_failure is None:
                first_failure = failure
    if first_failure is not None:
        raise first_failure
    return notified
