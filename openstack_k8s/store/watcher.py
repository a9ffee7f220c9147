"""
Provides a utility for waiting on a condition of an object to become True.

The watcher polls the store at a fixed interval for a bounded number of
attempts. Running out of attempts is an expected outcome and is returned as a
WaitResult rather than raised.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from openstack_k8s.config import WatcherConfig
from openstack_k8s.exceptions import WaitCancelledError
from openstack_k8s.manifest import NamedResource, conditions_by_type, parse_conditions

from .store import Store

_LOGGER = logging.getLogger(__name__)

TIMEOUT_REASON = "Timeout"


class ProgressSink(Protocol):
    """Receives human readable progress messages from a running wait."""

    def __call__(self, message: str) -> None:
        """Handle a progress message. The return value is ignored."""


def log_progress(message: str) -> None:
    """ProgressSink that writes to the watcher logger."""
    _LOGGER.info("%s", message)


@dataclass(frozen=True)
class WaitResult:
    """Terminal outcome of a wait."""

    met: bool
    message: str
    reason: str


def max_attempts(timeout_seconds: int, poll_interval_seconds: int) -> int:
    """Return the number of fetches a wait may perform.

    This truncates, so a poll interval longer than the timeout allows no
    attempts at all.
    """
    return timeout_seconds // poll_interval_seconds


class ConditionWatcher:
    """Waits for a named condition on an object in a Store to become True."""

    def __init__(
        self,
        store: Store,
        config: WatcherConfig | None = None,
        progress: ProgressSink | None = None,
    ) -> None:
        """
        Initialize the ConditionWatcher.

        Args:
            store: The Store to fetch the watched object from.
            config: Defaults for timeout and poll interval.
            progress: Sink for progress messages; defaults to the logger.
        """
        self._store = store
        self._config = config or WatcherConfig()
        self._progress: ProgressSink = progress or log_progress

    async def wait(
        self,
        resource_id: NamedResource,
        condition_type: str,
        timeout_seconds: int | None = None,
        poll_interval_seconds: int | None = None,
        cancel: asyncio.Event | None = None,
    ) -> WaitResult:
        """
        Poll the object until the condition is True or the attempts run out.

        Args:
            resource_id: The object to watch.
            condition_type: The condition type to wait for.
            timeout_seconds: Total time budget. Non-positive or None uses the
                configured default.
            poll_interval_seconds: Delay between attempts. Non-positive or None
                uses the configured default.
            cancel: Optional event that aborts the wait when set. It is only
                observed while sleeping between attempts.

        Returns:
            WaitResult with met=True and the condition message and reason, or
            met=False with reason Timeout.

        Raises:
            WaitCancelledError: If cancel is set during an inter-attempt sleep.
            ObjectNotFoundError: If the object does not exist.
            StoreException: If the store fails; the wait is not retried.
        """
        if timeout_seconds is None or timeout_seconds <= 0:
            timeout_seconds = self._config.default_timeout_seconds
        if poll_interval_seconds is None or poll_interval_seconds <= 0:
            poll_interval_seconds = self._config.default_poll_interval_seconds
        attempts = max_attempts(timeout_seconds, poll_interval_seconds)

        self._progress(
            f"Waiting for condition '{condition_type}' on {resource_id.kind} "
            f"'{resource_id.namespaced_name}' (timeout: {timeout_seconds}s)"
        )
        _LOGGER.debug(
            "Watching %s for %s with %d attempts every %ds",
            resource_id,
            condition_type,
            attempts,
            poll_interval_seconds,
        )

        for attempt in range(attempts):
            doc = await self._store.get_object(resource_id)
            cond = conditions_by_type(parse_conditions(doc)).get(condition_type)
            if cond is not None:
                if cond.ready:
                    self._progress(f"Condition '{condition_type}' is True - Ready!")
                    return WaitResult(met=True, message=cond.message, reason=cond.reason)
                self._progress(
                    f"Polling... Condition '{condition_type}' status: {cond.status} "
                    f"(reason: {cond.reason})"
                )
            else:
                _LOGGER.debug(
                    "Condition '%s' not present on %s (attempt %d)",
                    condition_type,
                    resource_id,
                    attempt,
                )

            if attempt < attempts - 1:
                if await self._sleep(poll_interval_seconds, cancel):
                    _LOGGER.info(
                        "Wait for %s on %s was cancelled", condition_type, resource_id
                    )
                    raise WaitCancelledError(str(resource_id), condition_type)

        _LOGGER.info(
            "Timeout waiting for condition '%s' on %s after %d attempts",
            condition_type,
            resource_id,
            attempts,
        )
        return WaitResult(
            met=False,
            message=f"Timeout waiting for condition '{condition_type}'",
            reason=TIMEOUT_REASON,
        )

    @staticmethod
    async def _sleep(seconds: int, cancel: asyncio.Event | None) -> bool:
        """Sleep for the poll interval, returning True if cancel was set."""
        if cancel is None:
            await asyncio.sleep(seconds)
            return False
        try:
            async with asyncio.timeout(seconds):
                await cancel.wait()
        except TimeoutError:
            return False
        return True
