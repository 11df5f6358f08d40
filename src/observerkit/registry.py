"""Topic-keyed publish/notify registry.

Usage:
    registry = Registry()

    def on_reading(reading):
        print(f"Temperature: {reading['temperature']}")

    handle = registry.subscribe("weather.reading", on_reading)
    registry.publish("weather.reading", {"temperature": 21.5})
    registry.unsubscribe(handle)

Every publish delivers to a snapshot of the subscribers registered when the
call began. Handlers run outside the registry lock, so they may subscribe,
unsubscribe or publish again without deadlocking.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
import inspect
import logging
import threading
from typing import Any

from .exceptions import HandlerFailuresError

LOGGER = logging.getLogger(__name__)

DEFAULT_TOPIC = "default"

Handler = Callable[[Any], Any]


class ErrorPolicy(str, Enum):
    """What a registry does with handler failures once a publish pass ends."""

    COLLECT = "collect"
    LOG = "log"
    RAISE = "raise"


@dataclass(frozen=True, eq=False)
class SubscriptionHandle:
    """Opaque token returned by :meth:`Registry.subscribe`.

    Handles compare by identity, so registering the same handler twice yields
    two distinct handles.
    """

    topic: Hashable
    handler: Handler

    def __repr__(self) -> str:
        name = getattr(self.handler, "__qualname__", repr(self.handler))
        return f"<SubscriptionHandle topic={self.topic!r} handler={name} id={id(self):#x}>"


@dataclass(frozen=True)
class DeliveryFailure:
    """A single handler failure captured during a publish pass."""

    handle: SubscriptionHandle
    error: Exception

    @property
    def handler(self) -> Handler:
        return self.handle.handler


@dataclass
class PublishResult:
    """Outcome of one publish pass."""

    topic: Hashable
    delivered: int = 0
    failures: list[DeliveryFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def attempted(self) -> int:
        return self.delivered + len(self.failures)

    def raise_for_failures(self) -> None:
        """Raise :class:`HandlerFailuresError` if any handler failed."""
        if self.failures:
            raise HandlerFailuresError(self.topic, self.failures)


class Registry:
    """In-process publish/notify registry keyed by topic.

    Subscribers are plain callables receiving the published payload. The
    registry never requires subscribers or subjects to inherit from anything;
    a subject composes a registry and calls :meth:`publish` when its state
    changes.

    Args:
        error_policy: How failures are surfaced after each pass.
        on_error: Optional callback invoked once per failure after the pass.
    """

    def __init__(
        self,
        error_policy: ErrorPolicy | str = ErrorPolicy.COLLECT,
        on_error: Callable[[DeliveryFailure], None] | None = None,
    ) -> None:
        self._subscribers: dict[Hashable, list[SubscriptionHandle]] = {}
        self._lock = threading.RLock()
        self.error_policy = ErrorPolicy(error_policy)
        self.on_error = on_error

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        on_error: Callable[[DeliveryFailure], None] | None = None,
    ) -> Registry:
        """Build a registry from a loaded config dict (see ``load_config``)."""
        registry_config = config.get("registry", {})
        policy = registry_config.get("error_policy", ErrorPolicy.COLLECT.value)
        return cls(error_policy=policy, on_error=on_error)

    def subscribe(self, topic: Hashable, handler: Handler) -> SubscriptionHandle:
        """Append ``handler`` to ``topic`` and return a handle for removal."""
        if not callable(handler):
            raise TypeError(f"Handler must be callable, got {type(handler).__name__}")
        handle = SubscriptionHandle(topic=topic, handler=handler)
        with self._lock:
            self._subscribers.setdefault(topic, []).append(handle)
            count = len(self._subscribers[topic])
        LOGGER.debug(
            "registry.subscribe",
            extra={"event": "registry.subscribe", "topic": str(topic), "subscribers": count},
        )
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> bool:
        """Remove exactly the entry for ``handle``.

        Unknown or already-removed handles are ignored. Returns whether an
        entry was removed.
        """
        if not isinstance(handle, SubscriptionHandle):
            return False
        with self._lock:
            entries = self._subscribers.get(handle.topic)
            if not entries:
                return False
            remaining = [entry for entry in entries if entry is not handle]
            if len(remaining) == len(entries):
                return False
            if remaining:
                self._subscribers[handle.topic] = remaining
            else:
                del self._subscribers[handle.topic]
        LOGGER.debug(
            "registry.unsubscribe",
            extra={"event": "registry.unsubscribe", "topic": str(handle.topic)},
        )
        return True

    def _snapshot(self, topic: Hashable) -> list[SubscriptionHandle]:
        with self._lock:
            return list(self._subscribers.get(topic, ()))

    def publish(self, topic: Hashable, payload: Any = None) -> PublishResult:
        """Deliver ``payload`` synchronously to every current subscriber of ``topic``.

        Coroutine handlers cannot be driven here; they are recorded as
        failures and should be published through :meth:`apublish` instead.
        """
        result = PublishResult(topic=topic)
        handles = self._snapshot(topic)
        if not handles:
            LOGGER.debug(f"No subscribers for topic: {topic}")
            return result

        for handle in handles:
            try:
                outcome = handle.handler(payload)
                if inspect.isawaitable(outcome):
                    if inspect.iscoroutine(outcome):
                        outcome.close()
                    raise TypeError(
                        "Handler returned an awaitable; use apublish() for async handlers"
                    )
            except Exception as exc:  # noqa: BLE001 - one handler must not stop the rest.
                result.failures.append(DeliveryFailure(handle=handle, error=exc))
            else:
                result.delivered += 1

        self._settle(result)
        return result

    async def apublish(self, topic: Hashable, payload: Any = None) -> PublishResult:
        """Deliver ``payload`` like :meth:`publish`, awaiting async handlers in turn."""
        result = PublishResult(topic=topic)
        handles = self._snapshot(topic)
        if not handles:
            LOGGER.debug(f"No subscribers for topic: {topic}")
            return result

        for handle in handles:
            try:
                outcome = handle.handler(payload)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as exc:  # noqa: BLE001 - one handler must not stop the rest.
                result.failures.append(DeliveryFailure(handle=handle, error=exc))
            else:
                result.delivered += 1

        self._settle(result)
        return result

    def _settle(self, result: PublishResult) -> None:
        """Apply the error policy once the full pass has completed."""
        if not result.failures:
            return

        if self.error_policy is ErrorPolicy.LOG:
            for failure in result.failures:
                LOGGER.error(
                    "registry.publish.handler_failed",
                    exc_info=(
                        type(failure.error),
                        failure.error,
                        failure.error.__traceback__,
                    ),
                    extra={
                        "event": "registry.publish.handler_failed",
                        "topic": str(result.topic),
                        "handler": repr(failure.handle),
                    },
                )

        if self.on_error is not None:
            for failure in result.failures:
                try:
                    self.on_error(failure)
                except Exception as exc:  # noqa: BLE001 - error callbacks never propagate.
                    LOGGER.warning(
                        "registry.on_error.failed",
                        extra={
                            "event": "registry.on_error.failed",
                            "topic": str(result.topic),
                            "reason": str(exc),
                        },
                    )

        if self.error_policy is ErrorPolicy.RAISE:
            result.raise_for_failures()

    def subscriber_count(self, topic: Hashable = DEFAULT_TOPIC) -> int:
        with self._lock:
            return len(self._subscribers.get(topic, ()))

    def has_subscribers(self, topic: Hashable = DEFAULT_TOPIC) -> bool:
        return self.subscriber_count(topic) > 0

    def topics(self) -> list[Hashable]:
        """Return topics that currently have at least one subscriber."""
        with self._lock:
            return list(self._subscribers)

    def clear(self, topic: Hashable | None = None) -> None:
        """Clear subscribers.

        Args:
            topic: Specific topic to clear, or None for all
        """
        with self._lock:
            if topic is None:
                self._subscribers.clear()
            else:
                self._subscribers.pop(topic, None)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(entries) for entries in self._subscribers.values())

    def __iter__(self) -> Iterator[SubscriptionHandle]:
        with self._lock:
            snapshot = [h for entries in self._subscribers.values() for h in entries]
        return iter(snapshot)
