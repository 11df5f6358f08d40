"""Subjects that compose a registry instead of inheriting from one."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
import logging
from typing import Any, Generic, TypeVar

from .registry import DEFAULT_TOPIC, Handler, PublishResult, Registry, SubscriptionHandle

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class Subject:
    """A publisher bound to one topic of a registry.

    Several subjects may share a registry as long as they use distinct
    topics. When no registry is given a private one is created.
    """

    def __init__(
        self, registry: Registry | None = None, topic: Hashable = DEFAULT_TOPIC
    ) -> None:
        self.registry = registry if registry is not None else Registry()
        self.topic = topic

    def attach(self, handler: Handler) -> SubscriptionHandle:
        return self.registry.subscribe(self.topic, handler)

    def detach(self, handle: SubscriptionHandle) -> bool:
        return self.registry.unsubscribe(handle)

    def notify(self, payload: Any = None) -> PublishResult:
        return self.registry.publish(self.topic, payload)

    async def anotify(self, payload: Any = None) -> PublishResult:
        return await self.registry.apublish(self.topic, payload)

    @property
    def observer_count(self) -> int:
        return self.registry.subscriber_count(self.topic)


@dataclass(frozen=True)
class Change(Generic[T]):
    """Push-model payload describing a value transition."""

    name: str
    old: T | None
    new: T


class ObservableValue(Subject, Generic[T]):
    """State holder that notifies observers whenever its value changes.

    Observers receive a :class:`Change` (push model). Observers wanting the
    pull model can ignore the payload and call :meth:`get` on the holder.
    Setting an equal value does not notify unless ``force`` is passed.
    """

    def __init__(
        self,
        name: str,
        initial: T | None = None,
        registry: Registry | None = None,
        topic: Hashable | None = None,
    ) -> None:
        super().__init__(registry=registry, topic=topic if topic is not None else name)
        self.name = name
        self._value = initial

    def get(self) -> T | None:
        return self._value

    def set(self, value: T, force: bool = False) -> PublishResult | None:
        """Store ``value`` and publish a :class:`Change`; returns None when unchanged."""
        old = self._value
        if not force and old == value:
            return None
        self._value = value
        LOGGER.debug(
            "observable.changed",
            extra={"event": "observable.changed", "observable": self.name},
        )
        return self.notify(Change(name=self.name, old=old, new=value))
