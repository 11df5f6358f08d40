"""Domain exception hierarchy for observerkit."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .registry import DeliveryFailure


class ObserverKitError(RuntimeError):
    """Base class for all observerkit errors."""


class ConfigValidationError(ObserverKitError):
    """Raised when configuration cannot be validated safely."""


class HandlerFailuresError(ObserverKitError):
    """Raised after a publish pass when one or more handlers failed."""

    def __init__(self, topic: object, failures: Sequence[DeliveryFailure]) -> None:
        self.topic = topic
        self.failures = tuple(failures)
        super().__init__(
            f"{len(self.failures)} handler(s) failed while publishing to {topic!r}"
        )
