"""Top-level package for observerkit."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import load_config
    from .exceptions import ConfigValidationError, HandlerFailuresError, ObserverKitError
    from .registry import (
        DEFAULT_TOPIC,
        DeliveryFailure,
        ErrorPolicy,
        PublishResult,
        Registry,
        SubscriptionHandle,
    )
    from .subject import Change, ObservableValue, Subject

__all__ = [
    "Change",
    "ConfigValidationError",
    "DEFAULT_TOPIC",
    "DeliveryFailure",
    "ErrorPolicy",
    "HandlerFailuresError",
    "ObservableValue",
    "ObserverKitError",
    "PublishResult",
    "Registry",
    "Subject",
    "SubscriptionHandle",
    "load_config",
]

_REGISTRY_EXPORTS = {
    "DEFAULT_TOPIC",
    "DeliveryFailure",
    "ErrorPolicy",
    "PublishResult",
    "Registry",
    "SubscriptionHandle",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols so that importing the package stays cheap."""
    if name in _REGISTRY_EXPORTS:
        from . import registry

        return getattr(registry, name)
    if name in {"Change", "ObservableValue", "Subject"}:
        from . import subject

        return getattr(subject, name)
    if name == "load_config":
        from .config import load_config

        return load_config
    if name in {"ConfigValidationError", "HandlerFailuresError", "ObserverKitError"}:
        from . import exceptions

        return getattr(exceptions, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
