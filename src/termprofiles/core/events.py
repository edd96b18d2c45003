# termprofiles/core/events.py
from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loguru import logger

DID_RELOAD_PROFILES = "did-reload-profiles"
DID_RESET_BASE_PROFILE = "did-reset-base-profile"


class Subscription:
    """Handle returned by Emitter.on(); dispose() unsubscribes."""

    def __init__(self, dispose: Callable[[], None]):
        self._dispose = dispose
        self.disposed = False

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self._dispose()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.dispose()


class Emitter:
    """
    Named-event observer registry.

    emit() calls every current subscriber synchronously, in subscription order.
    A subscriber that raises is logged and skipped; the rest still run.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Callable[[Any], None]]] = {}

    def on(self, event: str, callback: Callable[[Any], None]) -> Subscription:
        if not callable(callback):
            raise TypeError("callback must be callable")
        self._subscribers.setdefault(event, []).append(callback)

        def _remove() -> None:
            callbacks = self._subscribers.get(event, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return Subscription(_remove)

    def emit(self, event: str, payload: Any = None) -> None:
        for callback in list(self._subscribers.get(event, [])):
            try:
                callback(payload)
            except Exception as e:
                logger.exception(f"[Emitter] subscriber for {event} failed: {e}")

    def listener_count(self, event: str) -> int:
        return len(self._subscribers.get(event, []))

    def clear(self) -> None:
        self._subscribers.clear()
