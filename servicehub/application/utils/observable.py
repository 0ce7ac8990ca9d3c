from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Generic, TypeVar

S = TypeVar("S")

logger = logging.getLogger(__name__)


class Observable(Generic[S]):
    """Holds an immutable state value and notifies subscribers when it changes."""

    def __init__(self, initial: S) -> None:
        self._state = initial
        self._subscribers: list[Callable[[S], None]] = []

    @property
    def state(self) -> S:
        return self._state

    def subscribe(self, callback: Callable[[S], None]) -> Callable[[], None]:
        """Register a callback; returns a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, **changes: Any) -> None:
        new_state = replace(self._state, **changes)
        if new_state == self._state:
            return
        self._state = new_state
        for callback in list(self._subscribers):
            try:
                callback(new_state)
            except Exception as e:
                logger.exception("State subscriber failed", extra={"error": str(e)})
