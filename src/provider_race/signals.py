"""Cancellation primitives shared between the race loop and transports."""
from __future__ import annotations

from collections.abc import Callable
from threading import Lock

Listener = Callable[[], None]


class AbortSignal:
    """Thread-safe flag observed by an in-flight transport call.

    Transports may poll :attr:`aborted` or register listeners that fire once
    when the owning :class:`AbortController` aborts.  Listeners added after the
    abort run immediately.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._aborted = False
        self._reason: str | None = None
        self._listeners: list[Listener] = []

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def reason(self) -> str | None:
        return self._reason

    def add_listener(self, listener: Listener) -> None:
        with self._lock:
            if not self._aborted:
                self._listeners.append(listener)
                return
        listener()

    def remove_listener(self, listener: Listener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    def _abort(self, reason: str | None) -> None:
        with self._lock:
            if self._aborted:
                return
            self._aborted = True
            self._reason = reason
            listeners = tuple(self._listeners)
            self._listeners.clear()
        for listener in listeners:
            listener()


class AbortController:
    """Owner side of an :class:`AbortSignal`."""

    def __init__(self) -> None:
        self._signal = AbortSignal()

    @property
    def signal(self) -> AbortSignal:
        return self._signal

    def abort(self, reason: str | None = None) -> None:
        self._signal._abort(reason)


__all__ = ["AbortController", "AbortSignal"]
