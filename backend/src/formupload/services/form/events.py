"""Minimal named-event hub used by IncomingForm."""

from collections.abc import Callable
from typing import Any

Listener = Callable[..., Any]


class EventEmitter:
    """Register listeners by event name and call them in registration order.

    Emitting ``"error"`` with nobody listening raises the error instead of
    dropping it.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[tuple[Listener, bool]]] = {}

    def on(self, event: str, listener: Listener) -> "EventEmitter":
        self._listeners.setdefault(event, []).append((listener, False))
        return self

    def once(self, event: str, listener: Listener) -> "EventEmitter":
        self._listeners.setdefault(event, []).append((listener, True))
        return self

    def off(self, event: str, listener: Listener) -> "EventEmitter":
        """Remove the first registration of ``listener`` for ``event``."""
        entries = self._listeners.get(event, [])
        for i, (fn, _) in enumerate(entries):
            if fn == listener:
                del entries[i]
                break
        return self

    def listeners(self, event: str) -> list[Listener]:
        return [fn for fn, _ in self._listeners.get(event, [])]

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        entries = self._listeners.get(event)
        if not entries:
            if event == "error":
                err = args[0] if args else None
                if isinstance(err, BaseException):
                    raise err
                raise RuntimeError(f"Unhandled error event: {err!r}")
            return False
        # Snapshot so listeners may (un)register while we iterate
        snapshot = list(entries)
        for entry in snapshot:
            fn, one_shot = entry
            if one_shot:
                try:
                    entries.remove(entry)
                except ValueError:
                    continue
            fn(*args)
        return True
