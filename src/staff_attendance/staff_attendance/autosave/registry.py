"""Per-key debounce: scheduling a task for a key cancels the one before it."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Hashable, Protocol

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Cancellable]


def threading_timer(delay_seconds: float, callback: Callable[[], None]) -> Cancellable:
    timer = threading.Timer(delay_seconds, callback)
    timer.daemon = True
    timer.start()
    return timer


@dataclass(eq=False)
class _Entry:
    action: Callable[[], None]
    handle: Cancellable | None = None
    cancelled: bool = False


@dataclass
class TaskRegistry:
    """Holds at most one pending task per key.

    The timer mechanism is injected; the default fires on ``threading.Timer``
    threads, so the registry map is guarded by a lock.
    """

    timer_factory: TimerFactory = threading_timer
    _entries: dict[Hashable, _Entry] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def schedule(self, key: Hashable, delay_ms: int, action: Callable[[], None]) -> None:
        entry = _Entry(action=action)
        with self._lock:
            previous = self._entries.pop(key, None)
            if previous is not None:
                previous.cancelled = True
                if previous.handle is not None:
                    previous.handle.cancel()
            self._entries[key] = entry
        entry.handle = self.timer_factory(max(delay_ms, 0) / 1000, lambda: self._fire(key, entry))

    def cancel(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._entries.pop(key, None)
        if entry is None:
            return False
        entry.cancelled = True
        if entry.handle is not None:
            entry.handle.cancel()
        return True

    def cancel_all(self) -> None:
        with self._lock:
            keys = list(self._entries)
        for key in keys:
            self.cancel(key)

    def is_pending(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _fire(self, key: Hashable, entry: _Entry) -> None:
        with self._lock:
            # A timer that lost the race with cancel() must not run.
            if entry.cancelled or self._entries.get(key) is not entry:
                return
            del self._entries[key]
        logger.debug("Running debounced task for %r", key)
        entry.action()
