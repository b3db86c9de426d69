from __future__ import annotations
from typing import Callable, List, Optional, Protocol
import threading


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class ThreadingScheduler:
    """Runs callbacks on daemon ``threading.Timer`` threads.

    Callbacks do not run on the caller's thread. A viewer with its own event
    loop should inject a scheduler that posts back to that loop instead.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class Debouncer:
    """Run ``callback`` once ``delay`` seconds after the last ``trigger()``.

    Each trigger bumps a generation; a timer whose generation is stale (retriggered
    or cancelled, possibly while it was already starting) does nothing.
    """

    def __init__(self, scheduler: Scheduler, delay: float, callback: Callable[[], None]):
        self.scheduler = scheduler
        self.delay = delay
        self.callback = callback
        self._handle: Optional[TimerHandle] = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self):
        with self._lock:
            self._cancel_locked()
            generation = self._generation
            self._handle = self.scheduler.call_later(self.delay, lambda: self._fire(generation))

    def cancel(self):
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self):
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, generation: int):
        with self._lock:
            if generation != self._generation:
                return
            self._handle = None
        self.callback()


class TimerGroup:
    """Handles owned by one session so teardown can cancel all of them.

    Fired and cancelled handles leave the group.
    """

    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler
        self._handles: List[TimerHandle] = []
        self._lock = threading.RLock()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        box: List[TimerHandle] = []

        def run():
            with self._lock:
                if not box or box[0] not in self._handles:
                    return  # cancelled
                self._handles.remove(box[0])
            callback()

        # holding the lock keeps an immediate timer from running before it is registered
        with self._lock:
            handle = self.scheduler.call_later(delay, run)
            box.append(handle)
            self._handles.append(handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]):
        if handle is None:
            return
        with self._lock:
            if handle in self._handles:
                self._handles.remove(handle)
        handle.cancel()

    def cancel_all(self):
        with self._lock:
            handles, self._handles = self._handles, []
        for h in handles:
            h.cancel()

    def __len__(self) -> int:
        return len(self._handles)
