from __future__ import annotations

import threading
from typing import Any, Callable, Optional


class Debouncer:
    """Run a task only after `delay_ms` of quiet.

    Each `call()` cancels whatever is still pending and schedules the new
    task. At most one timer is pending at a time. `timer_factory` takes
    `(seconds, fn)` and returns an object with `start()` and `cancel()`;
    it defaults to `threading.Timer`.
    """

    def __init__(self, delay_ms: int = 500, timer_factory: Optional[Callable[..., Any]] = None):
        self.delay_ms = delay_ms
        self._timer_factory = timer_factory or threading.Timer
        self._timer: Any = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()

            def run() -> None:
                with self._lock:
                    if self._timer is not timer:
                        # superseded between firing and acquiring the lock
                        return
                    self._timer = None
                fn(*args, **kwargs)

            timer = self._timer_factory(self.delay_ms / 1000.0, run)
            if isinstance(timer, threading.Timer):
                timer.daemon = True
            self._timer = timer

        # started outside the lock; a timer that fires at once re-enters run()
        timer.start()
        return timer

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
