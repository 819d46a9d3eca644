"""Event-loop scheduling abstraction - allows swapping the real asyncio loop with a manual test clock."""
import asyncio
import logging
from abc import ABC, abstractmethod
from concurrent.futures import Executor
from typing import Any, Callable, Dict, List, Optional

Callback = Callable[[], None]
SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class Scheduler(ABC):
    """
    Single-threaded scheduling of timers and background work.

    All callbacks run on the scheduler's own thread of control, one at a
    time. Timers started through schedule() are keyed by purpose: starting a
    new timer for a purpose cancels the pending one, so at most one timer per
    purpose is ever in flight.
    """

    def __init__(self):
        self._tasks: Dict[str, Any] = {}

    @abstractmethod
    def call_later(self, delay: float, callback: Callback) -> Any:
        """
        Run callback once after delay seconds.

        Returns:
            A handle with a cancel() method
        """
        pass

    @abstractmethod
    def run_in_background(
        self,
        work: Callable[[], Any],
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        """
        Run blocking work off the event loop and deliver its outcome back on it.

        Exactly one of on_success(result) or on_error(exception) is called.
        The work itself cannot be cancelled once started.
        """
        pass

    def schedule(self, purpose: str, delay: float, callback: Callback) -> None:
        """Start a timer for purpose, replacing any timer still pending for it."""
        self.cancel(purpose)

        def fire():
            self._tasks.pop(purpose, None)
            callback()

        self._tasks[purpose] = self.call_later(delay, fire)
        logging.debug(f"Scheduled '{purpose}' in {delay:.3f}s")

    def cancel(self, purpose: str) -> bool:
        """Cancel the pending timer for purpose. Returns True if one was pending."""
        handle = self._tasks.pop(purpose, None)
        if handle is None:
            return False
        handle.cancel()
        logging.debug(f"Cancelled '{purpose}'")
        return True

    def is_pending(self, purpose: str) -> bool:
        return purpose in self._tasks

    def cancel_all(self) -> None:
        for purpose in list(self._tasks):
            self.cancel(purpose)


class AsyncioScheduler(Scheduler):
    """Scheduler running on an asyncio event loop; blocking work goes to an executor."""

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        executor: Optional[Executor] = None
    ):
        super().__init__()
        self.loop = loop or asyncio.get_running_loop()
        self.executor = executor

    def call_later(self, delay: float, callback: Callback) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def run_in_background(
        self,
        work: Callable[[], Any],
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        future = self.loop.run_in_executor(self.executor, work)

        # Done callbacks are invoked by the loop, so the controller never sees another thread
        def done(fut: "asyncio.Future") -> None:
            if fut.cancelled():
                on_error(asyncio.CancelledError())
                return
            error = fut.exception()
            if error is not None:
                on_error(error)
            else:
                on_success(fut.result())

        future.add_done_callback(done)


class _FakeTimer:
    def __init__(self, due: float, seq: int, callback: Callback):
        self.due = due
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler(Scheduler):
    """
    Manually driven scheduler for testing - time only moves in advance().

    Background work is queued and runs when run_pending() or advance() is
    called, so tests can observe the state while a request is in flight.
    """

    def __init__(self):
        super().__init__()
        self.now = 0.0
        self._timers: List[_FakeTimer] = []
        self._work: List[Callback] = []
        self._seq = 0
        self.work_count = 0

    def call_later(self, delay: float, callback: Callback) -> _FakeTimer:
        self._seq += 1
        timer = _FakeTimer(self.now + max(delay, 0.0), self._seq, callback)
        self._timers.append(timer)
        return timer

    def run_in_background(
        self,
        work: Callable[[], Any],
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> None:
        self.work_count += 1

        def run():
            try:
                result = work()
            except Exception as e:
                on_error(e)
                return
            on_success(result)

        self._work.append(run)

    @property
    def pending_work(self) -> int:
        return len(self._work)

    @property
    def pending_timers(self) -> int:
        return len([t for t in self._timers if not t.cancelled])

    def run_pending(self) -> None:
        """Complete all queued background work, oldest first."""
        while self._work:
            self._work.pop(0)()

    def advance(self, seconds: float, run_work: bool = True) -> None:
        """
        Move the clock forward, firing due timers in order.

        Queued background work completes along the way unless run_work is
        False, which leaves it in flight.
        """
        if run_work:
            self.run_pending()
        target = self.now + seconds
        while True:
            due = [t for t in self._timers if not t.cancelled and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self._timers.remove(timer)
            self.now = timer.due
            timer.callback()
            if run_work:
                self.run_pending()
        self._timers = [t for t in self._timers if not t.cancelled]
        self.now = target
