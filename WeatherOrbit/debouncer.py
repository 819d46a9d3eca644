"""Suggestion debouncer - coalesces keystrokes into one place lookup per settled input."""
import logging
from typing import Callable, List
from place_provider import PlaceLookupBase
from scheduler import Scheduler

DEBOUNCE_SECONDS = 0.3
SUGGESTION_TASK = "suggestions"


class SuggestionDebouncer:
    """
    Issues at most one place lookup per settled input.

    Every push() cancels the pending timer and starts a new one; only the
    timer that survives a quiet period fires. Lookup failures are logged and
    reported as an empty suggestion list, they never reach the user.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        lookup: PlaceLookupBase,
        on_suggestions: Callable[[List[str]], None],
        delay_seconds: float = DEBOUNCE_SECONDS
    ):
        """
        Args:
            scheduler: Scheduler owning the debounce timer
            lookup: Place lookup provider
            on_suggestions: Receives the suggestion labels (possibly empty) for the settled input
            delay_seconds: Quiet period before a lookup is issued
        """
        self.scheduler = scheduler
        self.lookup = lookup
        self.on_suggestions = on_suggestions
        self.delay_seconds = delay_seconds
        self._text = ""
        self._generation = 0

    @property
    def text(self) -> str:
        return self._text

    def push(self, text: str) -> None:
        """Record the latest input and restart the quiet-period timer."""
        self._text = text
        self._generation += 1
        self.scheduler.schedule(SUGGESTION_TASK, self.delay_seconds, self._fire)

    def cancel(self) -> None:
        """Drop the pending timer and any lookup result still on its way."""
        self._generation += 1
        self.scheduler.cancel(SUGGESTION_TASK)

    def _fire(self) -> None:
        text = self._text
        if not text.strip():
            self.on_suggestions([])
            return

        generation = self._generation
        logging.debug(f"Looking up suggestions for {text!r}")

        def deliver(candidates) -> None:
            if generation != self._generation:
                logging.debug(f"Dropping stale suggestions for {text!r}")
                return
            self.on_suggestions([c.label for c in candidates])

        def failed(error: Exception) -> None:
            logging.warning(f"Suggestion lookup failed for {text!r}: {error}")
            if generation != self._generation:
                return
            self.on_suggestions([])

        self.scheduler.run_in_background(lambda: self.lookup.lookup(text), deliver, failed)
