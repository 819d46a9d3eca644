"""Query lifecycle controller - turns input events into suggestions, weather fetches and history updates."""
import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple
from debouncer import SuggestionDebouncer, DEBOUNCE_SECONDS
from history_cache import HistoryCache, HistoryEntry
from navigator import KeyAction, ListItem, item_action, resolve_key
from place_provider import PlaceLookupBase
from scheduler import Scheduler
from weather_data import WeatherSnapshot
from weather_provider import WeatherProviderBase, PlaceNotFoundError
import query_state as qs

PLACEHOLDER_TASK = "placeholder-reset"
ERROR_CLEAR_TASK = "error-auto-clear"
REVEAL_TASK = "reveal-result"
BLUR_TASK = "blur-hide"

MESSAGE_SECONDS = 1.0
REVEAL_SECONDS = 0.05
QUERIED_AT_FORMAT = "%Y-%m-%d %H:%M"

Listener = Callable[[qs.ControllerState], None]


class QueryController:
    """
    Owns the controller state and carries out the side effects of each transition.

    The presentation layer forwards raw events (on_input_change, on_key_down,
    on_submit, on_select, on_focus, on_blur, on_click, on_reset) and renders
    whatever state it is handed through add_listener(). All calls, timer
    fires and provider completions run on the scheduler's single thread.

    Two submissions in flight at once race; whichever response arrives last
    becomes the snapshot.
    """

    def __init__(
        self,
        weather_provider: WeatherProviderBase,
        place_lookup: PlaceLookupBase,
        history: HistoryCache,
        scheduler: Scheduler,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        message_seconds: float = MESSAGE_SECONDS,
        reveal_seconds: float = REVEAL_SECONDS,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Args:
            weather_provider: Fetches weather for a place
            place_lookup: Provides place-name suggestions
            history: Recent-search cache (loaded in start())
            scheduler: Event loop used for timers and provider calls
            debounce_seconds: Quiet period before suggestions are looked up
            message_seconds: How long error/info placeholders and the not-found banner stay up
            reveal_seconds: Delay before asking the view to scroll to a fresh result
            clock: Returns the wall-clock time stamped on history entries
        """
        self.weather_provider = weather_provider
        self.history = history
        self.scheduler = scheduler
        self.message_seconds = message_seconds
        self.reveal_seconds = reveal_seconds
        self.clock = clock
        self.debouncer = SuggestionDebouncer(
            scheduler, place_lookup, self._on_suggestions, debounce_seconds
        )
        self._state = qs.ControllerState()
        self._listeners: List[Listener] = []

    # -- observable state -------------------------------------------------

    @property
    def state(self) -> qs.ControllerState:
        return self._state

    @property
    def query(self) -> str:
        return self._state.query

    @property
    def lifecycle(self) -> qs.LifecycleState:
        return self._state.lifecycle

    @property
    def placeholder(self) -> str:
        return self._state.placeholder

    @property
    def combined_list(self) -> Tuple[ListItem, ...]:
        return self._state.combined_list

    @property
    def cursor(self) -> int:
        return self._state.cursor

    @property
    def snapshot(self) -> Optional[WeatherSnapshot]:
        return self._state.snapshot

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _dispatch(self, event) -> None:
        new_state = qs.reduce(self._state, event)
        if new_state is self._state:
            return
        logging.debug(f"{type(event).__name__}: lifecycle={new_state.lifecycle.kind} query={new_state.query!r}")
        self._state = new_state
        for listener in self._listeners:
            listener(new_state)

    # -- startup ----------------------------------------------------------

    def start(self) -> None:
        """Load history and warm the snapshot with the last queried place, if any."""
        self._dispatch(qs.HistoryChanged(self.history.load()))
        last_place = self.history.load_last_place()
        if last_place:
            logging.info(f"Restoring last place: {last_place}")
            self.submit(last_place)

    # -- presentation events ---------------------------------------------

    def on_input_change(self, text: str) -> None:
        self.scheduler.cancel(BLUR_TASK)
        self._dispatch(qs.InputChanged(text))
        self.debouncer.push(text)

    def on_key_down(self, key: str) -> None:
        state = self._state
        action = resolve_key(key, state.cursor, state.combined_list, state.list_visible, state.query)
        self._perform(action)

    def on_submit(self) -> None:
        self.submit(self._state.query)

    def on_select(self, item: ListItem) -> None:
        """Activate a list item directly (mouse click)."""
        self.scheduler.cancel(BLUR_TASK)
        self._perform(item_action(item))

    def on_focus(self) -> None:
        self.scheduler.cancel(BLUR_TASK)
        self._dispatch(qs.ListShown())

    def on_blur(self) -> None:
        # Deferred to the next loop turn so a click on a list item lands first
        self.scheduler.schedule(BLUR_TASK, 0, lambda: self._dispatch(qs.ListHidden()))

    def on_click(self) -> None:
        self.debouncer.cancel()
        self._dispatch(qs.InputClicked())

    def on_reset(self) -> None:
        self.scheduler.cancel(PLACEHOLDER_TASK)
        self._dispatch(qs.Reset())

    def show_info(self, message: str) -> None:
        self._dispatch(qs.InfoShown(message))
        self._schedule_placeholder_reset()

    def clear_history(self) -> None:
        self.debouncer.cancel()
        self.history.clear()
        self._dispatch(qs.HistoryCleared())

    def _perform(self, action: KeyAction) -> None:
        if action.kind == KeyAction.NONE:
            return
        if action.kind == KeyAction.MOVE:
            self._dispatch(qs.CursorMoved(action.cursor))
        elif action.kind == KeyAction.HIDE:
            self._dispatch(qs.ListHidden())
        elif action.kind == KeyAction.SUBMIT:
            self.submit(action.text)
        elif action.kind == KeyAction.CHOOSE:
            self._dispatch(qs.PlaceChosen(action.text))
            self.submit(action.text)
        elif action.kind == KeyAction.CLEAR_HISTORY:
            self.clear_history()
        else:
            raise ValueError(f"Unknown key action: {action.kind}")

    # -- suggestions ------------------------------------------------------

    def _on_suggestions(self, labels: List[str]) -> None:
        self._dispatch(qs.SuggestionsArrived(tuple(labels)))

    # -- weather ----------------------------------------------------------

    def submit(self, place: str) -> None:
        """Fetch weather for place. Blank text is ignored."""
        if not place or not place.strip():
            return
        place = place.strip()
        logging.info(f"Submitting weather request for {place!r}")

        self.debouncer.cancel()
        self.scheduler.cancel(PLACEHOLDER_TASK)
        self.scheduler.cancel(ERROR_CLEAR_TASK)
        self._dispatch(qs.SubmitStarted(place))

        def succeeded(snapshot: WeatherSnapshot) -> None:
            try:
                self._weather_loaded(snapshot)
            finally:
                self._dispatch(qs.LoadingFinished())

        def failed(error: Exception) -> None:
            try:
                self._weather_failed(place, error)
            finally:
                self._dispatch(qs.LoadingFinished())

        self.scheduler.run_in_background(
            lambda: self.weather_provider.get_weather(place), succeeded, failed
        )

    def _weather_loaded(self, snapshot: WeatherSnapshot) -> None:
        label = snapshot.label
        entry = HistoryEntry(
            place_label=label,
            last_temperature_c=snapshot.temp,
            condition_icon=snapshot.icon or None,
            last_queried_at=self.clock().strftime(QUERIED_AT_FORMAT),
        )
        entries = self.history.upsert(entry)
        self.history.save_last_place(label)
        self._dispatch(qs.WeatherLoaded(snapshot))
        self._dispatch(qs.HistoryChanged(entries))
        self.scheduler.schedule(REVEAL_TASK, self.reveal_seconds, lambda: self._dispatch(qs.ResultRevealed()))

    def _weather_failed(self, place: str, error: Exception) -> None:
        if isinstance(error, PlaceNotFoundError):
            logging.info(f"Place not found: {place!r}")
            self._dispatch(qs.WeatherNotFound())
            self.scheduler.schedule(
                ERROR_CLEAR_TASK, self.message_seconds, lambda: self._dispatch(qs.ErrorAutoCleared())
            )
        else:
            logging.error(f"Weather fetch error for {place!r}: {error}")
            self._dispatch(qs.WeatherFailed(str(error) or "Invalid data"))
        self._schedule_placeholder_reset()

    def _schedule_placeholder_reset(self) -> None:
        self.scheduler.schedule(
            PLACEHOLDER_TASK, self.message_seconds, lambda: self._dispatch(qs.PlaceholderReverted())
        )
