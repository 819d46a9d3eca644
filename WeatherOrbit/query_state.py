"""Query controller state and its pure transition function."""
from dataclasses import dataclass, asdict, replace
from typing import Optional, Tuple
from history_cache import HistoryEntry
from navigator import NO_SELECTION, ListItem, build_combined_list
from weather_data import WeatherSnapshot

IDLE = "idle"
LOADING = "loading"
ERROR = "error"
INFO = "info"

DEFAULT_PLACEHOLDER = "Enter city..."
LOADING_PLACEHOLDER = "Fetching data..."
ERROR_PLACEHOLDER = "Try another city?"
NOT_FOUND_MESSAGE = "City not found"


@dataclass(frozen=True)
class LifecycleState:
    """Request lifecycle: exactly one of idle, loading, error(message), info(message)."""
    kind: str = IDLE
    message: str = ""

    @property
    def is_idle(self) -> bool:
        return self.kind == IDLE

    @property
    def is_loading(self) -> bool:
        return self.kind == LOADING

    @property
    def is_error(self) -> bool:
        return self.kind == ERROR

    @property
    def is_info(self) -> bool:
        return self.kind == INFO


IDLE_STATE = LifecycleState(IDLE)
LOADING_STATE = LifecycleState(LOADING)


def error_state(message: str) -> LifecycleState:
    return LifecycleState(ERROR, message)


def info_state(message: str) -> LifecycleState:
    return LifecycleState(INFO, message)


@dataclass(frozen=True)
class ControllerState:
    """Everything the presentation layer renders. Replaced, never mutated."""
    query: str = ""
    lifecycle: LifecycleState = IDLE_STATE
    placeholder: str = DEFAULT_PLACEHOLDER
    suggestions: Tuple[str, ...] = ()
    history: Tuple[HistoryEntry, ...] = ()
    list_visible: bool = False
    cursor: int = NO_SELECTION
    snapshot: Optional[WeatherSnapshot] = None
    result_in_view: bool = False

    @property
    def combined_list(self) -> Tuple[ListItem, ...]:
        return build_combined_list(self.suggestions, self.history)

    @property
    def selected_item(self) -> Optional[ListItem]:
        items = self.combined_list
        if 0 <= self.cursor < len(items):
            return items[self.cursor]
        return None

    @property
    def show_empty_hint(self) -> bool:
        """True when an open list would be empty ("No recent searches")."""
        return (
            self.list_visible
            and not self.lifecycle.is_loading
            and not self.lifecycle.is_error
            and not self.history
            and not self.suggestions
        )

    def to_dict(self) -> dict:
        return asdict(self)


# Events. Each one is a discrete thing that happened; reduce() says what it means.

@dataclass(frozen=True)
class InputChanged:
    text: str


@dataclass(frozen=True)
class InputClicked:
    pass


@dataclass(frozen=True)
class SuggestionsArrived:
    labels: Tuple[str, ...]


@dataclass(frozen=True)
class ListShown:
    pass


@dataclass(frozen=True)
class ListHidden:
    pass


@dataclass(frozen=True)
class CursorMoved:
    cursor: int


@dataclass(frozen=True)
class HistoryChanged:
    entries: Tuple[HistoryEntry, ...]


@dataclass(frozen=True)
class HistoryCleared:
    pass


@dataclass(frozen=True)
class PlaceChosen:
    label: str


@dataclass(frozen=True)
class SubmitStarted:
    place: str


@dataclass(frozen=True)
class WeatherLoaded:
    snapshot: WeatherSnapshot


@dataclass(frozen=True)
class WeatherNotFound:
    message: str = NOT_FOUND_MESSAGE


@dataclass(frozen=True)
class WeatherFailed:
    message: str


@dataclass(frozen=True)
class LoadingFinished:
    pass


@dataclass(frozen=True)
class ErrorAutoCleared:
    pass


@dataclass(frozen=True)
class InfoShown:
    message: str


@dataclass(frozen=True)
class PlaceholderReverted:
    pass


@dataclass(frozen=True)
class ResultRevealed:
    pass


@dataclass(frozen=True)
class Reset:
    pass


def _settled(state: ControllerState) -> LifecycleState:
    """Lifecycle after dismissing error/info; a running request keeps loading."""
    if state.lifecycle.is_loading:
        return state.lifecycle
    return IDLE_STATE


def reduce(state: ControllerState, event) -> ControllerState:
    """
    Apply one event to the state and return the new state.

    Pure: no timers, no I/O. Anything that changes the suggestions, the
    history or list visibility resets the cursor.
    """
    if isinstance(event, InputChanged):
        lifecycle = _settled(state)
        return replace(
            state,
            query=event.text,
            lifecycle=lifecycle,
            placeholder=state.placeholder if lifecycle.is_loading else DEFAULT_PLACEHOLDER,
            list_visible=True,
            cursor=NO_SELECTION,
        )

    if isinstance(event, InputClicked):
        if not state.query.strip():
            return state
        return replace(state, query="", suggestions=(), list_visible=True, cursor=NO_SELECTION)

    if isinstance(event, SuggestionsArrived):
        labels = tuple(event.labels)
        return replace(state, suggestions=labels, list_visible=bool(labels), cursor=NO_SELECTION)

    if isinstance(event, ListShown):
        return replace(state, list_visible=True, cursor=NO_SELECTION)

    if isinstance(event, ListHidden):
        return replace(state, list_visible=False, cursor=NO_SELECTION)

    if isinstance(event, CursorMoved):
        return replace(state, cursor=event.cursor)

    if isinstance(event, HistoryChanged):
        return replace(state, history=tuple(event.entries), cursor=NO_SELECTION)

    if isinstance(event, HistoryCleared):
        return replace(
            state,
            history=(),
            query="",
            suggestions=(),
            list_visible=False,
            cursor=NO_SELECTION,
        )

    if isinstance(event, PlaceChosen):
        return replace(state, query=event.label, suggestions=(), list_visible=False, cursor=NO_SELECTION)

    if isinstance(event, SubmitStarted):
        return replace(
            state,
            lifecycle=LOADING_STATE,
            placeholder=LOADING_PLACEHOLDER,
            list_visible=False,
            cursor=NO_SELECTION,
            result_in_view=False,
        )

    if isinstance(event, WeatherLoaded):
        return replace(
            state,
            snapshot=event.snapshot,
            lifecycle=IDLE_STATE,
            placeholder=DEFAULT_PLACEHOLDER,
            list_visible=False,
            cursor=NO_SELECTION,
        )

    if isinstance(event, WeatherNotFound):
        return replace(state, lifecycle=error_state(event.message), placeholder=ERROR_PLACEHOLDER)

    if isinstance(event, WeatherFailed):
        return replace(state, lifecycle=error_state(event.message), placeholder=ERROR_PLACEHOLDER, query="")

    if isinstance(event, LoadingFinished):
        if not state.lifecycle.is_loading:
            return state
        return replace(state, lifecycle=IDLE_STATE, placeholder=DEFAULT_PLACEHOLDER)

    if isinstance(event, ErrorAutoCleared):
        return replace(state, lifecycle=_settled(state), query="")

    if isinstance(event, InfoShown):
        return replace(state, lifecycle=info_state(event.message), placeholder=event.message)

    if isinstance(event, PlaceholderReverted):
        if state.lifecycle.is_loading:
            return state
        return replace(state, placeholder=DEFAULT_PLACEHOLDER)

    if isinstance(event, ResultRevealed):
        return replace(state, result_in_view=True)

    if isinstance(event, Reset):
        lifecycle = _settled(state)
        return replace(
            state,
            query="",
            lifecycle=lifecycle,
            placeholder=state.placeholder if lifecycle.is_loading else DEFAULT_PLACEHOLDER,
        )

    raise TypeError(f"Unknown event: {event!r}")
