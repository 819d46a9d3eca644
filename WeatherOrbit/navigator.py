"""Combined suggestion/history list and keyboard navigation - pure functions for testability."""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
from history_cache import HistoryEntry

NO_SELECTION = -1

KEY_DOWN = "ArrowDown"
KEY_UP = "ArrowUp"
KEY_ENTER = "Enter"
KEY_ESCAPE = "Escape"
KEY_BACKSPACE = "Backspace"

_KEY_ALIASES = {
    "Down": KEY_DOWN,
    "Up": KEY_UP,
    "Return": KEY_ENTER,
    "Esc": KEY_ESCAPE,
}

DIVIDER_LABEL = "Recent Searches"
CLEAR_LABEL = "Clear History"


@dataclass(frozen=True)
class ListItem:
    """One row of the combined list. Only the subclasses below are ever built."""
    label: str


@dataclass(frozen=True)
class SuggestionItem(ListItem):
    pass


@dataclass(frozen=True)
class DividerItem(ListItem):
    label: str = DIVIDER_LABEL


@dataclass(frozen=True)
class HistoryItem(ListItem):
    entry: Optional[HistoryEntry] = None


@dataclass(frozen=True)
class ClearAction(ListItem):
    label: str = CLEAR_LABEL


def build_combined_list(
    suggestions: Sequence[str],
    history: Sequence[HistoryEntry]
) -> Tuple[ListItem, ...]:
    """
    Merge live suggestions and history into one list.

    Suggestions come first; when history is non-empty they are followed by a
    divider, the history entries and a trailing clear action.
    """
    items = [SuggestionItem(label=s) for s in suggestions]
    if history:
        items.append(DividerItem())
        items.extend(HistoryItem(label=e.place_label, entry=e) for e in history)
        items.append(ClearAction())
    return tuple(items)


def move_cursor(cursor: int, step: int, length: int) -> int:
    """
    Move the selection circularly by step (+1 down, -1 up).

    With no selection, down lands on the first item and up on the last.
    """
    if length <= 0:
        return NO_SELECTION
    if cursor == NO_SELECTION or not 0 <= cursor < length:
        return 0 if step > 0 else length - 1
    return (cursor + step + length) % length


def normalize_key(key: str) -> str:
    return _KEY_ALIASES.get(key, key)


@dataclass(frozen=True)
class KeyAction:
    """What a key press asks the controller to do."""
    kind: str
    cursor: int = NO_SELECTION
    text: str = ""

    NONE = "none"
    MOVE = "move"
    SUBMIT = "submit"
    CHOOSE = "choose"
    CLEAR_HISTORY = "clear-history"
    HIDE = "hide"


def item_action(item: Optional[ListItem]) -> KeyAction:
    """Action for activating an item with Enter or a click."""
    if item is None or isinstance(item, DividerItem):
        return KeyAction(KeyAction.NONE)
    if isinstance(item, ClearAction):
        return KeyAction(KeyAction.CLEAR_HISTORY)
    if isinstance(item, (SuggestionItem, HistoryItem)):
        return KeyAction(KeyAction.CHOOSE, text=item.label)
    raise TypeError(f"Unknown list item: {item!r}")


def resolve_key(
    key: str,
    cursor: int,
    items: Sequence[ListItem],
    list_visible: bool,
    query: str
) -> KeyAction:
    """
    Decide what a key press means for the current list and query.

    Args:
        key: Key name ("ArrowDown", "ArrowUp", "Enter", "Escape", "Backspace"; short aliases accepted)
        cursor: Current selection index or NO_SELECTION
        items: Current combined list
        list_visible: Whether the list is shown
        query: Current raw query text

    Returns:
        KeyAction for the controller to carry out
    """
    key = normalize_key(key)
    has_list = list_visible and len(items) > 0

    if key == KEY_ENTER and not has_list and query.strip():
        return KeyAction(KeyAction.SUBMIT, text=query)

    if key == KEY_ESCAPE or (key == KEY_BACKSPACE and not query.strip()):
        return KeyAction(KeyAction.HIDE)

    if not has_list:
        return KeyAction(KeyAction.NONE)

    if key == KEY_DOWN:
        return KeyAction(KeyAction.MOVE, cursor=move_cursor(cursor, 1, len(items)))
    if key == KEY_UP:
        return KeyAction(KeyAction.MOVE, cursor=move_cursor(cursor, -1, len(items)))

    if key == KEY_ENTER:
        if cursor == NO_SELECTION and query.strip():
            return KeyAction(KeyAction.SUBMIT, text=query)
        chosen = items[cursor] if 0 <= cursor < len(items) else None
        return item_action(chosen)

    return KeyAction(KeyAction.NONE)
