"""Recent-search history - bounded, deduplicated, newest first, written through to a key-value store."""
import json
import logging
from dataclasses import dataclass, asdict
from typing import List, Optional, Tuple
from kv_store import KeyValueStore

MAX_HISTORY = 5
HISTORY_KEY = "weatherHistory"
LAST_PLACE_KEY = "lastCity"


@dataclass(frozen=True)
class HistoryEntry:
    """One remembered lookup. place_label is the case-insensitive key."""
    place_label: str
    last_temperature_c: Optional[float] = None
    condition_icon: Optional[str] = None
    last_queried_at: str = ""

    @property
    def key(self) -> str:
        return self.place_label.casefold()

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data) -> "HistoryEntry":
        """
        Build an entry from persisted data.

        Plain strings are accepted as well; older saves stored only the label.

        Raises:
            ValueError: If data cannot be turned into an entry
        """
        if isinstance(data, str):
            if not data.strip():
                raise ValueError("empty place label")
            return cls(place_label=data)
        if not isinstance(data, dict):
            raise ValueError(f"unexpected history item: {data!r}")

        label = data.get("place_label")
        if not isinstance(label, str) or not label.strip():
            raise ValueError("history item without place_label")
        temp = data.get("last_temperature_c")
        if temp is not None and not isinstance(temp, (int, float)):
            raise ValueError(f"bad temperature: {temp!r}")
        icon = data.get("condition_icon")
        queried_at = data.get("last_queried_at") or ""
        return cls(
            place_label=label,
            last_temperature_c=temp,
            condition_icon=icon if isinstance(icon, str) else None,
            last_queried_at=str(queried_at),
        )


class HistoryCache:
    """
    Write-through cache of recent lookups.

    The in-memory list always holds at most max_entries entries, no two with
    the same case-insensitive label, newest first. Every mutation is saved
    immediately.
    """

    def __init__(self, store: KeyValueStore, max_entries: int = MAX_HISTORY):
        self.store = store
        self.max_entries = max_entries
        self._entries: List[HistoryEntry] = []

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def load(self) -> Tuple[HistoryEntry, ...]:
        """Replace the in-memory list with the persisted one. Malformed data loads as empty."""
        raw = self.store.get(HISTORY_KEY)
        self._entries = self._decode(raw) if raw else []
        logging.debug(f"Loaded {len(self._entries)} history entries")
        return self.entries

    def _decode(self, raw: str) -> List[HistoryEntry]:
        try:
            data = json.loads(raw)
        except ValueError as e:
            logging.warning(f"Discarding malformed history: {e}")
            return []
        if not isinstance(data, list):
            logging.warning("Discarding malformed history: expected a list")
            return []

        entries: List[HistoryEntry] = []
        seen = set()
        for item in data:
            try:
                entry = HistoryEntry.from_dict(item)
            except ValueError as e:
                logging.warning(f"Skipping history item: {e}")
                continue
            if entry.key in seen:
                continue
            seen.add(entry.key)
            entries.append(entry)
        return entries[:self.max_entries]

    def save(self) -> None:
        self.store.set(HISTORY_KEY, json.dumps([e.to_dict() for e in self._entries]))

    def upsert(self, entry: HistoryEntry) -> Tuple[HistoryEntry, ...]:
        """Insert entry at the front, dropping any same-label entry and the overflow."""
        if not entry.place_label.strip():
            return self.entries
        remaining = [e for e in self._entries if e.key != entry.key]
        self._entries = [entry] + remaining
        if len(self._entries) > self.max_entries:
            evicted = self._entries[self.max_entries:]
            logging.debug(f"Evicting history entries: {[e.place_label for e in evicted]}")
            self._entries = self._entries[:self.max_entries]
        self.save()
        return self.entries

    def clear(self) -> None:
        self._entries = []
        self.store.delete(HISTORY_KEY)
        logging.info("History cleared")

    def load_last_place(self) -> Optional[str]:
        place = self.store.get(LAST_PLACE_KEY)
        if place and place.strip():
            return place
        return None

    def save_last_place(self, place: str) -> None:
        self.store.set(LAST_PLACE_KEY, place)
