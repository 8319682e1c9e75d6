"""Navigation state, history bridging and the persisted tab preference."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from cafe_checkin.schema import TABS, FlowState, Screen, Tab

logger = logging.getLogger(__name__)

ACTIVE_TAB_KEY = "coffeeapp.activeTab"
DEFAULT_TAB: Tab = "map"

HistoryState = dict[str, str]
PopHandler = Callable[[Mapping[str, Any] | None], None]


class NavigationHistory(ABC):
    """Back/forward stack the navigation state is mirrored onto."""

    @abstractmethod
    def push(self, state: HistoryState) -> None:
        pass

    @abstractmethod
    def on_popped(self, handler: PopHandler) -> None:
        """Register a handler called with the state of the entry moved to."""
        pass


class MemoryHistory(NavigationHistory):
    """History stack kept in memory, starting with a single empty entry."""

    def __init__(self) -> None:
        self._entries: list[HistoryState | None] = [None]
        self._index = 0
        self._handlers: list[PopHandler] = []

    @property
    def entries(self) -> list[HistoryState | None]:
        return [dict(entry) if entry is not None else None for entry in self._entries]

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> HistoryState | None:
        entry = self._entries[self._index]
        return dict(entry) if entry is not None else None

    def push(self, state: HistoryState) -> None:
        del self._entries[self._index + 1 :]
        self._entries.append(dict(state))
        self._index += 1

    def on_popped(self, handler: PopHandler) -> None:
        self._handlers.append(handler)

    def back(self) -> bool:
        if self._index == 0:
            return False
        self._index -= 1
        self._emit()
        return True

    def forward(self) -> bool:
        if self._index >= len(self._entries) - 1:
            return False
        self._index += 1
        self._emit()
        return True

    def _emit(self) -> None:
        for handler in self._handlers:
            handler(self.current)


class PreferenceStore(ABC):
    """Key-value slot for UI preferences that survive restarts."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass


class MemoryPreferences(PreferenceStore):
    def __init__(self, values: dict[str, str] | None = None):
        self.values: dict[str, str] = dict(values or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class JsonFilePreferences(PreferenceStore):
    """Preferences stored as a flat JSON object in a file.

    Unreadable files behave as empty and failed writes are only logged;
    a preference must never break navigation.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            logger.warning("failed to write preferences to %s: %s", self.path, exc)

    def _read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.debug("ignoring unreadable preferences %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}


class NavigationController:
    """Active tab and open detail screen, mirrored onto a history stack.

    At most one detail screen (café or bean) is open at a time. States
    coming back from the history stack are applied without pushing, so
    replaying an entry never grows the stack.
    """

    def __init__(self, history: NavigationHistory, preferences: PreferenceStore):
        self.history = history
        self.preferences = preferences
        self._active_tab: Tab = self._restore_tab()
        self._cafe_detail_id: str | None = None
        self._bean_detail_id: str | None = None
        self._selected_cafe_id: str | None = None
        self._current_entry: HistoryState | None = None
        history.on_popped(self.apply_history_state)

    @property
    def active_tab(self) -> Tab:
        return self._active_tab

    @property
    def cafe_detail_id(self) -> str | None:
        return self._cafe_detail_id

    @property
    def bean_detail_id(self) -> str | None:
        return self._bean_detail_id

    @property
    def selected_cafe_id(self) -> str | None:
        return self._selected_cafe_id

    def select_tab(self, tab: Tab) -> None:
        if tab not in TABS:
            raise ValueError(f"Unsupported tab: {tab}")
        self._cafe_detail_id = None
        self._bean_detail_id = None
        self._set_tab(tab)
        if tab == "history":
            self._push({"view": "history"})
        else:
            # the shown screen no longer matches any history entry
            self._current_entry = None

    def open_cafe(self, cafe_id: str | None) -> None:
        self._bean_detail_id = None
        self._cafe_detail_id = cafe_id or None
        self._push({"view": "cafe", "id": cafe_id} if cafe_id else {"view": "map"})

    def open_bean(self, bean_id: str | None) -> None:
        self._cafe_detail_id = None
        self._bean_detail_id = bean_id or None
        self._push({"view": "bean", "id": bean_id} if bean_id else {"view": "map"})

    def select_cafe(self, cafe_id: str | None) -> None:
        self._selected_cafe_id = cafe_id or None

    def apply_history_state(self, state: Mapping[str, Any] | None) -> None:
        """Translate a history entry back into navigation state."""
        state = state if isinstance(state, Mapping) else {}
        view = state.get("view")
        item_id = state.get("id") if isinstance(state.get("id"), str) else None

        if view == "cafe" and item_id:
            self._bean_detail_id = None
            self._cafe_detail_id = item_id
            self._selected_cafe_id = item_id
            self._set_tab("map")
            self._current_entry = {"view": "cafe", "id": item_id}
        elif view == "bean" and item_id:
            self._cafe_detail_id = None
            self._bean_detail_id = item_id
            self._current_entry = {"view": "bean", "id": item_id}
        elif view == "history":
            self._cafe_detail_id = None
            self._bean_detail_id = None
            self._set_tab("history")
            self._current_entry = {"view": "history"}
        else:
            self._cafe_detail_id = None
            self._bean_detail_id = None
            self._set_tab(DEFAULT_TAB)
            self._current_entry = {"view": "map"}

    def resolve_screen(self, flow: FlowState) -> Screen:
        """Pick the screen to render: flow, then bean, then café, then tab."""
        if flow.active:
            item_id = flow.bean_id if flow.step == "brew-order" else flow.cafe_id
            return Screen(kind=flow.step, id=item_id)
        if self._bean_detail_id:
            return Screen(kind="bean-detail", id=self._bean_detail_id)
        if self._cafe_detail_id:
            return Screen(kind="cafe-detail", id=self._cafe_detail_id)
        # the scan tab has no content of its own outside the flow
        if self._active_tab in ("map", "scan"):
            return Screen(kind="map", id=self._selected_cafe_id)
        return Screen(kind=self._active_tab)

    def _push(self, entry: HistoryState) -> None:
        if entry == self._current_entry:
            return
        self.history.push(dict(entry))
        self._current_entry = entry

    def _set_tab(self, tab: Tab) -> None:
        self._active_tab = tab
        self.preferences.set(ACTIVE_TAB_KEY, tab)

    def _restore_tab(self) -> Tab:
        value = self.preferences.get(ACTIVE_TAB_KEY)
        if value in TABS:
            return value
        return DEFAULT_TAB
