"""
View-state controller: what the user is currently looking at.

The controller is the single owner of the active tags, the raw search
text, the base mode (landing or listing) and the selected mod. While a mod
is selected the controller reports the ``detail`` mode; clearing the
selection reveals whichever base mode was active underneath.

Operations are synchronous. Their only side effects are notifying change
listeners (the URL sync protocol is one) and asking the ``Viewport`` to
scroll smoothly to the top of the main content region.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from ..config import SCROLL_BUFFER
from .query import dedupe_tags, normalize_query
from .schemas import Mod

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    LANDING = "landing"
    LISTING = "listing"
    DETAIL = "detail"


class Viewport(Protocol):
    """The host environment's scrollable window."""

    content_top: int

    def smooth_scroll_to(self, offset: int) -> None: ...


class RecordingViewport:
    """Viewport that remembers scroll requests instead of performing them.

    Used by the HTTP service, which hands the last offset back to the
    client, and by the tests.
    """

    def __init__(self, content_top: int = 0):
        self.content_top = content_top
        self.requests: List[int] = []

    def smooth_scroll_to(self, offset: int) -> None:
        self.requests.append(offset)

    @property
    def last_request(self) -> Optional[int]:
        return self.requests[-1] if self.requests else None


def scroll_offset(content_top: int, buffer: int = SCROLL_BUFFER) -> int:
    return max(0, content_top - buffer)


ChangeListener = Callable[["ViewStateController"], None]


class ViewStateController:
    def __init__(self, viewport: Optional[Viewport] = None):
        self._viewport = viewport
        self._active_tags: List[str] = []
        self._search_text = ""
        self._base_mode = ViewMode.LANDING
        self._selected_id: Optional[str] = None
        self._listeners: List[ChangeListener] = []

    # -- read access --------------------------------------------------------

    @property
    def active_tags(self) -> List[str]:
        return list(self._active_tags)

    @property
    def search_text(self) -> str:
        return self._search_text

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def base_mode(self) -> ViewMode:
        return self._base_mode

    @property
    def mode(self) -> ViewMode:
        if self._selected_id is not None:
            return ViewMode.DETAIL
        return self._base_mode

    @property
    def has_filters(self) -> bool:
        return bool(self._active_tags) or bool(normalize_query(self._search_text))

    @property
    def listing_visible(self) -> bool:
        return self._base_mode is ViewMode.LISTING and self._selected_id is None

    def resolve_mode(self, collection: Sequence[Mod]) -> ViewMode:
        """Mode to render against ``collection``.

        A selection whose id is no longer in the collection is treated as
        no selection.
        """
        if self._selected_id is not None and self.find_selected(collection) is not None:
            return ViewMode.DETAIL
        return self._base_mode

    def find_selected(self, collection: Sequence[Mod]) -> Optional[Mod]:
        if self._selected_id is None:
            return None
        return next((m for m in collection if m.id == self._selected_id), None)

    def snapshot(self) -> Tuple[Tuple[str, ...], str, ViewMode, Optional[str]]:
        return (tuple(self._active_tags), self._search_text, self.mode, self._selected_id)

    # -- listeners ----------------------------------------------------------

    def add_listener(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify_if_changed(self, before) -> None:
        if self.snapshot() == before:
            return
        for listener in list(self._listeners):
            listener(self)

    def scroll_to_content_top(self) -> None:
        if self._viewport is None:
            return
        self._viewport.smooth_scroll_to(scroll_offset(self._viewport.content_top))

    # -- navigation ---------------------------------------------------------

    def select(self, mod: Mod) -> None:
        before = self.snapshot()
        self._selected_id = mod.id
        self.scroll_to_content_top()
        self._notify_if_changed(before)

    def go_home(self) -> None:
        before = self.snapshot()
        self._selected_id = None
        self._base_mode = ViewMode.LANDING
        self._notify_if_changed(before)

    def open_listing(self) -> None:
        before = self.snapshot()
        self._base_mode = ViewMode.LISTING
        self._selected_id = None
        self.scroll_to_content_top()
        self._notify_if_changed(before)

    def close_listing(self) -> None:
        before = self.snapshot()
        self._base_mode = ViewMode.LANDING
        self.scroll_to_content_top()
        self._notify_if_changed(before)

    # -- filters ------------------------------------------------------------

    def toggle_tag(self, tag: str) -> None:
        tag = tag.strip()
        if not tag:
            return
        before = self.snapshot()
        key = tag.lower()
        if any(t.lower() == key for t in self._active_tags):
            next_tags = [t for t in self._active_tags if t.lower() != key]
        else:
            next_tags = self._active_tags + [tag]
        self._active_tags = next_tags

        will_show_listing = bool(next_tags) or bool(normalize_query(self._search_text))
        had_selection = self._selected_id is not None
        should_scroll = (not self.listing_visible and will_show_listing) or had_selection

        if will_show_listing:
            self._base_mode = ViewMode.LISTING
        if had_selection:
            self._selected_id = None
        if should_scroll:
            self.scroll_to_content_top()
        self._notify_if_changed(before)

    def set_search_text(self, value: str) -> None:
        before = self.snapshot()
        self._search_text = value
        self._notify_if_changed(before)

    def submit_search(self) -> None:
        if not normalize_query(self._search_text):
            return
        before = self.snapshot()
        self._base_mode = ViewMode.LISTING
        self._selected_id = None
        self.scroll_to_content_top()
        self._notify_if_changed(before)

    def clear_tag(self, tag: str) -> None:
        before = self.snapshot()
        key = tag.strip().lower()
        self._active_tags = [t for t in self._active_tags if t.lower() != key]
        self._notify_if_changed(before)

    def clear_all_tags(self) -> None:
        before = self.snapshot()
        self._active_tags = []
        self._notify_if_changed(before)

    def clear_search(self) -> None:
        before = self.snapshot()
        self._search_text = ""
        self._notify_if_changed(before)

    def clear_all_filters(self) -> None:
        before = self.snapshot()
        self._active_tags = []
        self._search_text = ""
        self._notify_if_changed(before)

    # -- hydration ----------------------------------------------------------

    def hydrate(
        self,
        tags: Sequence[str],
        search_text: str,
        base_mode: Optional[ViewMode] = None,
        selected_id: Optional[str] = None,
    ) -> None:
        """Replace the filter state in one step.

        ``base_mode`` of ``None`` leaves the current base mode unchanged.
        Listeners are notified at most once.
        """
        if base_mode is ViewMode.DETAIL:
            raise ValueError("detail is not a base mode")
        before = self.snapshot()
        self._active_tags = dedupe_tags(t for t in tags if t)
        self._search_text = search_text
        if base_mode is not None:
            self._base_mode = base_mode
        self._selected_id = selected_id or None
        logger.debug("Hydrated view state: %s", self.snapshot())
        self._notify_if_changed(before)


def apply_action(controller: ViewStateController, action: str, value: Optional[str] = None,
                 collection: Sequence[Mod] = ()) -> None:
    """Dispatch a named action onto ``controller``.

    ``select`` looks the mod up in ``collection``; every action that takes
    an argument raises ``ValueError`` when ``value`` is missing.
    """
    if action in ("toggle_tag", "clear_tag", "set_search_text", "select") and value is None:
        raise ValueError(f"Action {action!r} requires a value")

    if action == "select":
        mod = next((m for m in collection if m.id == value), None)
        if mod is None:
            raise LookupError(value)
        controller.select(mod)
    elif action == "toggle_tag":
        controller.toggle_tag(value)
    elif action == "clear_tag":
        controller.clear_tag(value)
    elif action == "set_search_text":
        controller.set_search_text(value)
    elif action in _NO_ARG_ACTIONS:
        getattr(controller, action)()
    else:
        raise ValueError(f"Unknown action {action!r}")


_NO_ARG_ACTIONS = {
    "go_home",
    "open_listing",
    "close_listing",
    "submit_search",
    "clear_all_tags",
    "clear_search",
    "clear_all_filters",
}
