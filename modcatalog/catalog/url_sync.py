"""
Keeps the shareable query string and the view-state controller in step.

Query parameters
----------------
``tags``
    Comma separated tag list. Commas are written unescaped.
``q``
    Free-text query, form encoded.
``view``
    ``discover`` for the listing, ``home`` for the landing page. ``home``
    is only written when filters are active, because a bare filter implies
    the listing on the way back in.
``mod``
    Id of the mod shown in the detail view.

Hydration always runs to completion before the first write-back; until
then the controller may still hold defaults and writing them out would
wipe the incoming URL. Write-backs replace the current history entry, so
filtering never adds entries to the back button. Only real navigation
(popstate) triggers a fresh hydration.
"""

from __future__ import annotations

import logging
import urllib.parse
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .query import dedupe_tags
from .view_state import ViewMode, ViewStateController

logger = logging.getLogger(__name__)

VIEW_DISCOVER = "discover"
VIEW_HOME = "home"


@dataclass
class UrlState:
    tags: List[str] = field(default_factory=list)
    query: str = ""
    base_mode: Optional[ViewMode] = None
    selected_id: Optional[str] = None


def parse_query_string(search: str) -> UrlState:
    """Parse ``search`` (with or without its leading ``?``).

    Unparseable input degrades to an empty ``UrlState``, which leaves the
    controller's mode unchanged.
    """
    try:
        params = urllib.parse.parse_qs((search or "").lstrip("?"), keep_blank_values=True)
    except (TypeError, ValueError) as exc:
        logger.warning("Ignoring malformed query string %r: %s", search, exc)
        return UrlState()

    def first(name: str) -> Optional[str]:
        values = params.get(name)
        return values[0] if values else None

    tags_param = first("tags") or ""
    tags = dedupe_tags(t.strip() for t in tags_param.split(",") if t.strip())
    query = first("q") or ""
    view = first("view")

    # An explicit view=home wins even when filters are present.
    if view == VIEW_HOME:
        base_mode: Optional[ViewMode] = ViewMode.LANDING
    elif view == VIEW_DISCOVER or tags or query.strip():
        base_mode = ViewMode.LISTING
    else:
        base_mode = None

    return UrlState(
        tags=tags,
        query=query,
        base_mode=base_mode,
        selected_id=first("mod") or None,
    )


def serialize_state(controller: ViewStateController) -> str:
    """Return the query string (without ``?``) for the controller state."""
    params = []
    tags = controller.active_tags
    if tags:
        params.append(("tags", ",".join(tags)))
    query = controller.search_text.strip()
    if query:
        params.append(("q", query))

    mode = controller.mode
    if mode is ViewMode.LISTING:
        params.append(("view", VIEW_DISCOVER))
    elif mode is ViewMode.LANDING and controller.has_filters:
        params.append(("view", VIEW_HOME))
    elif mode is ViewMode.DETAIL:
        params.append(("mod", controller.selected_id))

    return urllib.parse.urlencode(params, safe=",")


class History:
    """Minimal browser history: a path, a query string and popstate.

    ``push`` and ``back`` simulate real navigation and fire the popstate
    listeners. ``replace_state`` swaps the current entry silently.
    """

    def __init__(self, url: str = "/"):
        self._entries: List[str] = [url]
        self._index = 0
        self._popstate_listeners: List[Callable[[], None]] = []

    @property
    def url(self) -> str:
        return self._entries[self._index]

    @property
    def pathname(self) -> str:
        return urllib.parse.urlsplit(self.url).path or "/"

    @property
    def search(self) -> str:
        query = urllib.parse.urlsplit(self.url).query
        return f"?{query}" if query else ""

    @property
    def length(self) -> int:
        return len(self._entries)

    def replace_state(self, url: str) -> None:
        self._entries[self._index] = url

    def push(self, url: str) -> None:
        del self._entries[self._index + 1:]
        self._entries.append(url)
        self._index += 1
        self._fire_popstate()

    def back(self) -> None:
        if self._index == 0:
            return
        self._index -= 1
        self._fire_popstate()

    def forward(self) -> None:
        if self._index >= len(self._entries) - 1:
            return
        self._index += 1
        self._fire_popstate()

    def add_popstate_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._popstate_listeners.append(listener)

        def remove() -> None:
            if listener in self._popstate_listeners:
                self._popstate_listeners.remove(listener)

        return remove

    def _fire_popstate(self) -> None:
        for listener in list(self._popstate_listeners):
            listener()


class UrlSync:
    def __init__(self, controller: ViewStateController, history: History):
        self.controller = controller
        self.history = history
        self.synced = False
        self._detach: List[Callable[[], None]] = []

    def start(self) -> None:
        """Hydrate from the current URL, then enable write-back."""
        if self._detach:
            return
        self.hydrate()
        self.synced = True
        self._detach.append(self.history.add_popstate_listener(self.hydrate))
        self._detach.append(self.controller.add_listener(self._on_change))

    def stop(self) -> None:
        while self._detach:
            self._detach.pop()()

    def hydrate(self) -> None:
        state = parse_query_string(self.history.search)
        self.controller.hydrate(state.tags, state.query, state.base_mode, state.selected_id)
        # Canonicalize what navigation brought in. Skipped on startup.
        if self.synced:
            self.write_back()

    def write_back(self) -> None:
        if not self.synced:
            return
        query_string = serialize_state(self.controller)
        path = self.history.pathname
        self.history.replace_state(f"{path}?{query_string}" if query_string else path)

    def _on_change(self, _controller: ViewStateController) -> None:
        self.write_back()

    @property
    def location(self) -> str:
        return self.history.search
