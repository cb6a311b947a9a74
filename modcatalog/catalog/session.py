"""
Composition of the catalogue core.

``CatalogState`` is the process-wide part: it owns the store
subscription, merges every snapshot with the download ledger and exposes
the increment and mutation operations. ``ViewSession`` is the per-client
part: a view-state controller kept in step with a URL, rendered against a
``CatalogState`` into a ``CatalogPage``.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..exceptions import CatalogStoreError
from ..models import ModInput, ModUpdate
from ..storage import DownloadLedger
from .formatting import developer_links, format_game_version, hero_stats
from .query import build_views, normalize_query, tag_universe
from .schemas import CatalogPage, Mod
from .store import ModStore
from .url_sync import History, UrlSync
from .view_state import RecordingViewport, ViewMode, ViewStateController, Viewport

logger = logging.getLogger(__name__)


class CatalogState:
    def __init__(self, store: ModStore, ledger: DownloadLedger, initial: Optional[List[Mod]] = None):
        self.store = store
        self.ledger = ledger
        self.loading = True
        self.error: Optional[str] = None
        self._remote: List[Mod] = list(initial or [])
        self.collection: List[Mod] = list(self._remote)
        self._unsubscribe: Optional[Callable[[], None]] = None

    def start(self) -> None:
        """Restore the ledger, then subscribe to the store."""
        if self._unsubscribe is not None:
            return
        self.ledger.load()
        self._refresh()
        self._unsubscribe = self.store.subscribe(self._on_snapshot, self._on_error)

    def close(self) -> None:
        if self._unsubscribe is None:
            return
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        unsubscribe()

    def __enter__(self) -> "CatalogState":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    def _on_snapshot(self, mods: List[Mod]) -> None:
        self._remote = list(mods)
        self.loading = False
        self._refresh()

    def _on_error(self, exc: Exception) -> None:
        # Keep serving the last snapshot.
        logger.warning("Failed to load mods from the store: %s", exc)
        self.error = str(exc) or "Failed to load mods"
        self.loading = False

    def _refresh(self) -> None:
        self.collection = self.ledger.apply(self._remote)

    def get(self, mod_id: str) -> Optional[Mod]:
        return next((m for m in self.collection if m.id == mod_id), None)

    def increment_download(self, mod_id: str) -> int:
        current = self.get(mod_id)
        next_count = current.downloads + 1 if current is not None else 1
        self.collection = [
            m.model_copy(update={"downloads": next_count}) if m.id == mod_id else m
            for m in self.collection
        ]
        self.ledger.record(mod_id, next_count)
        return next_count

    # -- store mutations ----------------------------------------------------

    def _mutate(self, description: str, operation: Callable[[], object]):
        self.error = None
        try:
            return operation()
        except CatalogStoreError as exc:
            logger.warning("Failed to %s: %s", description, exc)
            self.error = str(exc)
            raise

    def create_mod(self, data: ModInput) -> str:
        return self._mutate("create mod", lambda: self.store.create(data))

    def update_mod(self, mod_id: str, updates: ModUpdate) -> None:
        self._mutate(f"update mod {mod_id}", lambda: self.store.update(mod_id, updates))

    def delete_mod(self, mod_id: str) -> bool:
        return self._mutate(f"delete mod {mod_id}", lambda: self.store.delete(mod_id))


class ViewSession:
    """One client's view of the catalogue, addressed by a URL."""

    def __init__(self, history: Optional[History] = None, viewport: Optional[Viewport] = None):
        self.history = history or History()
        self.viewport = viewport if viewport is not None else RecordingViewport()
        self.controller = ViewStateController(self.viewport)
        self.url_sync = UrlSync(self.controller, self.history)

    @classmethod
    def from_location(cls, location: str, content_top: int = 0) -> "ViewSession":
        location = location or ""
        if location and not location.startswith("?"):
            location = f"?{location}"
        session = cls(History(f"/{location}"), RecordingViewport(content_top))
        session.start()
        # Hand the canonical form back to the client.
        session.url_sync.write_back()
        return session

    def start(self) -> None:
        self.url_sync.start()

    def stop(self) -> None:
        self.url_sync.stop()

    @property
    def location(self) -> str:
        return self.url_sync.location

    def render(self, catalog: CatalogState) -> CatalogPage:
        collection = catalog.collection
        controller = self.controller
        tags = controller.active_tags
        views = build_views(collection, tags, controller.search_text)
        selected = controller.find_selected(collection)
        mode = controller.resolve_mode(collection)
        scroll_to = getattr(self.viewport, "last_request", None)

        return CatalogPage(
            mode=mode.value,
            active_tags=tags,
            search_query=controller.search_text,
            has_filters=bool(tags) or bool(normalize_query(controller.search_text)),
            location=self.location,
            result_count=len(views.results),
            views=views,
            available_tags=sorted(tag_universe(collection), key=str.lower),
            selected=selected if mode is ViewMode.DETAIL else None,
            selected_id=controller.selected_id,
            selected_links=developer_links(selected) if selected else [],
            selected_game_version=format_game_version(selected.game_version) if selected else None,
            hero_stats=hero_stats(collection),
            scroll_to=scroll_to,
            loading=catalog.loading,
            error=catalog.error,
        )
