"""Tests for the catalogue session: store subscription, ledger merge, rendering."""

import json

import pytest

from modcatalog.catalog.session import CatalogState, ViewSession
from modcatalog.catalog.store import ModStore
from modcatalog.config import DOWNLOAD_STORAGE_KEY
from modcatalog.exceptions import ModNotFoundError
from modcatalog.models import ModInput, ModUpdate


@pytest.fixture
def catalog(store, ledger):
    state = CatalogState(store, ledger)
    state.start()
    yield state
    state.close()


def downloads(catalog, mod_id):
    return catalog.get(mod_id).downloads


def test_start_loads_snapshot(catalog):
    assert catalog.loading is False
    assert [m.id for m in catalog.collection] == ["synth-radio", "neon-grid", "rainy-nights"]


def test_local_increment_survives_stale_refresh(catalog, store):
    assert downloads(catalog, "neon-grid") == 10
    assert catalog.increment_download("neon-grid") == 11

    # The store still reports 10; any change makes it push a fresh snapshot.
    store.update("neon-grid", ModUpdate(title="Neon Grid v2"))

    assert catalog.get("neon-grid").title == "Neon Grid v2"
    assert downloads(catalog, "neon-grid") == 11


def test_store_reset_does_not_regress_count(catalog, store):
    catalog.increment_download("neon-grid")
    doc = store.get_document("neon-grid")
    store.create(
        ModInput(slug=doc.slug, title=doc.title, download_url=doc.download_url, description=doc.description)
    )
    # Re-creating resets the stored count to 0; the ledger keeps 11.
    assert downloads(catalog, "neon-grid") == 11


def test_displayed_counts_never_decrease(catalog, store):
    seen = []
    for step in range(3):
        catalog.increment_download("synth-radio")
        seen.append(downloads(catalog, "synth-radio"))
        store.update("synth-radio", ModUpdate(title=f"Synth {step}"))
        seen.append(downloads(catalog, "synth-radio"))
    assert seen == sorted(seen)
    assert seen[-1] == 53


def test_increment_of_unknown_mod_starts_at_one(catalog, ledger):
    assert catalog.increment_download("ghost") == 1
    assert ledger.get("ghost") == 1


def test_stored_ledger_applies_to_first_snapshot(store, local_storage, ledger):
    local_storage.set_item(DOWNLOAD_STORAGE_KEY, json.dumps({"rainy-nights": 70}))
    with CatalogState(store, ledger) as catalog:
        assert downloads(catalog, "rainy-nights") == 70
        assert downloads(catalog, "neon-grid") == 10


def test_increment_is_persisted(catalog, local_storage):
    catalog.increment_download("rainy-nights")
    assert json.loads(local_storage.get_item(DOWNLOAD_STORAGE_KEY)) == {"rainy-nights": 6}


def test_close_unsubscribes_exactly_once(store, ledger):
    catalog = CatalogState(store, ledger)
    catalog.start()
    catalog.start()
    assert store.subscriber_count == 1

    catalog.close()
    catalog.close()
    assert store.subscriber_count == 0
    assert not catalog.subscribed

    store.delete("neon-grid")
    assert catalog.get("neon-grid") is not None


def test_mutation_failure_is_surfaced(catalog):
    with pytest.raises(ModNotFoundError):
        catalog.update_mod("nope", ModUpdate(title="x"))
    assert catalog.error == "Mod not found: nope"

    catalog.delete_mod("neon-grid")
    assert catalog.error is None


def test_subscription_error_keeps_last_snapshot(ledger, documents):
    class FailingStore(ModStore):
        def subscribe(self, on_snapshot, on_error=None):
            on_snapshot(self.snapshot())
            on_error(RuntimeError("quota exceeded"))
            return lambda: None

    with CatalogState(FailingStore(documents), ledger) as catalog:
        assert catalog.error == "quota exceeded"
        assert len(catalog.collection) == 3


# ─── ViewSession ─────────────────────────────────────────────────────────────


def test_render_listing_from_location(catalog):
    session = ViewSession.from_location("?tags=Cyberpunk&view=discover")
    page = session.render(catalog)

    assert page.mode == "listing"
    assert page.active_tags == ["Cyberpunk"]
    assert [m.id for m in page.views.results] == ["synth-radio", "neon-grid"]
    assert page.result_count == 2
    assert page.has_filters
    assert page.available_tags == ["Audio", "Cyberpunk", "Retro", "UI", "Weather"]
    assert page.selected is None


def test_render_landing_carousels(catalog):
    page = ViewSession.from_location("").render(catalog)
    assert page.mode == "landing"
    assert page.location == ""
    assert [m.id for m in page.views.featured] == ["rainy-nights"]
    assert [m.id for m in page.views.trending] == ["synth-radio", "neon-grid", "rainy-nights"]
    assert [s.label for s in page.hero_stats] == ["Live Mods", "Verified Creators", "Daily Installs"]
    assert page.hero_stats[2].value == 65


def test_render_detail_and_stale_selection(catalog):
    session = ViewSession.from_location("tags=UI&mod=neon-grid")
    page = session.render(catalog)
    assert page.mode == "detail"
    assert page.selected.id == "neon-grid"
    assert page.selected_game_version == "2.1"

    catalog.delete_mod("neon-grid")
    page = session.render(catalog)
    assert page.mode == "listing"
    assert page.selected is None
    assert page.selected_id == "neon-grid"


def test_actions_update_location_and_scroll(catalog):
    session = ViewSession.from_location("", content_top=120)
    session.controller.toggle_tag("Retro")

    page = session.render(catalog)

    assert page.location == "?tags=Retro&view=discover"
    assert page.scroll_to == 104
    assert [m.id for m in page.views.results] == ["synth-radio"]
