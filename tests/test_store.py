"""Unit tests for modcatalog.catalog.store."""

import json
from datetime import datetime, timezone

import pytest

from modcatalog import config
from modcatalog.catalog.schemas import ModDocument
from modcatalog.catalog.store import ModStore, create_slug, map_document_to_mod
from modcatalog.exceptions import CatalogStoreError, ModNotFoundError
from modcatalog.models import ModInput, ModUpdate


@pytest.mark.parametrize(
    "title, slug",
    [
        ("Neon Grid: UI!!", "neon-grid-ui"),
        ("  --Retro  Synth-- ", "retro-synth"),
        ("x" * 100, "x" * 80),
        ("!!!", ""),
    ],
)
def test_create_slug(title, slug):
    assert create_slug(title) == slug


def test_map_document_fills_defaults():
    mod = map_document_to_mod(
        ModDocument(slug="bare", title="Bare", description="Long text", download_url="https://x/bare.zip")
    )
    assert mod.id == "bare"
    assert mod.author.id == "bare"
    assert mod.author.name == config.DEFAULT_AUTHOR_NAME
    assert mod.author.avatar_url == "https://avatar.vercel.sh/bare"
    assert mod.thumbnail_url == config.DEFAULT_THUMBNAIL
    assert mod.images == [config.DEFAULT_THUMBNAIL]
    assert mod.description == "Long text"
    assert mod.long_description == "Long text"
    assert mod.version == "1.0.0"
    assert mod.game_version == "2.1"
    assert mod.developer_name == config.DEFAULT_AUTHOR_NAME
    assert mod.developer_links == []
    assert mod.downloads == 0
    assert mod.rating == 5
    assert mod.archive_file_name == "bare.zip"
    assert mod.installation_guide == ""
    assert mod.changelog == ""
    assert mod.is_featured is False
    assert mod.uploaded_date.tzinfo is not None


def test_map_document_prefers_tagline_and_images():
    mod = map_document_to_mod(
        ModDocument(
            slug="s",
            title="S",
            tagline="Short",
            description="Long",
            download_url="u",
            images=[{"url": "https://img/1.png"}, {"url": ""}, {"url": "https://img/2.png"}],
            developer_url="https://github.com/s",
            created_at=datetime(2025, 1, 1),
        )
    )
    assert mod.description == "Short"
    assert mod.long_description == "Long"
    assert mod.thumbnail_url == "https://img/1.png"
    assert mod.images == ["https://img/1.png", "https://img/2.png"]
    assert mod.developer_links == ["https://github.com/s"]
    assert mod.uploaded_date == datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_from_file_loads_bundled_sample():
    store = ModStore.from_file(config.PACKAGE_DIR / "data" / "sample_mods.json")
    mods = store.snapshot()
    assert len(mods) == 4
    assert mods[0].id == "rainy-night-city"


def test_from_file_skips_bad_entries(tmp_path):
    path = tmp_path / "mods.json"
    path.write_text(
        json.dumps([{"slug": "ok", "title": "Ok", "description": "d", "download_url": "u"}, {"title": "no slug"}]),
        encoding="utf-8",
    )
    assert [m.id for m in ModStore.from_file(path).snapshot()] == ["ok"]


def test_from_file_missing_gives_empty_store(tmp_path):
    assert ModStore.from_file(tmp_path / "absent.json").snapshot() == []


def test_subscribe_delivers_newest_first_and_unsubscribes_once(store):
    snapshots = []
    unsubscribe = store.subscribe(snapshots.append)

    assert [m.id for m in snapshots[0]] == ["synth-radio", "neon-grid", "rainy-nights"]
    assert store.subscriber_count == 1

    store.delete("rainy-nights")
    assert len(snapshots) == 2

    unsubscribe()
    unsubscribe()
    assert store.subscriber_count == 0
    store.delete("neon-grid")
    assert len(snapshots) == 2


def test_create_applies_defaults(store):
    slug = store.create(
        ModInput(
            title="Chrome Arms Pack",
            download_url="https://x/arms.zip",
            tagline="Shiny arms",
            developer_links=[" https://github.com/sal ", "", "https://patreon.com/sal"],
            installation_guide="   ",
        )
    )
    assert slug == "chrome-arms-pack"

    doc = store.get_document(slug)
    assert doc.description == "Shiny arms"
    assert doc.version == "1.0.0"
    assert doc.game_version == "2.1"
    assert doc.downloads == 0
    assert doc.status == "published"
    assert doc.developer_links == ["https://github.com/sal", "https://patreon.com/sal"]
    assert doc.developer_url == "https://github.com/sal"
    assert doc.installation_guide is None
    assert store.snapshot()[0].id == slug


def test_create_without_usable_slug_fails(store):
    with pytest.raises(CatalogStoreError):
        store.create(ModInput(title="???", download_url="u"))


def test_update_only_touches_sent_fields(store):
    store.update("neon-grid", ModUpdate(tags=["UI"], developer_url=" https://x.com/vexa "))
    doc = store.get_document("neon-grid")
    assert doc.tags == ["UI"]
    assert doc.title == "Neon Grid"
    assert doc.downloads == 10
    assert doc.developer_links == ["https://x.com/vexa"]
    assert doc.developer_url == "https://x.com/vexa"


def test_update_unknown_mod(store):
    with pytest.raises(ModNotFoundError):
        store.update("nope", ModUpdate(title="x"))


def test_delete_reports_absence(store):
    assert store.delete("neon-grid") is True
    assert store.delete("neon-grid") is False
