"""Shared fixtures for the catalogue tests."""

from datetime import datetime, timezone

import pytest

from modcatalog.catalog.schemas import Author, Mod, ModDocument
from modcatalog.catalog.store import ModStore
from modcatalog.storage import DownloadLedger, LocalStorage


def _utc(value):
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


@pytest.fixture
def make_mod():
    """Factory building a ``Mod`` with only the fields a test cares about."""

    def factory(mod_id, tags=(), downloads=0, uploaded="2025-01-01T00:00:00", **fields):
        author_name = fields.pop("author_name", "Vexa")
        fields.setdefault("title", f"Mod {mod_id}")
        return Mod(
            id=mod_id,
            author=Author(id=author_name.lower(), name=author_name),
            tags=list(tags),
            downloads=downloads,
            uploaded_date=_utc(uploaded),
            **fields,
        )

    return factory


@pytest.fixture
def scenario_mods(make_mod):
    """A(tags=[Cyberpunk, UI], 10 downloads) and B(tags=[Cyberpunk], 50)."""
    return [
        make_mod("a", tags=["Cyberpunk", "UI"], downloads=10, title="Alpha"),
        make_mod("b", tags=["Cyberpunk"], downloads=50, title="Bravo"),
    ]


@pytest.fixture
def documents():
    return [
        ModDocument(
            slug="neon-grid",
            title="Neon Grid",
            description="HUD overhaul with a neon grid.",
            download_url="https://example.com/neon-grid.zip",
            tags=["Cyberpunk", "UI"],
            downloads=10,
            created_at=_utc("2025-03-01T00:00:00"),
            author_name="Vexa",
            author_id="vexa",
        ),
        ModDocument(
            slug="synth-radio",
            title="Synth Radio",
            description="New radio station.",
            download_url="https://example.com/synth-radio.zip",
            tags=["Cyberpunk", "Retro", "Audio"],
            downloads=50,
            created_at=_utc("2025-04-01T00:00:00"),
            author_name="Night Owl",
            author_id="night-owl",
        ),
        ModDocument(
            slug="rainy-nights",
            title="Rainy Nights",
            description="Wet streets after dark.",
            download_url="https://example.com/rainy-nights.zip",
            tags=["Weather"],
            downloads=5,
            created_at=_utc("2025-02-01T00:00:00"),
            is_featured=True,
        ),
    ]


@pytest.fixture
def store(documents):
    return ModStore(documents)


@pytest.fixture
def local_storage(tmp_path):
    return LocalStorage(tmp_path / "local_storage.json")


@pytest.fixture
def ledger(local_storage):
    return DownloadLedger(local_storage)
