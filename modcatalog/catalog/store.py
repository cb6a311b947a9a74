"""
In-process catalogue store.

The store holds raw ``ModDocument`` records and plays the part of the
remote catalogue: consumers ``subscribe`` to receive the full, normalized
collection every time it changes, and use ``create``/``update``/``delete``
to mutate it. The initial documents are loaded from a JSON file
(``data/sample_mods.json`` by default). Documents are converted into the
strict ``Mod`` shape by ``map_document_to_mod`` before they leave this
module.
"""

from __future__ import annotations

import json
import logging
import re
import urllib.parse
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from ..config import (
    AVATAR_URL_TEMPLATE,
    DEFAULT_AUTHOR_NAME,
    DEFAULT_GAME_VERSION,
    DEFAULT_THUMBNAIL,
    DEFAULT_VERSION,
)
from ..exceptions import CatalogStoreError, ModNotFoundError
from ..models import ModInput, ModUpdate
from .schemas import Author, Mod, ModDocument

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[Mod]], None]
ErrorCallback = Callable[[Exception], None]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def create_slug(value: str) -> str:
    """Lowercase ``value`` and collapse anything non-alphanumeric into dashes."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower())
    return slug.strip("-")[:80]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _clean_links(links: List[str]) -> List[str]:
    return [link.strip() for link in links if link and link.strip()]


def map_document_to_mod(doc: ModDocument) -> Mod:
    """Normalize a stored document into a ``Mod``.

    Missing optional fields receive their display defaults here so that
    the query engine never has to check for them.
    """
    slug = doc.slug
    author_id = doc.author_id or slug
    author_name = doc.author_name or DEFAULT_AUTHOR_NAME
    image_urls = [image.url for image in (doc.images or []) if image.url]
    thumbnail = image_urls[0] if image_urls else DEFAULT_THUMBNAIL
    if doc.developer_links is not None:
        developer_links = _clean_links(doc.developer_links)
    else:
        developer_links = [doc.developer_url] if doc.developer_url else []

    return Mod(
        id=slug,
        title=doc.title,
        author=Author(
            id=author_id,
            name=author_name,
            avatar_url=AVATAR_URL_TEMPLATE.format(author_id=urllib.parse.quote(author_id, safe="")),
        ),
        thumbnail_url=thumbnail,
        images=image_urls or [thumbnail],
        video_url=doc.video_url,
        description=doc.tagline or doc.description,
        long_description=doc.description,
        version=doc.version or DEFAULT_VERSION,
        game_version=doc.game_version or DEFAULT_GAME_VERSION,
        developer_url=doc.developer_url,
        developer_name=doc.developer_name or author_name,
        developer_links=developer_links,
        downloads=max(0, doc.downloads or 0),
        rating=doc.rating if doc.rating is not None else 5,
        tags=list(doc.tags or []),
        dependencies=list(doc.dependencies or []),
        file_size=doc.file_size or "Unspecified",
        uploaded_date=_as_utc(doc.created_at) or datetime.now(timezone.utc),
        sha256=doc.sha256 or "",
        files=list(doc.files or []),
        download_url=doc.download_url,
        archive_file_name=doc.archive_file_name or f"{slug}.zip",
        feature_list=list(doc.feature_list or []),
        installation_guide=doc.installation_guide or "",
        changelog=doc.changelog or "",
        is_featured=bool(doc.is_featured),
    )


class ModStore:
    def __init__(self, documents: Optional[List[ModDocument]] = None):
        self._documents: Dict[str, ModDocument] = {}
        self._subscribers: List[tuple] = []
        for doc in documents or []:
            self._documents[doc.slug] = doc

    @classmethod
    def from_file(cls, path: Path) -> "ModStore":
        """Load documents from a JSON list.

        A missing or malformed file gives an empty store; malformed entries
        are skipped. Both cases are logged.
        """
        documents: List[ModDocument] = []
        try:
            with Path(path).open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Could not load catalogue file %s: %s", path, exc)
            return cls()
        if not isinstance(raw, list):
            logger.warning("Catalogue file %s does not contain a list", path)
            return cls()
        for entry in raw:
            try:
                documents.append(ModDocument.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping malformed catalogue entry: %s", exc)
        logger.info("Loaded %d mods from %s", len(documents), path)
        return cls(documents)

    # -- reading ------------------------------------------------------------

    def snapshot(self) -> List[Mod]:
        """Normalized collection, newest first."""
        docs = sorted(
            self._documents.values(),
            key=lambda d: _as_utc(d.created_at) or _EPOCH,
            reverse=True,
        )
        return [map_document_to_mod(d) for d in docs]

    def get_document(self, slug: str) -> Optional[ModDocument]:
        return self._documents.get(slug)

    def subscribe(
        self,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Callable[[], None]:
        """Receive the collection now and after every change.

        Returns a callable that detaches the subscriber. Calling it more
        than once has no further effect.
        """
        entry = (on_snapshot, on_error)
        self._subscribers.append(entry)
        self._deliver(entry)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _deliver(self, entry: tuple) -> None:
        on_snapshot, on_error = entry
        try:
            mods = self.snapshot()
        except ValidationError as exc:
            error = CatalogStoreError(f"Failed to load mods: {exc}")
            if on_error is None:
                raise error from exc
            on_error(error)
            return
        on_snapshot(mods)

    def _notify(self) -> None:
        for entry in list(self._subscribers):
            self._deliver(entry)

    # -- mutations ----------------------------------------------------------

    def create(self, data: ModInput) -> str:
        slug = (data.slug or "").strip() or create_slug(data.title)
        if not slug:
            raise CatalogStoreError("A mod needs a title or slug that yields an id")
        if data.developer_links is not None:
            developer_links = _clean_links(data.developer_links)
        else:
            developer_links = _clean_links([data.developer_url or ""])
        now = datetime.now(timezone.utc)
        payload = data.model_dump(exclude={"slug"})
        payload.update(
            slug=slug,
            version=data.version or DEFAULT_VERSION,
            description=data.description or data.tagline or data.title,
            game_version=data.game_version or DEFAULT_GAME_VERSION,
            installation_guide=(data.installation_guide or "").strip() or None,
            changelog=(data.changelog or "").strip() or None,
            developer_name=(data.developer_name or "").strip() or None,
            developer_links=developer_links,
            developer_url=developer_links[0] if developer_links else None,
            downloads=0,
            created_at=now,
            updated_at=now,
        )
        existing = self._documents.get(slug)
        if existing is not None:
            # Merge onto the stored document, keeping its creation time.
            payload = {**existing.model_dump(), **payload, "created_at": existing.created_at}
        try:
            self._documents[slug] = ModDocument.model_validate(payload)
        except ValidationError as exc:
            raise CatalogStoreError(f"Invalid mod {slug!r}: {exc}") from exc
        logger.info("Created mod %s", slug)
        self._notify()
        return slug

    def update(self, slug: str, updates: ModUpdate) -> None:
        existing = self._documents.get(slug)
        if existing is None:
            raise ModNotFoundError(slug)
        changes = updates.model_dump(exclude_unset=True)
        if updates.developer_name is not None:
            changes["developer_name"] = updates.developer_name.strip()
        if updates.developer_links is not None:
            links = _clean_links(updates.developer_links)
            changes["developer_links"] = links
            changes["developer_url"] = links[0] if links else None
        elif updates.developer_url is not None:
            url = updates.developer_url.strip()
            changes["developer_links"] = [url] if url else []
            changes["developer_url"] = url or None
        changes["updated_at"] = datetime.now(timezone.utc)
        try:
            self._documents[slug] = ModDocument.model_validate({**existing.model_dump(), **changes})
        except ValidationError as exc:
            raise CatalogStoreError(f"Invalid update for {slug!r}: {exc}") from exc
        logger.info("Updated mod %s (%s)", slug, ", ".join(sorted(changes)))
        self._notify()

    def delete(self, slug: str) -> bool:
        if self._documents.pop(slug, None) is None:
            return False
        logger.info("Deleted mod %s", slug)
        self._notify()
        return True
