"""
Pydantic schema definitions for the catalog module.

``Mod`` is the strict, normalized catalogue entry that the query engine
works on. Loose payloads coming from the store (``ModDocument``) are
converted into ``Mod`` at the store boundary so that nothing downstream
has to check whether an optional field is present. ``CatalogPage``
bundles together everything a client needs to render one screen of the
catalogue: the filtered grid, the three carousels, the tag picker and the
URL that reproduces the screen.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..config import FEATURED_TAG


class Author(BaseModel):
    id: str
    name: str
    avatar_url: str = ""


class Mod(BaseModel):
    """A single catalogue entry.

    Tags keep the casing they were uploaded with; every comparison on
    them is case-insensitive. ``downloads`` is the value displayed to the
    user, i.e. the store value already reconciled with the local ledger.
    Optional text fields (installation guide, changelog) are plain empty
    strings rather than ``None`` so the search haystack can be built
    without branching.
    """

    id: str
    title: str
    author: Author
    thumbnail_url: str = ""
    images: List[str] = Field(default_factory=list)
    video_url: Optional[str] = None
    description: str = ""
    long_description: str = ""
    version: str = "1.0.0"
    game_version: str = ""
    developer_url: Optional[str] = None
    developer_name: Optional[str] = None
    developer_links: List[str] = Field(default_factory=list)
    downloads: int = Field(default=0, ge=0)
    rating: float = 5.0
    tags: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    file_size: str = "Unspecified"
    uploaded_date: datetime
    sha256: str = ""
    files: List[str] = Field(default_factory=list)
    download_url: str = ""
    archive_file_name: str = ""
    feature_list: List[str] = Field(default_factory=list)
    installation_guide: str = ""
    changelog: str = ""
    is_featured: bool = False

    @property
    def featured(self) -> bool:
        # The literal tag is matched with its exact casing.
        return self.is_featured or FEATURED_TAG in self.tags


class ModImage(BaseModel):
    id: str = ""
    label: str = ""
    url: str
    delete_url: Optional[str] = None


class ModDocument(BaseModel):
    """A mod as stored by the catalogue store.

    Every field the uploader may omit is optional here. Use
    ``store.map_document_to_mod`` to obtain a ``Mod``.
    """

    slug: str
    title: str
    description: str
    download_url: str
    version: Optional[str] = None
    tagline: Optional[str] = None
    tags: Optional[List[str]] = None
    images: Optional[List[ModImage]] = None
    status: str = "published"
    downloads: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author_name: Optional[str] = None
    author_id: Optional[str] = None
    feature_list: Optional[List[str]] = None
    file_size: Optional[str] = None
    game_version: Optional[str] = None
    developer_url: Optional[str] = None
    developer_name: Optional[str] = None
    developer_links: Optional[List[str]] = None
    sha256: Optional[str] = None
    archive_file_name: Optional[str] = None
    dependencies: Optional[List[str]] = None
    video_url: Optional[str] = None
    rating: Optional[float] = None
    files: Optional[List[str]] = None
    installation_guide: Optional[str] = None
    changelog: Optional[str] = None
    is_featured: Optional[bool] = None


class DeveloperLink(BaseModel):
    url: str
    kind: str
    label: str


class HeroStat(BaseModel):
    label: str
    value: int
    display: str


class CatalogViews(BaseModel):
    """Derived views computed from one filtered result set."""

    results: List[Mod] = Field(default_factory=list)
    featured: List[Mod] = Field(default_factory=list)
    newest: List[Mod] = Field(default_factory=list)
    trending: List[Mod] = Field(default_factory=list)


class CatalogPage(BaseModel):
    """Everything needed to render the catalogue for one URL.

    ``mode`` is the mode to render, which differs from the stored mode
    when the selected mod has disappeared from the collection. ``location``
    is the canonical query string (with its leading ``?``, or empty).
    ``scroll_to`` is set when the last action asked the viewport to
    scroll to the top of the content region.
    """

    mode: str
    active_tags: List[str] = Field(default_factory=list)
    search_query: str = ""
    has_filters: bool = False
    location: str = ""
    result_count: int = 0
    views: CatalogViews
    available_tags: List[str] = Field(default_factory=list)
    selected: Optional[Mod] = None
    selected_id: Optional[str] = None
    selected_links: List[DeveloperLink] = Field(default_factory=list)
    selected_game_version: Optional[str] = None
    hero_stats: List[HeroStat] = Field(default_factory=list)
    scroll_to: Optional[int] = None
    loading: bool = False
    error: Optional[str] = None
