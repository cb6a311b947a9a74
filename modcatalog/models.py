# modcatalog/models.py
from typing import List, Optional

from pydantic import BaseModel, Field
from typing_extensions import Literal

from .catalog.schemas import ModImage


ViewAction = Literal[
    "select",
    "go_home",
    "open_listing",
    "close_listing",
    "toggle_tag",
    "set_search_text",
    "submit_search",
    "clear_tag",
    "clear_all_tags",
    "clear_search",
    "clear_all_filters",
]


class ModInput(BaseModel):
    title: str
    download_url: str
    description: str = ""
    slug: Optional[str] = None
    version: Optional[str] = None
    tagline: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    images: List[ModImage] = Field(default_factory=list)
    status: str = "published"
    author_name: Optional[str] = None
    author_id: Optional[str] = None
    feature_list: List[str] = Field(default_factory=list)
    file_size: Optional[str] = None
    game_version: Optional[str] = None
    developer_url: Optional[str] = None
    developer_name: Optional[str] = None
    developer_links: Optional[List[str]] = None
    sha256: Optional[str] = None
    archive_file_name: Optional[str] = None
    dependencies: List[str] = Field(default_factory=list)
    video_url: Optional[str] = None
    rating: Optional[float] = None
    files: List[str] = Field(default_factory=list)
    installation_guide: Optional[str] = None
    changelog: Optional[str] = None
    is_featured: bool = False


class ModUpdate(BaseModel):
    """Partial update: only the fields that were sent are applied."""

    title: Optional[str] = None
    download_url: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    tagline: Optional[str] = None
    tags: Optional[List[str]] = None
    images: Optional[List[ModImage]] = None
    status: Optional[str] = None
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


class ViewActionRequest(BaseModel):
    location: str = Field(
        default="",
        description="Current query string, e.g. '?tags=Cyberpunk&view=discover'.",
    )
    action: ViewAction
    value: Optional[str] = None
    content_top: int = Field(default=0, ge=0)


class DownloadCount(BaseModel):
    id: str
    downloads: int
