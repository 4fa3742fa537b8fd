from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

SortBy = Literal["name", "size", "date"]
SortOrder = Literal["asc", "desc"]
FilterType = Literal["all", "video", "directory", "other"]


class WireModel(BaseModel):
    """
    Base for API models: snake_case in Python, camelCase on the wire.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Entry(WireModel):
    """
    A single file or directory as exposed to clients.
    Built fresh from the filesystem on every listing or search.
    """
    name: str
    path: str  # Root-relative, forward slashes, never ".." or a leading "/"
    is_directory: bool
    is_video: bool
    size: int  # 0 for directories
    modified_at: datetime
    extension: str  # Lowercase, without the dot
    mime_type: Optional[str] = None
    file_count: Optional[int] = None  # Directories only
    thumbnail_url: Optional[str] = None


class DirectoryListing(WireModel):
    """
    The contents of one directory.
    """
    current_path: str
    parent_path: str
    items: list[Entry]


class SearchResult(Entry):
    relative_path: str  # Display path relative to the search root


class SearchResponse(WireModel):
    results: list[SearchResult]
    total_results: int
    search_term: str


class BrowseQuery(WireModel):
    """
    Parameters of one browse request. Immutable.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    path: str = ""
    search_term: str = ""
    sort_by: SortBy = "name"
    sort_order: SortOrder = "asc"
    filter_type: FilterType = "all"


class VideoInfo(WireModel):
    """
    Metadata for a single video, returned before playback starts.
    """
    name: str
    path: str
    size: int
    modified: datetime
    extension: str
    mime_type: str
    thumbnail_url: Optional[str] = None
    # Parsed from the file name
    title: Optional[str] = None
    year: Optional[int] = None
    season: Optional[int] = None
    episode: Optional[int] = None
