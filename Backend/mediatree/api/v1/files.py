from fastapi import APIRouter, Query
from fastapi.responses import FileResponse

from mediatree.core.config import settings
from mediatree.core.errors import NotFound
from mediatree.models.entry import (
    BrowseQuery, DirectoryListing, FilterType, SearchResponse, SortBy, SortOrder, VideoInfo,
)
from mediatree.services import catalog, media, search, thumbnails

router = APIRouter()


# Filesystem-bound handlers are plain "def" so FastAPI runs them in its threadpool.

@router.get("/browse", response_model=DirectoryListing, response_model_exclude_none=True)
def browse_directory(
    path: str = Query(default="", description="Relative path to browse"),
    search_term: str = Query(default="", alias="search", description="Case-insensitive name filter"),
    sort_by: SortBy = Query(default="name", alias="sortBy"),
    sort_order: SortOrder = Query(default="asc", alias="sortOrder"),
    filter_type: FilterType = Query(default="all", alias="filterType"),
):
    """
    List files and directories within a specific path in the media root.
    """
    query = BrowseQuery(
        path=path,
        search_term=search_term,
        sort_by=sort_by,
        sort_order=sort_order,
        filter_type=filter_type,
    )
    return catalog.list_directory(settings.MEDIA_ROOT_PATH, query)


@router.get("/search", response_model=SearchResponse, response_model_exclude_none=True)
def search_files(
    q: str = Query(default="", description="Search term"),
    type: FilterType = Query(default="all", description="Entry type filter"),
):
    """
    Recursively search the whole media root by name.
    """
    return search.search_tree(settings.MEDIA_ROOT_PATH, q, type)


@router.get("/video-info", response_model=VideoInfo, response_model_exclude_none=True)
def video_info(path: str = Query(default="", description="Relative path of the video")):
    """
    Metadata for one video: size, dates, mime type, parsed title, thumbnail.
    """
    return media.describe_video(settings.MEDIA_ROOT_PATH, path)


@router.get("/thumbnail")
def video_thumbnail(path: str = Query(description="Relative path of the video")):
    """
    Serve an existing thumbnail for a video. Nothing is generated on demand.
    """
    image = thumbnails.thumbnail_file(settings.MEDIA_ROOT_PATH, path)
    if image is None:
        raise NotFound("No thumbnail")
    return FileResponse(image)
