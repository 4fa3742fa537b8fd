import logging
import os
import posixpath
from datetime import datetime
from pathlib import Path

from mediatree.core.config import settings
from mediatree.core.errors import AccessDenied, NotFound, TransientIOError, ValidationError
from mediatree.models.entry import BrowseQuery, DirectoryListing, Entry
from mediatree.services import resolver
from mediatree.services.media import extension_of, is_video_file, mime_type_for
from mediatree.services.thumbnails import find_thumbnail

logger = logging.getLogger(__name__)

SORT_KEYS = {
    "name": lambda item: item.name.casefold(),
    "size": lambda item: item.size,
    "date": lambda item: item.modified_at,
}


def validate_search_term(term: str, required: bool = False) -> str:
    term = (term or "").strip()
    if required and not term:
        raise ValidationError("Search term is required")
    if len(term) > settings.SEARCH_TERM_MAX_LENGTH:
        raise ValidationError(
            f"Search term must be at most {settings.SEARCH_TERM_MAX_LENGTH} characters"
        )
    return term


def build_entry(root: Path, relative_path: str, dir_entry: os.DirEntry) -> Entry | None:
    """
    Turn one scandir() result into an Entry.

    Returns None for entries that cannot be exposed: symlinks whose target
    resolves outside the media root.
    """
    if dir_entry.is_symlink():
        try:
            resolver.resolve(root, relative_path)
        except AccessDenied:
            logger.warning("Skipping symlink leaving the media root: %r", relative_path)
            return None

    try:
        is_dir = dir_entry.is_dir()
    except OSError:
        is_dir = False

    try:
        stat = dir_entry.stat()
        size = stat.st_size if not is_dir else 0
        modified = datetime.fromtimestamp(stat.st_mtime)
    except OSError as e:
        # Broken symlink or a file removed mid-listing; keep it visible
        logger.warning("Could not stat %r: %s", relative_path, e)
        size = 0
        modified = datetime.now()

    extension = "" if is_dir else extension_of(dir_entry.name)
    is_video = not is_dir and is_video_file(dir_entry.name)

    file_count = None
    if is_dir:
        try:
            file_count = len(os.listdir(dir_entry.path))
        except OSError:
            # Directory might not be accessible
            pass

    return Entry(
        name=dir_entry.name,
        path=relative_path,
        is_directory=is_dir,
        is_video=is_video,
        size=size,
        modified_at=modified,
        extension=extension,
        mime_type=mime_type_for(dir_entry.name) if is_video else None,
        file_count=file_count,
        thumbnail_url=find_thumbnail(root, relative_path) if is_video else None,
    )


def matches_type(entry: Entry, filter_type: str) -> bool:
    """
    "video" keeps directories so the user can keep navigating.
    """
    if filter_type == "video":
        return entry.is_directory or entry.is_video
    if filter_type == "directory":
        return entry.is_directory
    if filter_type == "other":
        return not entry.is_directory and not entry.is_video
    return True


def matches_term(entry: Entry, term: str) -> bool:
    return not term or term.casefold() in entry.name.casefold()


def sort_entries(items: list[Entry], sort_by: str, sort_order: str) -> list[Entry]:
    """
    Stable sort on one key, directories and files mixed.

    reverse=True reverses the comparison, not the result, so equal keys keep
    their enumeration order in both directions.
    """
    key = SORT_KEYS.get(sort_by)
    if key is None:
        raise ValidationError(f"Unsupported sort key: {sort_by}")
    return sorted(items, key=key, reverse=(sort_order == "desc"))


def parent_of(relative_path: str) -> str:
    return posixpath.dirname(relative_path) if relative_path else ""


def scan(root: Path, directory: Path, relative_dir: str) -> list[Entry]:
    """
    Enumerate the immediate children of an already resolved directory.
    """
    items = []
    try:
        with os.scandir(directory) as it:
            for dir_entry in it:
                relative_path = posixpath.join(relative_dir, dir_entry.name)
                entry = build_entry(root, relative_path, dir_entry)
                if entry is not None:
                    items.append(entry)
    except (FileNotFoundError, NotADirectoryError, PermissionError):
        raise NotFound("Directory not found or not accessible")
    except OSError as e:
        logger.error("Failed to read directory %r: %s", relative_dir, e)
        raise TransientIOError("Failed to browse directory")
    return items


def list_directory(root: Path, query: BrowseQuery) -> DirectoryListing:
    """
    List, filter and sort the contents of one directory in the media root.

    Raises:
        AccessDenied: The path escapes the root (from the resolver, unchanged).
        NotFound: The directory does not exist or cannot be read.
        ValidationError: The search term is too long.
    """
    term = validate_search_term(query.search_term)
    directory = resolver.resolve(root, query.path)
    current_path = resolver.normalize(query.path)

    if not directory.is_dir():
        raise NotFound("Directory not found")

    items = [
        item for item in scan(root, directory, current_path)
        if matches_type(item, query.filter_type) and matches_term(item, term)
    ]

    return DirectoryListing(
        current_path=current_path,
        parent_path=parent_of(current_path),
        items=sort_entries(items, query.sort_by, query.sort_order),
    )


def describe_path(root: Path, user_path: str) -> Entry:
    """
    Build the Entry for a single sandboxed path (used when storing playlists).
    """
    relative_path = resolver.normalize(user_path)
    full_path = resolver.resolve(root, relative_path)
    if not relative_path or not full_path.exists():
        raise NotFound("File not found")

    parent_dir = resolver.resolve(root, parent_of(relative_path))
    name = posixpath.basename(relative_path)
    try:
        with os.scandir(parent_dir) as it:
            for dir_entry in it:
                if dir_entry.name == name:
                    entry = build_entry(root, relative_path, dir_entry)
                    if entry is not None:
                        return entry
    except OSError:
        raise NotFound("File not found or inaccessible")
    raise NotFound("File not found")
