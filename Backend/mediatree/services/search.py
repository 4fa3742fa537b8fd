import logging
import os
import posixpath
from pathlib import Path

from mediatree.core.config import settings
from mediatree.core.errors import AccessDenied, NotFound
from mediatree.models.entry import SearchResponse, SearchResult
from mediatree.services import resolver
from mediatree.services.catalog import build_entry, matches_type, validate_search_term

logger = logging.getLogger(__name__)


def is_metadata_artifact(name: str) -> bool:
    """
    OS / NAS bookkeeping files such as ._clip.mp4, .DS_Store or Thumbs.db.
    """
    if name in settings.METADATA_NAMES:
        return True
    return any(name.startswith(prefix) for prefix in settings.METADATA_PREFIXES)


def _walk(root: Path, relative_dir: str, visited: set[Path]):
    """
    Yield (relative_path, DirEntry) in directory-traversal order.

    Every directory is re-validated through the resolver before it is entered,
    so a symlink cannot lead the walk outside the media root.
    """
    try:
        directory = resolver.resolve(root, relative_dir)
    except AccessDenied:
        logger.warning("Search skipped directory leaving the media root: %r", relative_dir)
        return

    # Symlink loops inside the root
    if directory in visited:
        return
    visited.add(directory)

    try:
        with os.scandir(directory) as it:
            children = list(it)
    except OSError as e:
        # Skip directories we can't access
        logger.info("Skipping directory %r: %s", relative_dir, e)
        return

    for dir_entry in children:
        if is_metadata_artifact(dir_entry.name):
            continue
        relative_path = posixpath.join(relative_dir, dir_entry.name)
        yield relative_path, dir_entry
        try:
            descend = dir_entry.is_dir()
        except OSError:
            descend = False
        if descend:
            yield from _walk(root, relative_path, visited)


def search_tree(root: Path, term: str, filter_type: str = "all") -> SearchResponse:
    """
    Recursively search the whole media root for entries whose name contains term.

    Uses the same case-insensitive match and type filter as the directory
    listing. Results are in traversal order, unranked and unpaginated.

    Raises:
        ValidationError: Empty or too long search term.
        NotFound: The media root itself is missing.
    """
    term = validate_search_term(term, required=True)
    if not resolver.resolve(root, "").is_dir():
        raise NotFound("Media root not found")

    results = []
    for relative_path, dir_entry in _walk(root, "", set()):
        # Name check first: it avoids stat() and thumbnail lookups for misses
        if term.casefold() not in dir_entry.name.casefold():
            continue
        entry = build_entry(root, relative_path, dir_entry)
        if entry is None or not matches_type(entry, filter_type):
            continue
        results.append(SearchResult(**entry.model_dump(), relative_path=relative_path))

    logger.debug("Search %r (%s) matched %d entries", term, filter_type, len(results))
    return SearchResponse(results=results, total_results=len(results), search_term=term)
