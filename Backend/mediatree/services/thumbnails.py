import logging
import posixpath
from pathlib import Path
from urllib.parse import quote

from mediatree.core.config import settings
from mediatree.core.errors import AccessDenied
from mediatree.services import resolver

logger = logging.getLogger(__name__)

# Using a tuple keeps the lookup order deterministic
THUMBNAIL_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")

THUMBNAIL_ENDPOINT = "/api/v1/files/thumbnail"


def thumbnail_file(root: Path, relative_path: str) -> Path | None:
    """
    Find an existing thumbnail image for a video. Thumbnails are never generated here.

    Two places are checked, in order:
      1. THUMBNAIL_DIR mirrored by relative path: Anime/ep1.mp4 -> THUMBNAIL_DIR/Anime/ep1.jpg
      2. A sidecar image next to the video: Anime/ep1.jpg

    Raises:
        AccessDenied: If relative_path escapes the media root.
    """
    stem = posixpath.splitext(resolver.normalize(relative_path))[0]
    if not stem:
        return None

    thumbnail_root = Path(settings.THUMBNAIL_DIR)
    search_roots = [thumbnail_root, root] if thumbnail_root.is_dir() else [root]

    for base in search_roots:
        for ext in THUMBNAIL_EXTENSIONS:
            try:
                candidate = resolver.resolve(base, stem + ext)
            except AccessDenied:
                # A symlinked image pointing elsewhere; skip it
                continue
            if candidate.is_file():
                return candidate

    return None


def find_thumbnail(root: Path, relative_path: str) -> str | None:
    """
    Returns:
        str: URL serving the thumbnail, or None when there is none (not an error).
    """
    if thumbnail_file(root, relative_path) is None:
        return None
    return f"{THUMBNAIL_ENDPOINT}?path={quote(relative_path)}"
