import logging
import mimetypes
import os
import posixpath
from datetime import datetime
from pathlib import Path

from guessit import guessit

from mediatree.core.config import settings
from mediatree.core.errors import NotFound, ValidationError
from mediatree.models.entry import VideoInfo
from mediatree.services import resolver
from mediatree.services.thumbnails import find_thumbnail

logger = logging.getLogger(__name__)


def extension_of(filename: str) -> str:
    """
    Lowercased extension without the dot ("" when there is none).
    """
    return os.path.splitext(filename)[1].lower().lstrip(".")


def is_video_file(filename: str) -> bool:
    """
    Check if the file extension is in the configured video allow-list.
    """
    return extension_of(filename) in {e.lower() for e in settings.VIDEO_EXTENSIONS}


def mime_type_for(filename: str) -> str:
    ext = extension_of(filename)
    if ext in settings.VIDEO_MIME_TYPES:
        return settings.VIDEO_MIME_TYPES[ext]
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "application/octet-stream"


def analyze_filename(filename: str) -> dict:
    """
    Use guessit to pull a clean title, year, season and episode out of a
    release-style file name. Missing values are simply absent.
    """
    guess = guessit(filename)
    info = {}
    for key in ("title", "year", "season", "episode"):
        value = guess.get(key)
        # Multi-episode files give a list; keep the first
        if isinstance(value, list):
            value = value[0] if value else None
        if value is not None:
            info[key] = value
    return info


def resolve_video(root: Path, user_path: str) -> Path:
    """
    Resolve a path that must point at an existing video file.

    Raises:
        AccessDenied: Propagated unchanged from the resolver.
        NotFound: Missing, not a regular file, or not a video.
    """
    full_path = resolver.resolve(root, user_path)
    name = posixpath.basename(resolver.normalize(user_path))
    if not full_path.is_file() or not is_video_file(name):
        raise NotFound("Video not found")
    return full_path


def describe_video(root: Path, user_path: str) -> VideoInfo:
    """
    Build the metadata returned by the video-info endpoint.
    """
    if not user_path:
        raise ValidationError("Path parameter is required")

    full_path = resolver.resolve(root, user_path)
    relative = resolver.normalize(user_path)
    name = posixpath.basename(relative)

    if not full_path.exists():
        raise NotFound("File not found")
    if not full_path.is_file() or not is_video_file(name):
        raise ValidationError("File is not a supported video format")

    try:
        stat = full_path.stat()
    except OSError:
        raise NotFound("File not found or inaccessible")

    try:
        parsed = analyze_filename(name)
    except Exception as e:
        # guessit is heuristic; metadata stays usable without it
        logger.warning("Could not analyze file name %r: %s", name, e)
        parsed = {}

    return VideoInfo(
        name=name,
        path=relative,
        size=stat.st_size,
        modified=datetime.fromtimestamp(stat.st_mtime),
        extension=extension_of(name),
        mime_type=mime_type_for(name),
        thumbnail_url=find_thumbnail(root, relative),
        **parsed,
    )
