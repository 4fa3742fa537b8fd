import logging
import os
import posixpath
from pathlib import Path, PureWindowsPath

from mediatree.core.errors import AccessDenied

logger = logging.getLogger(__name__)


# Backslashes and drive letters only separate or qualify paths on Windows;
# on POSIX they are ordinary file name characters.
WINDOWS_SEPARATORS = os.name == "nt"


def normalize(user_path: str | None) -> str:
    """
    Turn a user-supplied relative path into a normalized, forward-slash form.

    Args:
        user_path (str): The relative path requested by the user (e.g., "Movies/Action").

    Returns:
        str: "" for the root, otherwise e.g. "Movies/Action".

    Raises:
        AccessDenied: If the path is absolute, rooted, or contains ".." segments.
    """
    raw = user_path or ""

    if "\x00" in raw:
        raise AccessDenied()

    if WINDOWS_SEPARATORS:
        raw = raw.replace("\\", "/")
        if PureWindowsPath(raw).drive:
            logger.warning("Rejected drive-qualified path request: %r", user_path)
            raise AccessDenied()

    if raw.startswith("/"):
        logger.warning("Rejected absolute path request: %r", user_path)
        raise AccessDenied()

    segments = [s for s in raw.split("/") if s not in ("", ".")]
    if ".." in segments:
        logger.warning("Rejected path traversal request: %r", user_path)
        raise AccessDenied()

    return posixpath.join(*segments) if segments else ""


def is_within(root: Path, candidate: Path) -> bool:
    """
    Separator-bounded containment: "/media-evil" is not inside "/media".
    """
    return candidate == root or root in candidate.parents


def resolve(root: Path, user_path: str | None) -> Path:
    """
    Safely convert a user-provided relative path to an absolute server path.

    The result is fully resolved (symlinks included) and guaranteed to be the
    root itself or a descendant of it. Existence is not checked here.

    Raises:
        AccessDenied: If the path is malformed or resolves outside the root.
            The message never contains the attempted absolute path.
    """
    relative = normalize(user_path)
    real_root = Path(root).resolve()

    full_path = real_root.joinpath(relative).resolve() if relative else real_root

    if not is_within(real_root, full_path):
        logger.warning("Rejected path escaping the media root: %r", user_path)
        raise AccessDenied()

    return full_path


def to_relative(root: Path, full_path: Path) -> str:
    """
    The root-relative, forward-slash identifier of a sandboxed location.
    """
    real_root = Path(root).resolve()
    relative = os.path.relpath(full_path, real_root)
    if relative == ".":
        return ""
    return relative.replace(os.sep, "/")
