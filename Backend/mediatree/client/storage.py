import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def read_json(path: Path, default):
    """
    Load a JSON document, falling back to default when the file is missing
    or unreadable. A corrupt file is logged and ignored, never fatal.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return default
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable state file %s: %s", path, e)
        return default


def write_json(path: Path, data) -> bool:
    """
    Write through a temporary file and rename, so an abrupt exit leaves
    either the old or the new document. Returns False if the write failed.
    """
    path = Path(path)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, path)
    except OSError as e:
        logger.error("Could not persist %s: %s", path, e)
        return False
    return True
