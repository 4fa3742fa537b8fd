import logging
from pathlib import Path

from mediatree.client.state import validate_time
from mediatree.client.storage import read_json, write_json

logger = logging.getLogger(__name__)


class ProgressStore:
    """
    Last observed playback position per media path, in a local JSON file.

    Loaded once at construction. Every ``save`` writes through to disk so an
    abrupt exit loses at most the sample in flight; ``flush`` is called again
    on session teardown. Last write wins, there is no merging.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._records: dict[str, float] = {}
        data = read_json(self.path, {})
        if not isinstance(data, dict):
            data = {}
        for media_path, seconds in data.items():
            if isinstance(seconds, (int, float)) and not isinstance(seconds, bool) and seconds >= 0:
                self._records[media_path] = float(seconds)

    def __len__(self):
        return len(self._records)

    def __contains__(self, media_path):
        return media_path in self._records

    def save(self, media_path: str, seconds: float) -> None:
        seconds = validate_time(seconds)
        # Re-insert so dict order tracks recency for prune()
        self._records.pop(media_path, None)
        self._records[media_path] = seconds
        self.flush()

    def restore(self, media_path: str) -> float | None:
        return self._records.get(media_path)

    def forget(self, media_path: str) -> None:
        if self._records.pop(media_path, None) is not None:
            self.flush()

    def prune(self, max_records: int) -> int:
        """
        Keep only the max_records most recently saved positions.
        Returns how many were dropped.
        """
        excess = len(self._records) - max(0, max_records)
        if excess <= 0:
            return 0
        for media_path in list(self._records)[:excess]:
            del self._records[media_path]
        self.flush()
        return excess

    def flush(self) -> bool:
        return write_json(self.path, self._records)
