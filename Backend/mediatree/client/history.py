from datetime import datetime
from pathlib import Path

from mediatree.client.storage import read_json, write_json
from mediatree.models.entry import Entry

MAX_RECENT = 50


class RecentlyPlayed:
    """
    Newest-first list of played videos, one record per path.
    """

    def __init__(self, path: Path, limit: int = MAX_RECENT):
        self.path = Path(path)
        self.limit = limit
        data = read_json(self.path, [])
        self._items: list[dict] = [i for i in data if isinstance(i, dict) and "path" in i] if isinstance(data, list) else []

    def items(self) -> list[dict]:
        return list(self._items)

    def add(self, entry: Entry) -> None:
        record = {
            "name": entry.name,
            "path": entry.path,
            "size": entry.size,
            "playedAt": datetime.now().isoformat(),
        }
        self._items = [i for i in self._items if i["path"] != entry.path]
        self._items.insert(0, record)
        del self._items[self.limit:]
        self.flush()

    def clear(self) -> None:
        self._items = []
        self.flush()

    def flush(self) -> bool:
        return write_json(self.path, self._items)
