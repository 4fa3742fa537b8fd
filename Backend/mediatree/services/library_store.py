import json
import logging
import os
import threading
import uuid
from datetime import datetime
from pathlib import Path

from mediatree.core.config import settings
from mediatree.core.errors import NotFound, TransientIOError, ValidationError
from mediatree.models.library import Favorite, Playlist
from mediatree.services import catalog, resolver

logger = logging.getLogger(__name__)

# Characters that are not allowed in playlist names
ILLEGAL_NAME_CHARS = r'\/:*?"<>|'
MAX_NAME_LENGTH = 100

# Shared by every collection: stores are built per request
_write_lock = threading.Lock()


def validate_playlist_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Playlist name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Playlist name must be at most {MAX_NAME_LENGTH} characters")
    if any(c in ILLEGAL_NAME_CHARS for c in name):
        raise ValidationError(f"Playlist name may not contain any of {ILLEGAL_NAME_CHARS}")
    return name


class JsonCollection:
    """
    A list of records persisted as {"<key>": [...]} in one JSON file.

    Single-user, last-write-wins: the module lock only keeps two requests of
    this process from interleaving a read-modify-write.
    """

    def __init__(self, path: Path, key: str):
        self.path = Path(path)
        self.key = key

    def load(self) -> list[dict]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Could not read %s: %s", self.path, e)
            raise TransientIOError(f"Failed to load {self.key}")
        return data.get(self.key, [])

    def save(self, records: list[dict]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump({self.key: records}, f, indent=2, default=str)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Could not write %s: %s", self.path, e)
            raise TransientIOError(f"Failed to save {self.key}")

    def modify(self, change):
        """
        Run change(records) under the lock and persist the list it mutated.
        Returns whatever change returns.
        """
        with _write_lock:
            records = self.load()
            result = change(records)
            self.save(records)
            return result


def _index_of(records: list[dict], record_id: str, what: str) -> int:
    for i, record in enumerate(records):
        if record.get("id") == record_id:
            return i
    raise NotFound(f"{what} not found")


def _reordered(records: list[dict], ids: list[str]) -> list[dict]:
    """
    Records in the order of ids; records not mentioned keep their relative
    order at the end. Unknown ids are ignored.
    """
    by_id = {r["id"]: r for r in records}
    ordered = [by_id[i] for i in ids if i in by_id]
    seen = {r["id"] for r in ordered}
    return ordered + [r for r in records if r["id"] not in seen]


class PlaylistStore:
    def __init__(self, root: Path, data_dir: Path):
        self.root = root
        self.collection = JsonCollection(Path(data_dir) / "playlists.json", "playlists")

    def _entries(self, paths: list[str]) -> list[dict]:
        entries = []
        for path in paths:
            entry = catalog.describe_path(self.root, path)
            if not entry.is_video:
                raise ValidationError(f"Not a video: {entry.name}")
            entries.append(entry.model_dump(mode="json"))
        return entries

    def all(self) -> list[Playlist]:
        return [Playlist.model_validate(r) for r in self.collection.load()]

    def get(self, playlist_id: str) -> Playlist:
        records = self.collection.load()
        return Playlist.model_validate(records[_index_of(records, playlist_id, "Playlist")])

    def create(self, name: str, paths: list[str]) -> Playlist:
        name = validate_playlist_name(name)
        record = {
            "id": uuid.uuid4().hex,
            "name": name,
            "videos": self._entries(paths),
            "created": datetime.now().isoformat(),
        }
        self.collection.modify(lambda records: records.append(record))
        logger.info("Created playlist %r with %d videos", name, len(record["videos"]))
        return Playlist.model_validate(record)

    def update(self, playlist_id: str, name: str | None = None, paths: list[str] | None = None) -> Playlist:
        changes = {"updated": datetime.now().isoformat()}
        if name is not None:
            changes["name"] = validate_playlist_name(name)
        if paths is not None:
            changes["videos"] = self._entries(paths)

        def change(records):
            record = records[_index_of(records, playlist_id, "Playlist")]
            record.update(changes)
            return record

        return Playlist.model_validate(self.collection.modify(change))

    def delete(self, playlist_id: str) -> None:
        self.collection.modify(lambda records: records.pop(_index_of(records, playlist_id, "Playlist")))

    def reorder(self, ids: list[str]) -> list[Playlist]:
        def change(records):
            records[:] = _reordered(records, ids)
            return records

        return [Playlist.model_validate(r) for r in self.collection.modify(change)]

    def add_video(self, playlist_id: str, path: str) -> Playlist:
        entry = self._entries([path])[0]

        def change(records):
            record = records[_index_of(records, playlist_id, "Playlist")]
            record.setdefault("videos", []).append(entry)
            record["updated"] = datetime.now().isoformat()
            return record

        return Playlist.model_validate(self.collection.modify(change))

    def remove_video(self, playlist_id: str, path: str) -> Playlist:
        path = resolver.normalize(path)

        def change(records):
            record = records[_index_of(records, playlist_id, "Playlist")]
            record["videos"] = [v for v in record.get("videos", []) if v.get("path") != path]
            record["updated"] = datetime.now().isoformat()
            return record

        return Playlist.model_validate(self.collection.modify(change))


class FavoriteStore:
    def __init__(self, root: Path, data_dir: Path):
        self.root = root
        self.collection = JsonCollection(Path(data_dir) / "favorites.json", "favorites")

    def all(self) -> list[Favorite]:
        return [Favorite.model_validate(r) for r in self.collection.load()]

    def add(self, path: str, name: str | None = None) -> Favorite:
        entry = catalog.describe_path(self.root, path)
        record = {
            "id": uuid.uuid4().hex,
            "path": entry.path,
            "name": (name or "").strip() or entry.name,
            "added": datetime.now().isoformat(),
        }
        self.collection.modify(lambda records: records.append(record))
        return Favorite.model_validate(record)

    def delete(self, favorite_id: str) -> None:
        self.collection.modify(lambda records: records.pop(_index_of(records, favorite_id, "Favorite")))

    def reorder(self, ids: list[str]) -> list[Favorite]:
        def change(records):
            records[:] = _reordered(records, ids)
            return records

        return [Favorite.model_validate(r) for r in self.collection.modify(change)]


def get_playlist_store() -> PlaylistStore:
    return PlaylistStore(settings.MEDIA_ROOT_PATH, settings.DATA_DIR)


def get_favorite_store() -> FavoriteStore:
    return FavoriteStore(settings.MEDIA_ROOT_PATH, settings.DATA_DIR)
