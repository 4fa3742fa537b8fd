import asyncio
import logging
from typing import Callable

from pydantic import ValidationError as PydanticValidationError

from mediatree.client.api_client import MediaTreeClient
from mediatree.client.config import ClientSettings
from mediatree.client.controller import MediaElement, PlaybackController
from mediatree.client.gate import RequestGate
from mediatree.client.history import RecentlyPlayed
from mediatree.client.playlist import PlaylistSequencer
from mediatree.client.progress import ProgressStore
from mediatree.client.shortcuts import handle_key
from mediatree.client.state import validate_rate, validate_volume
from mediatree.core.errors import MediaTreeError, ValidationError
from mediatree.models.entry import BrowseQuery, DirectoryListing, Entry, SearchResponse, VideoInfo
from mediatree.models.library import Playlist

logger = logging.getLogger(__name__)


def make_query(**params) -> BrowseQuery:
    try:
        return BrowseQuery(**params)
    except PydanticValidationError as e:
        errors = e.errors()
        raise ValidationError(errors[0]["msg"] if errors else "Invalid browse query")


class BrowserSession:
    """
    Everything one browsing session owns: the backend client, the current
    listing, the playback controller and its stores.

    Built at startup and passed explicitly; ``close`` tears it down.
    User input is validated here and raises ValidationError. Backend and
    playback failures are reported to ``on_error`` listeners and leave the
    previous listing in place.
    """

    def __init__(
        self,
        client: MediaTreeClient,
        element: MediaElement,
        progress: ProgressStore,
        history: RecentlyPlayed | None = None,
    ):
        self.client = client
        self.gate = RequestGate()
        self.progress = progress
        self.history = history
        self.sequencer = PlaylistSequencer()
        self.controller = PlaybackController(
            element, progress, self.sequencer, source_url=client.video_url
        )
        self.listing: DirectoryListing | None = None
        self.search_results: SearchResponse | None = None
        self.video_info: VideoInfo | None = None
        self.last_error: MediaTreeError | None = None
        self._listing_listeners: list[Callable[[DirectoryListing], None]] = []
        self._search_listeners: list[Callable[[SearchResponse], None]] = []
        self._error_listeners: list[Callable[[MediaTreeError], None]] = []
        self.controller.on_error(self._report)

    # --- Subscriptions ---

    def on_listing(self, listener: Callable[[DirectoryListing], None]) -> None:
        self._listing_listeners.append(listener)

    def on_search(self, listener: Callable[[SearchResponse], None]) -> None:
        self._search_listeners.append(listener)

    def on_error(self, listener: Callable[[MediaTreeError], None]) -> None:
        self._error_listeners.append(listener)

    def _report(self, error: MediaTreeError) -> None:
        self.last_error = error
        for listener in list(self._error_listeners):
            listener(error)

    # --- Browsing ---

    async def browse(self, path: str = "", search_term: str = "", sort_by: str = "name",
                     sort_order: str = "asc", filter_type: str = "all") -> DirectoryListing | None:
        """
        Load a directory listing. Returns the rendered listing, or None when
        the request was a duplicate, was superseded, or failed.
        """
        query = make_query(
            path=path, search_term=search_term, sort_by=sort_by,
            sort_order=sort_order, filter_type=filter_type,
        )
        try:
            listing = await self.gate.submit(
                "browse", query, lambda: asyncio.to_thread(self.client.browse, query)
            )
        except MediaTreeError as e:
            logger.warning("Browse of %r failed: %s", path, e.message)
            self._report(e)
            return None
        if listing is None:
            return None

        self.listing = listing
        for listener in list(self._listing_listeners):
            listener(listing)
        return listing

    async def search(self, term: str, filter_type: str = "all") -> SearchResponse | None:
        term = (term or "").strip()
        if not term:
            raise ValidationError("Search term is required")
        try:
            results = await self.gate.submit(
                "search", (term, filter_type),
                lambda: asyncio.to_thread(self.client.search, term, filter_type),
            )
        except MediaTreeError as e:
            logger.warning("Search for %r failed: %s", term, e.message)
            self._report(e)
            return None
        if results is None:
            return None

        self.search_results = results
        for listener in list(self._search_listeners):
            listener(results)
        return results

    # --- Playback ---

    async def open_video(self, entry: Entry) -> VideoInfo | None:
        """
        Fetch metadata for a user-selected video and start playing it.
        Ends any active playlist.
        """
        try:
            info = await self.gate.submit(
                "video-info", entry.path, lambda: asyncio.to_thread(self.client.video_info, entry.path)
            )
        except MediaTreeError as e:
            self._report(e)
            return None
        if info is None:
            return None

        self.video_info = info
        if self.history is not None:
            self.history.add(entry)
        self.controller.load(entry)
        return info

    def play_playlist(self, playlist: Playlist) -> None:
        self.controller.start_playlist(playlist.videos)
        if self.history is not None and self.controller.current is not None:
            self.history.add(self.controller.current)

    def set_volume(self, volume) -> None:
        self.controller.set_volume(validate_volume(volume))

    def set_playback_rate(self, rate) -> None:
        self.controller.set_playback_rate(validate_rate(rate))

    def handle_key(self, key: str) -> bool:
        return handle_key(self.controller, key)

    def close(self) -> None:
        self.controller.close()
        self.progress.flush()
        if self.history is not None:
            self.history.flush()


def build_session(element: MediaElement, settings: ClientSettings | None = None) -> BrowserSession:
    settings = settings or ClientSettings()
    client = MediaTreeClient(settings.BASE_URL, timeout=settings.REQUEST_TIMEOUT)
    return BrowserSession(
        client,
        element,
        ProgressStore(settings.STATE_DIR / "progress.json"),
        RecentlyPlayed(settings.STATE_DIR / "recent.json"),
    )
