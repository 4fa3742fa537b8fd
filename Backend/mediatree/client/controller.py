import logging
import math
from typing import Callable

from mediatree.client.playlist import PlaylistSequencer
from mediatree.client.progress import ProgressStore
from mediatree.client.state import (
    Closed, Ended, LoadStarted, MediaFailed, PlaybackFinished, PlaybackState,
    SeekRequested, TimeUpdated, clamp_rate, clamp_volume, reduce,
)
from mediatree.core.errors import PlaybackError
from mediatree.models.entry import Entry

logger = logging.getLogger(__name__)


class MediaElement:
    """
    The single playback surface (an HTML video element, mpv, a test fake...).

    Methods are requests. The element reports what actually happened by
    calling ``controller.handle(event)`` with the events from
    ``mediatree.client.state``. A method may raise PlaybackError when the
    request is rejected outright (autoplay policy, fullscreen denied...).
    """

    def load(self, url: str) -> None:
        raise NotImplementedError

    def unload(self) -> None:
        raise NotImplementedError

    def play(self) -> None:
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def seek(self, seconds: float) -> None:
        raise NotImplementedError

    def set_volume(self, volume: float, muted: bool) -> None:
        raise NotImplementedError

    def set_playback_rate(self, rate: float) -> None:
        raise NotImplementedError

    def request_fullscreen(self) -> None:
        raise NotImplementedError

    def exit_fullscreen(self) -> None:
        raise NotImplementedError


class PlaybackController:
    """
    Owns the authoritative PlaybackState of the one playback element.

    User commands are forwarded to the element as requests; state only moves
    when the element confirms through ``handle``. Listeners receive every new
    state, so controls can be rendered as a pure function of it.
    """

    def __init__(
        self,
        element: MediaElement,
        progress: ProgressStore,
        sequencer: PlaylistSequencer | None = None,
        source_url: Callable[[str], str] = lambda path: path,
        autoplay: bool = True,
    ):
        self.element = element
        self.progress = progress
        self.sequencer = sequencer or PlaylistSequencer()
        self.source_url = source_url
        self.autoplay = autoplay
        self.state = PlaybackState()
        self.current: Entry | None = None
        self._listeners: list[Callable[[PlaybackState], None]] = []
        self._error_listeners: list[Callable[[PlaybackError], None]] = []

    # --- Subscriptions ---

    def subscribe(self, listener: Callable[[PlaybackState], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def on_error(self, listener: Callable[[PlaybackError], None]) -> None:
        self._error_listeners.append(listener)

    # --- Lifecycle events from the element ---

    def handle(self, event) -> None:
        previous = self._apply(event)

        settled = isinstance(event, TimeUpdated) and math.isfinite(event.current_time)
        if settled and not previous.is_seeking and self.state.path:
            self.progress.save(self.state.path, self.state.current_time)
        elif isinstance(event, Ended) and previous.path:
            self._advance()
        elif isinstance(event, MediaFailed):
            self._fail(event.message)

    def _apply(self, event) -> PlaybackState:
        previous = self.state
        self.state = reduce(previous, event)
        if self.state != previous:
            for listener in list(self._listeners):
                listener(self.state)
        return previous

    def _fail(self, message: str) -> None:
        logger.warning("Playback error on %r: %s", self.state.path, message)
        error = PlaybackError(message)
        for listener in list(self._error_listeners):
            listener(error)

    def _advance(self) -> None:
        next_item = self.sequencer.on_item_ended()
        if next_item is not None:
            logger.info("Playlist continues with %r", next_item.path)
            self.load(next_item, from_playlist=True)
        else:
            self._apply(PlaybackFinished())

    def _request(self, action: Callable[[], None], what: str) -> bool:
        """
        Issue one element request. A rejected request leaves state untouched.
        """
        try:
            action()
        except PlaybackError as e:
            logger.warning("%s request rejected: %s", what, e.message)
            return False
        return True

    # --- Commands ---

    def load(self, entry: Entry, from_playlist: bool = False) -> None:
        """
        Start loading a video. Loading anything outside the active playlist
        ends that playlist.
        """
        if not from_playlist:
            self.sequencer.clear()

        self.current = entry
        self._apply(LoadStarted(entry.path))
        try:
            self.element.load(self.source_url(entry.path))
        except PlaybackError as e:
            self.handle(MediaFailed(e.message))
            return

        # Consulted once per load, after the source is set and before playback
        saved = self.progress.restore(entry.path)
        if saved:
            self.seek(saved)

        if self.autoplay:
            self.play()

    def start_playlist(self, items: list[Entry]) -> None:
        first = self.sequencer.start(items)
        self.load(first, from_playlist=True)

    def play(self) -> None:
        if self.state.path is None:
            return
        self._request(self.element.play, "Play")

    def pause(self) -> None:
        if self.state.path is None:
            return
        self._request(self.element.pause, "Pause")

    def toggle_play(self) -> None:
        if self.state.is_playing:
            self.pause()
        else:
            self.play()

    def seek(self, seconds: float) -> None:
        if self.state.path is None:
            return
        target = float(seconds)
        if not math.isfinite(target):
            return
        target = max(0.0, target)
        if self.state.is_initialized:
            target = min(target, self.state.duration)
        self._apply(SeekRequested(target))
        try:
            self.element.seek(target)
        except PlaybackError as e:
            self.handle(MediaFailed(e.message))

    def seek_by(self, delta: float) -> None:
        self.seek(self.state.current_time + delta)

    def set_volume(self, volume: float) -> None:
        volume = clamp_volume(volume)
        # Moving the slider while muted keeps the mute
        muted = self.state.is_muted or volume == 0
        self._request(lambda: self.element.set_volume(volume, muted), "Volume")

    def set_muted(self, muted: bool) -> None:
        self._request(lambda: self.element.set_volume(self.state.volume, muted), "Mute")

    def toggle_mute(self) -> None:
        self.set_muted(not self.state.is_muted)

    def set_playback_rate(self, rate: float) -> None:
        rate = clamp_rate(rate)
        self._request(lambda: self.element.set_playback_rate(rate), "Playback rate")

    def request_fullscreen(self) -> None:
        self._request(self.element.request_fullscreen, "Fullscreen")

    def exit_fullscreen(self) -> None:
        self._request(self.element.exit_fullscreen, "Exit fullscreen")

    def toggle_fullscreen(self) -> None:
        if self.state.is_fullscreen:
            self.exit_fullscreen()
        else:
            self.request_fullscreen()

    def close(self) -> None:
        """
        Close the player: remember the settled position, drop the playlist,
        release the element and reset the state.
        """
        state = self.state
        if state.path and not state.is_seeking and state.current_time > 0:
            self.progress.save(state.path, state.current_time)
        self.sequencer.clear()
        self.current = None
        self._request(self.element.unload, "Unload")
        self._apply(Closed())
