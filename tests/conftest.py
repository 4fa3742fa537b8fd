import os
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from mediatree.client.controller import MediaElement
from mediatree.client.state import FullscreenChanged, Paused, Played, RateChanged, VolumeChanged
from mediatree.core.config import settings
from mediatree.core.errors import PlaybackError
from mediatree.models.entry import Entry


@pytest.fixture
def media_root(tmp_path, monkeypatch):
    root = tmp_path / "videos"
    root.mkdir()
    monkeypatch.setattr(settings, "MEDIA_ROOT_PATH", root)
    monkeypatch.setattr(settings, "DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(settings, "THUMBNAIL_DIR", tmp_path / "thumbnails")
    monkeypatch.setattr(settings, "ACCESS_PASSWORD", "")
    return root


@pytest.fixture
def sample_tree(media_root):
    """
    videos/
      movies/          (directory)
      clip.mp4         (500000 bytes)
      notes.txt
    """
    (media_root / "movies").mkdir()
    (media_root / "clip.mp4").write_bytes(b"\0" * 500000)
    (media_root / "notes.txt").write_text("hello", encoding="utf-8")
    return media_root


@pytest.fixture
def api(media_root):
    # Imported late so the app starts against the temporary media root
    from mediatree.main import app
    return TestClient(app)


def set_mtime(path, when: datetime):
    ts = when.timestamp()
    os.utime(path, (ts, ts))


def make_entry(path: str, size: int = 1000) -> Entry:
    name = path.rsplit("/", 1)[-1]
    return Entry(
        name=name,
        path=path,
        is_directory=False,
        is_video=True,
        size=size,
        modified_at=datetime(2024, 1, 1),
        extension=name.rsplit(".", 1)[-1],
    )


class FakeElement(MediaElement):
    """
    Records every request. Volume, rate, pause and fullscreen are confirmed
    immediately; play is confirmed unless auto_play_confirm is off or
    reject_play is set; load and seek are never confirmed automatically.
    """

    def __init__(self):
        self.controller = None
        self.calls = []
        self.auto_play_confirm = True
        self.reject_play = False
        self.reject_fullscreen = False
        self.fail_load = False

    def _confirm(self, event):
        if self.controller is not None:
            self.controller.handle(event)

    def load(self, url):
        self.calls.append(("load", url))
        if self.fail_load:
            raise PlaybackError("network error")

    def unload(self):
        self.calls.append(("unload",))

    def play(self):
        self.calls.append(("play",))
        if self.reject_play:
            raise PlaybackError("autoplay blocked")
        if self.auto_play_confirm:
            self._confirm(Played())

    def pause(self):
        self.calls.append(("pause",))
        self._confirm(Paused())

    def seek(self, seconds):
        self.calls.append(("seek", seconds))

    def set_volume(self, volume, muted):
        self.calls.append(("volume", volume, muted))
        self._confirm(VolumeChanged(volume, muted))

    def set_playback_rate(self, rate):
        self.calls.append(("rate", rate))
        self._confirm(RateChanged(rate))

    def request_fullscreen(self):
        self.calls.append(("fullscreen",))
        if self.reject_fullscreen:
            raise PlaybackError("fullscreen not allowed")
        self._confirm(FullscreenChanged(True))

    def exit_fullscreen(self):
        self.calls.append(("exit_fullscreen",))
        self._confirm(FullscreenChanged(False))


@pytest.fixture
def element():
    return FakeElement()
