"""
Playback state and its pure transition function.

``reduce(state, event)`` is the only way a PlaybackState changes. Events are
the lifecycle notifications of the playback element (``Played`` means the
element confirmed it is playing, not that the user pressed play), plus a few
controller-issued markers such as ``SeekRequested``.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum

from mediatree.core.errors import ValidationError

VOLUME_MIN, VOLUME_MAX = 0.0, 1.0
RATE_MIN, RATE_MAX = 0.25, 3.0


class Status(Enum):
    IDLE = "idle"
    LOADING = "loading"
    METADATA_READY = "metadata_ready"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


@dataclass(frozen=True)
class PlaybackState:
    path: str | None = None
    status: Status = Status.IDLE
    is_initialized: bool = False  # duration is known and trusted
    is_playing: bool = False
    is_muted: bool = False
    volume: float = 1.0
    playback_rate: float = 1.0
    current_time: float = 0.0
    duration: float = 0.0
    is_seeking: bool = False
    is_fullscreen: bool = False
    error: str | None = None


# --- Events ---

@dataclass(frozen=True)
class LoadStarted:
    path: str


@dataclass(frozen=True)
class MetadataLoaded:
    duration: float


@dataclass(frozen=True)
class CanPlayThrough:
    pass


@dataclass(frozen=True)
class Played:
    pass


@dataclass(frozen=True)
class Paused:
    pass


@dataclass(frozen=True)
class TimeUpdated:
    current_time: float


@dataclass(frozen=True)
class SeekRequested:
    target: float


@dataclass(frozen=True)
class Seeked:
    current_time: float


@dataclass(frozen=True)
class Ended:
    pass


@dataclass(frozen=True)
class PlaybackFinished:
    """Nothing follows the ended item."""


@dataclass(frozen=True)
class VolumeChanged:
    volume: float
    muted: bool


@dataclass(frozen=True)
class RateChanged:
    rate: float


@dataclass(frozen=True)
class FullscreenChanged:
    active: bool


@dataclass(frozen=True)
class MediaFailed:
    message: str


@dataclass(frozen=True)
class Closed:
    pass


# --- Limits ---

def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_volume(volume: float) -> float:
    return clamp(volume, VOLUME_MIN, VOLUME_MAX)


def clamp_rate(rate: float) -> float:
    return clamp(rate, RATE_MIN, RATE_MAX)


def _check_number(value, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"{what} must be a number")
    return float(value)


def validate_volume(volume) -> float:
    volume = _check_number(volume, "Volume")
    if not VOLUME_MIN <= volume <= VOLUME_MAX:
        raise ValidationError(f"Volume must be between {VOLUME_MIN:g} and {VOLUME_MAX:g}")
    return volume


def validate_rate(rate) -> float:
    rate = _check_number(rate, "Playback speed")
    if not RATE_MIN <= rate <= RATE_MAX:
        raise ValidationError(f"Playback speed must be between {RATE_MIN:g} and {RATE_MAX:g}")
    return rate


def validate_time(seconds) -> float:
    seconds = _check_number(seconds, "Time")
    if seconds < 0:
        raise ValidationError("Time must not be negative")
    return seconds


def _clamp_time(state: PlaybackState, seconds: float) -> float:
    seconds = max(0.0, seconds)
    if state.is_initialized:
        seconds = min(seconds, state.duration)
    return seconds


def reduce(state: PlaybackState, event) -> PlaybackState:
    """
    Return the state after event. Never mutates state; returns it unchanged
    when the event does not apply.
    """
    if isinstance(event, LoadStarted):
        # The element keeps volume and mute across sources; rate resets to default.
        return PlaybackState(
            path=event.path,
            status=Status.LOADING,
            volume=state.volume,
            is_muted=state.is_muted,
            is_fullscreen=state.is_fullscreen,
        )

    if isinstance(event, Closed):
        return PlaybackState(volume=state.volume, is_muted=state.is_muted)

    # Element-wide properties apply with or without a source
    if isinstance(event, VolumeChanged):
        return replace(state, volume=clamp_volume(event.volume), is_muted=event.muted)
    if isinstance(event, FullscreenChanged):
        return replace(state, is_fullscreen=event.active)

    if state.path is None:
        return state

    if isinstance(event, RateChanged):
        return replace(state, playback_rate=clamp_rate(event.rate))

    if isinstance(event, MetadataLoaded):
        status = Status.METADATA_READY if state.status == Status.LOADING else state.status
        # Live or unindexed streams report an infinite (or NaN) duration: leave it unknown
        if not math.isfinite(event.duration):
            return replace(state, status=status, is_initialized=False, duration=0.0)
        duration = max(0.0, event.duration)
        return replace(
            state,
            status=status,
            is_initialized=True,
            duration=duration,
            current_time=min(state.current_time, duration),
        )

    if isinstance(event, CanPlayThrough):
        if state.status in (Status.LOADING, Status.METADATA_READY):
            return replace(state, status=Status.READY)
        return state

    if isinstance(event, Played):
        return replace(state, status=Status.PLAYING, is_playing=True, error=None)

    if isinstance(event, Paused):
        if state.status in (Status.ENDED, Status.IDLE):
            return replace(state, is_playing=False)
        return replace(state, status=Status.PAUSED, is_playing=False)

    if isinstance(event, TimeUpdated):
        # Samples taken mid-scrub are not settled playback positions
        if state.is_seeking or not math.isfinite(event.current_time):
            return state
        return replace(state, current_time=_clamp_time(state, event.current_time))

    if isinstance(event, SeekRequested):
        return replace(state, is_seeking=True)

    if isinstance(event, Seeked):
        if not math.isfinite(event.current_time):
            return replace(state, is_seeking=False)
        return replace(state, is_seeking=False, current_time=_clamp_time(state, event.current_time))

    if isinstance(event, Ended):
        return replace(
            state,
            status=Status.ENDED,
            is_playing=False,
            is_seeking=False,
            current_time=state.duration if state.is_initialized else state.current_time,
        )

    if isinstance(event, PlaybackFinished):
        return replace(state, status=Status.IDLE, is_playing=False)

    if isinstance(event, MediaFailed):
        return replace(
            state,
            status=Status.PAUSED,
            is_playing=False,
            is_seeking=False,
            error=event.message,
        )

    return state
