import math
from dataclasses import dataclass

from mediatree.client.state import PlaybackState


@dataclass(frozen=True)
class ControlsView:
    play_icon: str  # "play" or "pause": the action the button performs
    mute_icon: str  # "volume-up" or "volume-mute"
    volume_slider: int  # 0-100, shows 0 while muted
    rate_label: str
    fullscreen_icon: str  # "expand" or "compress"
    progress_percent: float
    current_label: str
    duration_label: str
    seeking: bool
    error: str | None


def format_time(seconds: float) -> str:
    """
    m:ss below an hour, h:mm:ss above.
    """
    if not math.isfinite(seconds):
        return "--:--"
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def render_controls(state: PlaybackState) -> ControlsView:
    """
    Controls are derived from state only, never set independently.
    """
    if state.is_initialized and state.duration > 0:
        percent = state.current_time / state.duration * 100
    else:
        percent = 0.0

    return ControlsView(
        play_icon="pause" if state.is_playing else "play",
        mute_icon="volume-mute" if state.is_muted else "volume-up",
        volume_slider=0 if state.is_muted else round(state.volume * 100),
        rate_label=f"{state.playback_rate:g}x",
        fullscreen_icon="compress" if state.is_fullscreen else "expand",
        progress_percent=percent,
        current_label=format_time(state.current_time),
        duration_label=format_time(state.duration) if state.is_initialized else "--:--",
        seeking=state.is_seeking,
        error=state.error,
    )
