from dataclasses import dataclass, field

from mediatree.core.errors import ValidationError
from mediatree.models.entry import Entry


@dataclass
class PlaylistContext:
    items: list[Entry] = field(default_factory=list)
    current_index: int = 0

    @property
    def current(self) -> Entry | None:
        if 0 <= self.current_index < len(self.items):
            return self.items[self.current_index]
        return None


def on_item_ended(context: PlaylistContext) -> Entry | None:
    """
    Advance the cursor and return the next item, or None when the playlist
    is exhausted. There is no looping.
    """
    if context.current_index + 1 < len(context.items):
        context.current_index += 1
        return context.items[context.current_index]
    return None


class PlaylistSequencer:
    """
    Holds the playlist currently driving playback, if any.
    """

    def __init__(self):
        self.context: PlaylistContext | None = None

    @property
    def active(self) -> bool:
        return self.context is not None

    def start(self, items: list[Entry]) -> Entry:
        """
        Always starts at the first item.
        """
        if not items:
            raise ValidationError("Playlist is empty")
        self.context = PlaylistContext(items=list(items), current_index=0)
        return self.context.items[0]

    def on_item_ended(self) -> Entry | None:
        if self.context is None:
            return None
        next_item = on_item_ended(self.context)
        if next_item is None:
            self.context = None
        return next_item

    def clear(self) -> None:
        self.context = None
