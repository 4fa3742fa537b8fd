from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from mediatree.models.entry import Entry, WireModel


class Playlist(WireModel):
    id: str
    name: str
    videos: list[Entry] = []
    created: datetime
    updated: Optional[datetime] = None


class Favorite(WireModel):
    id: str
    path: str
    name: str
    added: datetime


class VideoRef(WireModel):
    """
    A video submitted by path. The server builds the stored Entry itself.
    """
    path: str


class PlaylistCreate(WireModel):
    name: str
    videos: list[VideoRef] = []


class PlaylistUpdate(WireModel):
    name: Optional[str] = None
    videos: Optional[list[VideoRef]] = None


class FavoriteCreate(WireModel):
    path: str
    name: Optional[str] = None  # Defaults to the file name


class Reorder(WireModel):
    """
    The complete list of ids in the desired order.
    """
    ids: list[str] = Field(default_factory=list)


class Token(BaseModel):
    # OAuth2 field names, not camelCased
    access_token: str
    token_type: str = "bearer"
