from fastapi import APIRouter, Depends, Query

from mediatree.models.library import (
    Favorite, FavoriteCreate, Playlist, PlaylistCreate, PlaylistUpdate, Reorder, VideoRef,
)
from mediatree.services.library_store import (
    FavoriteStore, PlaylistStore, get_favorite_store, get_playlist_store,
)

router = APIRouter()


# --- Playlists ---

@router.get("/playlists", response_model=list[Playlist])
def list_playlists(store: PlaylistStore = Depends(get_playlist_store)):
    return store.all()


@router.post("/playlists", response_model=Playlist, status_code=201)
def create_playlist(request: PlaylistCreate, store: PlaylistStore = Depends(get_playlist_store)):
    """
    Create a playlist. Videos are given by path; the stored entries are built
    from the filesystem, so every path must be a sandboxed, existing video.
    """
    return store.create(request.name, [v.path for v in request.videos])


@router.put("/playlists", response_model=list[Playlist])
def reorder_playlists(request: Reorder, store: PlaylistStore = Depends(get_playlist_store)):
    return store.reorder(request.ids)


@router.get("/playlists/{playlist_id}", response_model=Playlist)
def get_playlist(playlist_id: str, store: PlaylistStore = Depends(get_playlist_store)):
    return store.get(playlist_id)


@router.put("/playlists/{playlist_id}", response_model=Playlist)
def update_playlist(
    playlist_id: str,
    request: PlaylistUpdate,
    store: PlaylistStore = Depends(get_playlist_store),
):
    paths = [v.path for v in request.videos] if request.videos is not None else None
    return store.update(playlist_id, name=request.name, paths=paths)


@router.delete("/playlists/{playlist_id}")
def delete_playlist(playlist_id: str, store: PlaylistStore = Depends(get_playlist_store)):
    store.delete(playlist_id)
    return {"message": "Delete successful"}


@router.post("/playlists/{playlist_id}/videos", response_model=Playlist)
def add_playlist_video(
    playlist_id: str,
    video: VideoRef,
    store: PlaylistStore = Depends(get_playlist_store),
):
    return store.add_video(playlist_id, video.path)


@router.delete("/playlists/{playlist_id}/videos", response_model=Playlist)
def remove_playlist_video(
    playlist_id: str,
    path: str = Query(description="Relative path of the video to remove"),
    store: PlaylistStore = Depends(get_playlist_store),
):
    return store.remove_video(playlist_id, path)


# --- Favorites ---

@router.get("/favorites", response_model=list[Favorite])
def list_favorites(store: FavoriteStore = Depends(get_favorite_store)):
    return store.all()


@router.post("/favorites", response_model=Favorite, status_code=201)
def add_favorite(request: FavoriteCreate, store: FavoriteStore = Depends(get_favorite_store)):
    return store.add(request.path, request.name)


@router.put("/favorites", response_model=list[Favorite])
def reorder_favorites(request: Reorder, store: FavoriteStore = Depends(get_favorite_store)):
    return store.reorder(request.ids)


@router.delete("/favorites/{favorite_id}")
def delete_favorite(favorite_id: str, store: FavoriteStore = Depends(get_favorite_store)):
    store.delete(favorite_id)
    return {"message": "Delete successful"}
