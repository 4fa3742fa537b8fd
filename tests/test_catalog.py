import os
from datetime import datetime

import pytest

from conftest import set_mtime
from mediatree.core.errors import AccessDenied, NotFound, ValidationError
from mediatree.models.entry import BrowseQuery, Entry
from mediatree.services import catalog, resolver


def _names(listing):
    return [item.name for item in listing.items]


def test_video_filter_keeps_directories_and_videos(sample_tree):
    listing = catalog.list_directory(sample_tree, BrowseQuery(path="", filter_type="video"))

    by_name = {item.name: item for item in listing.items}
    assert set(by_name) == {"movies", "clip.mp4"}
    assert by_name["movies"].is_directory and not by_name["movies"].is_video
    assert by_name["movies"].size == 0
    assert by_name["clip.mp4"].is_video and not by_name["clip.mp4"].is_directory
    assert by_name["clip.mp4"].size == 500000
    assert by_name["clip.mp4"].extension == "mp4"
    assert by_name["clip.mp4"].path == "clip.mp4"
    assert by_name["clip.mp4"].mime_type == "video/mp4"


def test_other_and_directory_filters(sample_tree):
    others = catalog.list_directory(sample_tree, BrowseQuery(filter_type="other"))
    assert _names(others) == ["notes.txt"]

    dirs = catalog.list_directory(sample_tree, BrowseQuery(filter_type="directory"))
    assert _names(dirs) == ["movies"]

    everything = catalog.list_directory(sample_tree, BrowseQuery(filter_type="all"))
    assert sorted(_names(everything)) == ["clip.mp4", "movies", "notes.txt"]


def test_search_term_is_case_insensitive_and_combines_with_type(sample_tree):
    (sample_tree / "Clip-notes.txt").write_text("x", encoding="utf-8")

    listing = catalog.list_directory(sample_tree, BrowseQuery(search_term="CLIP"))
    assert sorted(_names(listing)) == ["Clip-notes.txt", "clip.mp4"]

    videos = catalog.list_directory(sample_tree, BrowseQuery(search_term="clip", filter_type="video"))
    assert _names(videos) == ["clip.mp4"]


def test_directories_and_files_are_sorted_together(sample_tree):
    listing = catalog.list_directory(sample_tree, BrowseQuery(sort_by="name"))
    assert _names(listing) == ["clip.mp4", "movies", "notes.txt"]


def test_sort_by_date(sample_tree):
    set_mtime(sample_tree / "notes.txt", datetime(2020, 1, 1))
    set_mtime(sample_tree / "clip.mp4", datetime(2021, 1, 1))
    set_mtime(sample_tree / "movies", datetime(2022, 1, 1))

    asc = catalog.list_directory(sample_tree, BrowseQuery(sort_by="date"))
    desc = catalog.list_directory(sample_tree, BrowseQuery(sort_by="date", sort_order="desc"))
    assert _names(asc) == ["notes.txt", "clip.mp4", "movies"]
    assert _names(desc) == ["movies", "clip.mp4", "notes.txt"]


def test_descending_sort_keeps_ties_in_enumeration_order(media_root):
    for name in ("b.mp4", "a.mp4", "d.mp4", "c.mp4"):
        (media_root / name).write_bytes(b"\0" * 10)
    (media_root / "small.mp4").write_bytes(b"\0" * 5)
    (media_root / "big.mp4").write_bytes(b"\0" * 50)

    enumeration = [e.name for e in catalog.scan(media_root, media_root.resolve(), "") if e.size == 10]

    asc = _names(catalog.list_directory(media_root, BrowseQuery(sort_by="size")))
    desc = _names(catalog.list_directory(media_root, BrowseQuery(sort_by="size", sort_order="desc")))

    assert asc[0] == "small.mp4" and asc[-1] == "big.mp4"
    assert desc[0] == "big.mp4" and desc[-1] == "small.mp4"
    assert asc[1:-1] == enumeration
    assert desc[1:-1] == enumeration


def test_sort_entries_reverses_the_comparator_not_the_list():
    def entry(name, size):
        return Entry(name=name, path=name, is_directory=False, is_video=True, size=size,
                     modified_at=datetime(2024, 1, 1), extension="mp4")

    items = [entry("x", 1), entry("y", 2), entry("z", 1)]
    assert [e.name for e in catalog.sort_entries(items, "size", "asc")] == ["x", "z", "y"]
    assert [e.name for e in catalog.sort_entries(items, "size", "desc")] == ["y", "x", "z"]


def test_nested_paths(sample_tree):
    (sample_tree / "movies" / "action").mkdir()
    (sample_tree / "movies" / "action" / "hero.mkv").write_bytes(b"x")

    listing = catalog.list_directory(sample_tree, BrowseQuery(path="movies/action"))
    assert listing.current_path == "movies/action"
    assert listing.parent_path == "movies"
    assert listing.items[0].path == "movies/action/hero.mkv"

    top = catalog.list_directory(sample_tree, BrowseQuery(path="movies"))
    assert top.parent_path == ""
    assert top.items[0].file_count == 1

    root = catalog.list_directory(sample_tree, BrowseQuery(path=""))
    assert root.current_path == "" and root.parent_path == ""


def test_missing_directory_and_file_paths_are_not_found(sample_tree):
    with pytest.raises(NotFound):
        catalog.list_directory(sample_tree, BrowseQuery(path="nowhere"))
    with pytest.raises(NotFound):
        catalog.list_directory(sample_tree, BrowseQuery(path="clip.mp4"))


def test_access_denied_propagates_unchanged(sample_tree):
    with pytest.raises(AccessDenied):
        catalog.list_directory(sample_tree, BrowseQuery(path="../"))


def test_symlinks_leaving_the_root_are_not_listed(tmp_path, media_root):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.mp4").write_bytes(b"x")
    os.symlink(outside, media_root / "escape")
    os.symlink(outside / "secret.mp4", media_root / "secret.mp4")
    (media_root / "ok.mp4").write_bytes(b"x")

    listing = catalog.list_directory(media_root, BrowseQuery())
    assert _names(listing) == ["ok.mp4"]


@pytest.mark.skipif(os.name == "nt", reason="POSIX file name characters")
def test_listed_paths_resolve_back_to_the_same_file(media_root):
    (media_root / "movies").mkdir()
    names = ["a\\b.mp4", "c:clip.mp4", "movies/x\\y.mkv"]
    for name in names:
        (media_root / name).write_bytes(b"x")

    listed = catalog.list_directory(media_root, BrowseQuery()).items
    listed += catalog.list_directory(media_root, BrowseQuery(path="movies")).items
    by_path = {entry.path: entry for entry in listed if not entry.is_directory}

    assert set(by_path) == set(names)
    for path in names:
        assert resolver.resolve(media_root, path) == (media_root / path).resolve()
        assert catalog.describe_path(media_root, path).name == path.rsplit("/", 1)[-1]


def test_overlong_search_term_is_rejected(sample_tree):
    with pytest.raises(ValidationError):
        catalog.list_directory(sample_tree, BrowseQuery(search_term="x" * 500))


def test_extension_allow_list_is_configurable(sample_tree, monkeypatch):
    from mediatree.core.config import settings
    monkeypatch.setattr(settings, "VIDEO_EXTENSIONS", ["txt"])

    listing = catalog.list_directory(sample_tree, BrowseQuery(filter_type="video"))
    assert sorted(_names(listing)) == ["movies", "notes.txt"]


def test_describe_path(sample_tree):
    entry = catalog.describe_path(sample_tree, "clip.mp4")
    assert entry.name == "clip.mp4" and entry.is_video
    with pytest.raises(NotFound):
        catalog.describe_path(sample_tree, "gone.mp4")
    with pytest.raises(NotFound):
        catalog.describe_path(sample_tree, "")
