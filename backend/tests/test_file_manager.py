"""Tests for the file manager facade."""

import base64

import pytest

from filedeck import __version__
from filedeck.errors import (
    DirectoryNotFoundError,
    FileNotFoundInTreeError,
    MalformedRequestError,
    NotAnImageError,
    PathValidationError,
)
from filedeck.services.file_manager import FileManager
from filedeck.services.listing import ListingOptions

from conftest import make_image_bytes


@pytest.fixture
def tree(files_root):
    (files_root / "a" / "b").mkdir(parents=True)
    (files_root / "c").mkdir()
    (files_root / ".cache").mkdir()
    (files_root / "a" / "photo.jpg").write_bytes(make_image_bytes(fmt="JPEG"))
    (files_root / "a" / "photo_thumb.jpg").write_bytes(make_image_bytes((80, 40), fmt="JPEG"))
    (files_root / "a" / "notes.txt").write_text("hello")
    return files_root


class TestRelativePaths:
    @pytest.mark.parametrize(
        "widget_path, expected",
        [
            ("/media/a/photo.jpg", "/a/photo.jpg"),
            ("/media", ""),
            ("/media/", ""),
            ("media/a", "/a"),
            ("/Files/a/b", "/a/b"),
            ("/Files", ""),
        ],
    )
    def test_mapped(self, manager, widget_path, expected):
        assert manager.to_relative_path(widget_path) == expected

    @pytest.mark.parametrize("widget_path", ["/media/../etc/passwd", "/other/a", "/mediax/a", "/"])
    def test_rejected(self, manager, widget_path):
        with pytest.raises(PathValidationError):
            manager.to_relative_path(widget_path)


class TestDirectories:
    def test_full_tree(self, manager, tree):
        dirs = manager.list_dirs()
        assert [(d.p, d.filled) for d in dirs] == [
            ("/media", True),
            ("/media/a", True),
            ("/media/a/b", True),
            ("/media/c", True),
        ]

    def test_depth_limit_marks_unfilled(self, manager, tree):
        dirs = manager.list_dirs(max_depth=1)
        assert [(d.p, d.filled) for d in dirs] == [
            ("/media", True),
            ("/media/a", False),
            ("/media/c", False),
        ]

    def test_sub_tree_and_hide_patterns(self, manager, tree):
        assert [d.p for d in manager.list_dirs("/a")] == ["/media/a", "/media/a/b"]
        assert [d.p for d in manager.list_dirs(hide_dirs=["a*"])] == ["/media", "/media/c"]

    def test_traversal_rejected(self, manager, tree):
        with pytest.raises(PathValidationError):
            manager.list_dirs("/a/../..")


class TestListings:
    def test_page_with_formats(self, manager, tree):
        page = manager.list_files_paged("/a", ListingOptions(page_size=10, formats=[("thumb", "_thumb")]))

        assert [f.name for f in page.files] == ["notes.txt", "photo.jpg"]
        notes, photo = page.files
        assert notes.formats is None and notes.width is None
        assert photo.formats["thumb"].name == "photo_thumb.jpg"
        assert notes.size == 5

    def test_dimensions_appear_after_preview(self, manager, tree):
        manager.get_preview("/a/photo.jpg")
        page = manager.list_files_paged("/a", ListingOptions(page_size=10))

        photo = next(f for f in page.files if f.name == "photo.jpg")
        assert (photo.width, photo.height) == (400, 200)
        assert photo.blur_hash

    def test_missing_directory(self, manager, tree):
        with pytest.raises(DirectoryNotFoundError):
            manager.list_files_paged("/nope", ListingOptions(page_size=10))

    def test_specified_skips_missing(self, manager, tree):
        result = manager.list_files_specified(["a/photo.jpg", "a/gone.jpg", "/a/notes.txt"])
        assert [(r.dir, r.file.name) for r in result] == [("/a", "photo.jpg"), ("/a", "notes.txt")]


class TestPreviews:
    def test_preview_and_resolution(self, manager, tree):
        result = manager.get_preview_and_resolution("/a/photo.jpg")

        assert (result.width, result.height) == (400, 200)
        prefix = "data:image/jpeg;base64,"
        assert result.preview.startswith(prefix)
        assert base64.b64decode(result.preview[len(prefix):])[:2] == b"\xff\xd8"

    def test_original(self, manager, tree):
        mime_type, location = manager.get_original("/a/photo.jpg")
        assert mime_type == "image/jpeg"
        assert location == (tree / "a" / "photo.jpg").resolve()

    def test_original_not_an_image(self, manager, tree):
        with pytest.raises(NotAnImageError):
            manager.get_original("/a/notes.txt")

    def test_original_missing(self, manager, tree):
        with pytest.raises(FileNotFoundInTreeError):
            manager.get_original("/a/gone.png")


class TestInvalidation:
    def test_invalidate_clears_cache_and_formats(self, manager, tree):
        manager.get_preview("/a/photo.jpg")
        manager.get_preview("/a/photo_thumb.jpg")

        manager.invalidate("/a/photo.jpg", ["_thumb", ""])

        assert manager.files.file_exists("/a/photo.jpg")
        assert not manager.files.exists("/a/photo_thumb.jpg")
        assert not manager.cache.exists("/previews/a/photo.jpg.json")
        assert not manager.cache.exists("/previews/a/photo.jpg.png")
        assert not manager.cache.exists("/previews/a/photo_thumb.jpg.json")

    def test_invalidate_uncached_file(self, manager, tree):
        manager.invalidate("/a/notes.txt")
        assert manager.files.file_exists("/a/notes.txt")

    def test_delete_files(self, manager, tree):
        manager.get_preview("/a/photo.jpg")
        manager.delete_files(["/a/photo.jpg"], ["_thumb"])

        assert not manager.files.exists("/a/photo.jpg")
        assert not manager.files.exists("/a/photo_thumb.jpg")
        assert not manager.cache.exists("/previews/a/photo.jpg.png")

    def test_delete_nothing(self, manager):
        with pytest.raises(MalformedRequestError):
            manager.delete_files([])


class TestNestedCacheTree:
    @pytest.fixture
    def nested(self, files_root, tree):
        manager = FileManager(files_dir=str(files_root), cache_dir=str(files_root / "thumbs"))
        manager.get_preview("/a/photo.jpg")
        return manager

    @pytest.mark.parametrize("widget_path", ["/media/thumbs", "/media/thumbs/previews/a/photo.jpg.png"])
    def test_widget_paths_rejected(self, nested, widget_path):
        with pytest.raises(PathValidationError):
            nested.to_relative_path(widget_path)

    def test_similar_name_allowed(self, nested):
        assert nested.to_relative_path("/media/thumbsup.jpg") == "/thumbsup.jpg"

    def test_hidden_from_dir_tree(self, nested):
        assert [d.p for d in nested.list_dirs()] == ["/media", "/media/a", "/media/a/b", "/media/c"]

    def test_cache_files_never_previewed_or_listed(self, nested):
        with pytest.raises(PathValidationError):
            nested.get_preview("/thumbs/previews/a/photo.jpg.png")
        with pytest.raises(PathValidationError):
            nested.list_files_paged("/thumbs/previews/a", ListingOptions(page_size=10))
        with pytest.raises(PathValidationError):
            nested.delete_files(["/thumbs/previews/a/photo.jpg.png"])
        assert not nested.cache.exists("/previews/thumbs")


class TestRootPath:
    def test_preview_of_root_rejected(self, manager, tree, cache_root):
        with pytest.raises(PathValidationError):
            manager.get_preview("")
        assert not (cache_root / "previews.json").exists()

    def test_delete_root_rejected(self, manager, tree):
        with pytest.raises(PathValidationError):
            manager.delete_files([""])
        assert (tree / "a" / "photo.jpg").is_file()


def test_version(manager, files_root, cache_root):
    info = manager.version()
    assert info.version == __version__
    assert info.dir_files == str(files_root.resolve())
    assert info.dir_cache == str(cache_root.resolve())
