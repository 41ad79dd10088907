"""File manager facade — wires storage trees, preview cache and listing engine."""

from __future__ import annotations

import base64
import logging
from pathlib import Path

from filedeck import __version__
from filedeck.config import settings
from filedeck.errors import (
    FileNotFoundInTreeError,
    MalformedRequestError,
    NotAnImageError,
    PathValidationError,
)
from filedeck.schemas.cache import CacheRecord
from filedeck.schemas.files import DirItem, FileEntry, ListingPage, PreviewResolution, SpecifiedFile
from filedeck.schemas.system import VersionResponse
from filedeck.services.imaging import BlurHashEncoder, PillowCodec
from filedeck.services.listing import DirectoryListingEngine, ListingOptions
from filedeck.services.preview_cache import PreviewCache, PreviewResult
from filedeck.utils.files import basename, dirname, get_mime_type, is_image, name_without_ext
from filedeck.utils.storage import LocalStorage
from filedeck.utils.wildcard import matches_any

logger = logging.getLogger(__name__)

FILES_ALIAS = "/Files"
FORMAT_EXTS = ("png", "jpg", "jpeg", "webp")


class FileManager:
    """Operations behind the file manager widget.

    Paths taken by the methods are relative to the files root ("/a/b.jpg",
    "" for the root itself); ``to_relative_path`` converts widget paths.
    """

    def __init__(
        self,
        files_dir: str | None = None,
        cache_dir: str | None = None,
        codec: PillowCodec | None = None,
        hasher: BlurHashEncoder | None = None,
    ):
        self._files = LocalStorage(files_dir or settings.files_dir)
        self._cache = LocalStorage(cache_dir or settings.cache_dir, is_cache=True)
        self._codec = codec or PillowCodec()
        self._hasher = hasher or BlurHashEncoder()
        self._engine = DirectoryListingEngine()

        # Relative location of the cache tree when it sits inside the files tree
        try:
            rel = self._cache.root.relative_to(self._files.root)
            self._cache_rel = "/" + rel.as_posix() if rel.parts else None
        except ValueError:
            self._cache_rel = None

    @property
    def files(self) -> LocalStorage:
        return self._files

    @property
    def cache(self) -> LocalStorage:
        return self._cache

    def to_relative_path(self, path: str) -> str:
        """Map "/<root>/a/b" (or "/Files/a/b") to "/a/b"."""
        if ".." in path:
            raise PathValidationError("Path contains invalid symbols", path=path)
        if not path.startswith("/"):
            path = "/" + path
        path = path.rstrip("/") or "/"

        root = "/" + self._files.root_name
        if path == FILES_ALIAS:
            path = root
        elif path.startswith(FILES_ALIAS + "/"):
            path = root + path[len(FILES_ALIAS):]

        if path != root and not path.startswith(root + "/"):
            raise PathValidationError("Directory has incorrect root", path=path)
        relative = path[len(root):]
        self._check_outside_cache(relative)
        return relative

    def _in_cache(self, path: str) -> bool:
        if self._cache_rel is None:
            return False
        return path == self._cache_rel or path.startswith(self._cache_rel + "/")

    def _check_outside_cache(self, path: str) -> None:
        if self._in_cache(path):
            raise PathValidationError("Path points into the cache directory", path=path)

    def cached_file(self, path: str) -> PreviewCache:
        if not path.strip("/"):
            raise PathValidationError("Not a file", path=path or "/")
        self._check_outside_cache(path)
        return PreviewCache(
            path,
            self._files,
            self._cache,
            self._codec,
            self._hasher,
            quality=settings.preview_quality,
            tile_size=settings.checker_tile_size,
            hash_components=(settings.blurhash_x_components, settings.blurhash_y_components),
        )

    # -- directories -------------------------------------------------------

    def list_dirs(self, from_dir: str = "", max_depth: int = 99, hide_dirs: list[str] | None = None) -> list[DirItem]:
        """Flat directory tree under ``from_dir``, ``from_dir`` itself first."""
        from_dir = "/" + from_dir.strip("/")
        if ".." in from_dir:
            raise PathValidationError("Path contains invalid symbols", path=from_dir)
        if from_dir == "/":
            from_dir = ""
        self._check_outside_cache(from_dir)

        hidden = list(settings.hidden_dirs) + list(hide_dirs or [])
        limit = min(max_depth, settings.max_dir_depth)
        dirs: list[DirItem] = []
        self._fill_dirs(dirs, from_dir, 0, limit, hidden)
        return dirs

    def _fill_dirs(self, dirs: list[DirItem], rel: str, depth: int, limit: int, hidden: list[str]) -> None:
        expand = depth < limit
        dirs.append(DirItem(p="/" + self._files.root_name + rel, filled=expand))
        if not expand:
            return
        for name in self._files.directories(rel):
            if matches_any(hidden, name) or self._in_cache(f"{rel}/{name}"):
                continue
            self._fill_dirs(dirs, f"{rel}/{name}", depth + 1, limit, hidden)

    # -- listings ----------------------------------------------------------

    def list_files_paged(self, dir_path: str, options: ListingOptions) -> ListingPage:
        self._check_outside_cache(dir_path)
        raw = self._files.files(dir_path)
        logger.debug("Listing %s: %d raw files", dir_path or "/", len(raw))
        return self._engine.list_page(raw, options, lambda name: self.file_entry(f"{dir_path}/{name}"))

    def list_files_specified(self, paths: list[str]) -> list[SpecifiedFile]:
        """Entries for root-relative file paths; missing files are skipped."""
        result = []
        for path in paths:
            path = "/" + path.lstrip("/")
            if ".." in path:
                raise PathValidationError("Path contains invalid symbols", path=path)
            self._check_outside_cache(path)
            if self._files.file_exists(path):
                result.append(SpecifiedFile(dir=dirname(path), file=self.file_entry(path)))
        return result

    def file_entry(self, path: str) -> FileEntry:
        name = basename(path)
        record = self.get_info(path)
        if record is None:
            record = CacheRecord(mtime=self._files.mtime(path), size=self._files.size(path))

        entry = FileEntry(name=name, size=record.size, timestamp=record.mtime)
        if is_image(name):
            entry.width = record.width
            entry.height = record.height
            entry.blur_hash = record.blur_hash
            entry.formats = {}
        return entry

    # -- previews ----------------------------------------------------------

    def get_info(self, path: str) -> CacheRecord | None:
        return self.cached_file(path).get_info()

    def get_preview(self, path: str, contents: bytes | None = None) -> PreviewResult:
        return self.cached_file(path).get_preview(
            settings.preview_width, settings.preview_height, contents,
        )

    def get_preview_and_resolution(self, path: str) -> PreviewResolution:
        cached = self.cached_file(path)
        preview = cached.get_preview(settings.preview_width, settings.preview_height)
        info = cached.get_info()

        data = self.location_storage(preview).read_bytes(preview.location)
        encoded = base64.b64encode(data).decode("ascii")
        return PreviewResolution(
            width=info.width if info else None,
            height=info.height if info else None,
            preview=f"data:{preview.mime_type};base64,{encoded}",
        )

    def location_storage(self, preview: PreviewResult) -> LocalStorage:
        return self._cache if preview.origin_is_cache else self._files

    def get_original(self, path: str) -> tuple[str, Path]:
        mime_type = get_mime_type(path)
        if mime_type is None:
            raise NotAnImageError(path=path)
        if not self._files.file_exists(path):
            raise FileNotFoundInTreeError(path=path)
        return mime_type, self._files.absolute(path)

    # -- invalidation ------------------------------------------------------

    def delete_files(self, paths: list[str], format_suffixes: list[str] | None = None) -> None:
        if not paths:
            raise MalformedRequestError("No files given")
        for path in paths:
            self.cached_file(path)  # rejects the root and the cache tree
            self._files.delete(path)
            self.invalidate(path, format_suffixes)

    def invalidate(self, path: str, format_suffixes: list[str] | None = None) -> None:
        """Clear the cache entry of ``path`` and delete its derived formats.

        Derived formats are removed rather than regenerated; clients recreate
        them on demand.
        """
        self.cached_file(path).delete()

        prefix = dirname(path).rstrip("/") + "/" + name_without_ext(basename(path))
        for suffix in filter(None, format_suffixes or []):
            for ext in FORMAT_EXTS:
                sibling = f"{prefix}{suffix}.{ext}"
                if self._files.file_exists(sibling):
                    self._files.delete(sibling)
                    self.cached_file(sibling).delete()
                    logger.info("Deleted derived format %s", sibling)

    def version(self) -> VersionResponse:
        return VersionResponse(
            version=__version__,
            dir_files=str(self._files.root),
            dir_cache=str(self._cache.root),
        )
