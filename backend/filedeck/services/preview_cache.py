"""Per-file preview cache — side-car record + resized preview blob.

Layout inside the cache tree mirrors the source path::

    /previews/<path/to/file.jpg>.json   CacheRecord (identity snapshot + lazy metadata)
    /previews/<path/to/file.jpg>.png    preview blob

The record is written first with only ``mtime``/``size``; width, height and
BlurHash are added by the first successful preview render, since they need
a full decode. Any mismatch of the identity snapshot invalidates the whole
entry.

Callers must serialise ``get_preview``/``delete`` per path (see
``PathLocks``); two unguarded writers can leave a record describing a blob
that is not the one on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from filedeck.errors import CacheReadParseError, ImageProcessingError
from filedeck.schemas.cache import CacheRecord
from filedeck.services.cache_identity import record_matches
from filedeck.services.imaging import BlurHashEncoder, PillowCodec, fit_preview_size
from filedeck.utils.files import get_mime_type, is_vector
from filedeck.utils.storage import LocalStorage

logger = logging.getLogger(__name__)

PREVIEWS_DIR = "/previews"


@dataclass(frozen=True)
class PreviewResult:
    mime_type: str
    location: str  # relative to the tree named by origin_is_cache
    origin_is_cache: bool  # False only for vector passthrough


class PreviewCache:
    """Cached derivatives of one source file."""

    PREVIEW_MIME_TYPE = "image/jpeg"
    PREVIEW_FORMAT = "JPEG"

    def __init__(
        self,
        file_path: str,
        files: LocalStorage,
        cache: LocalStorage,
        codec: PillowCodec,
        hasher: BlurHashEncoder,
        *,
        quality: int = 80,
        tile_size: int = 20,
        hash_components: tuple[int, int] = (4, 3),
    ):
        self._path = file_path
        self._files = files
        self._cache = cache
        self._codec = codec
        self._hasher = hasher
        self._quality = quality
        self._tile_size = tile_size
        self._hash_components = hash_components

        base = PREVIEWS_DIR + file_path
        self.record_path = base + ".json"
        self.preview_path = base + ".png"

    # -- lifecycle ---------------------------------------------------------

    def delete(self) -> None:
        """Drop record and preview. Safe to call when nothing is cached."""
        self._cache.delete(self.record_path)
        self._cache.delete(self.preview_path)

    def get_info(self) -> CacheRecord | None:
        """Current record, rewritten as a minimal snapshot when missing or stale.

        Returns None (after logging) when the persisted record can't be parsed.
        """
        mtime = self._files.mtime(self._path)
        size = self._files.size(self._path)

        try:
            record = self._read_record()
        except CacheReadParseError as e:
            logger.warning("%s: %s (%s)", e.message, self.record_path, e.context.get("cause"))
            return None

        if record_matches(record, mtime, size):
            return record

        if record is not None:
            logger.info("Cache entry for %s is stale, invalidating", self._path)
        # A blob without a matching record is never trusted
        self._cache.delete(self.preview_path)
        self._write_record(CacheRecord(mtime=mtime, size=size))

        try:
            return self._read_record()
        except CacheReadParseError as e:
            logger.warning("%s: %s (%s)", e.message, self.record_path, e.context.get("cause"))
            return None

    # -- preview -----------------------------------------------------------

    def get_preview(
        self,
        width: int | None,
        height: int | None,
        contents: bytes | None = None,
    ) -> PreviewResult:
        """Preview location, rendering it into the cache when needed.

        ``contents`` may carry already-loaded source bytes to skip a read.
        """
        if is_vector(self._path):
            return PreviewResult(get_mime_type(self._path), self._path, origin_is_cache=False)

        record = self._current_record()

        has_blob = self._cache.file_exists(self.preview_path)
        if has_blob and (record.width is None or record.height is None):
            # Render interrupted before its dimensions were recorded
            logger.info("Preview for %s has no recorded dimensions, regenerating", self._path)
            self._cache.delete(self.preview_path)
            has_blob = False

        original_size: tuple[int, int] | None = None
        rendered = None
        if not has_blob:
            logger.debug("Rendering preview for %s", self._path)
            rendered, original_size = self._render(width, height, contents)
            self._cache.write_bytes(
                self.preview_path,
                self._codec.encode(rendered, self.PREVIEW_FORMAT, self._quality),
            )

        changed = False
        if record.blur_hash is None:
            image = rendered
            if image is None:
                image = self._codec.decode(self._cache.read_bytes(self.preview_path))
            x, y = self._hash_components
            token = self._hasher.encode_hash(self._codec.raw_pixels(image), x, y)
            if self._hasher.is_valid_token(token):
                record.blur_hash = token
                changed = True
            else:
                logger.warning("Discarding invalid BlurHash for %s", self._path)

        if original_size is not None and (record.width, record.height) != original_size:
            record.width, record.height = original_size
            changed = True

        if changed:
            self._write_record(record)

        return PreviewResult(self.PREVIEW_MIME_TYPE, self.preview_path, origin_is_cache=True)

    def _render(self, width, height, contents):
        if contents is None:
            contents = self._files.read_bytes(self._path)

        image = self._codec.decode(contents)
        image = self._codec.normalize_orientation(image)
        original_width, original_height = self._codec.dimensions(image)
        if original_width <= 0 or original_height <= 0:
            raise ImageProcessingError(
                "Image has no area", path=self._path, width=original_width, height=original_height,
            )

        target = fit_preview_size(original_width, original_height, width, height)
        resized = self._codec.resize(image, *target)
        return (
            self._codec.composite_over_checkerboard(resized, self._tile_size),
            (original_width, original_height),
        )

    # -- record I/O --------------------------------------------------------

    def _current_record(self) -> CacheRecord:
        record = self.get_info()
        if record is None:
            # Unparseable record: start the entry over
            self.delete()
            record = self.get_info()
            if record is None:
                raise CacheReadParseError(path=self.record_path)
        return record

    def _read_record(self) -> CacheRecord | None:
        if not self._cache.file_exists(self.record_path):
            return None
        raw = self._cache.read_bytes(self.record_path)
        try:
            return CacheRecord.model_validate_json(raw)
        except ValidationError as e:
            raise CacheReadParseError(path=self.record_path, cause=e)

    def _write_record(self, record: CacheRecord) -> None:
        self._cache.write_bytes(self.record_path, record.to_json().encode("utf-8"))

    def __repr__(self) -> str:
        return f"<PreviewCache(path='{self._path}')>"
