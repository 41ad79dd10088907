"""Staleness check for cached previews."""

from __future__ import annotations

from filedeck.schemas.cache import CacheRecord


def is_valid(source_mtime: float, source_size: int, record_mtime: float | None, record_size: int | None) -> bool:
    """True iff the recorded snapshot equals the current one. No tolerance window."""
    if record_mtime is None or record_size is None:
        return False
    return source_mtime == record_mtime and source_size == record_size


def record_matches(record: CacheRecord | None, source_mtime: float, source_size: int) -> bool:
    if record is None:
        return False
    return is_valid(source_mtime, source_size, record.mtime, record.size)
