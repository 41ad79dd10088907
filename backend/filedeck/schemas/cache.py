"""Cache record and cache statistics schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CacheRecord(BaseModel):
    """Side-car metadata for one source file.

    ``mtime``/``size`` are the identity snapshot. ``width``, ``height`` and
    ``blur_hash`` are filled lazily by the first successful preview render,
    so a record holding only the snapshot is valid and common.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    mtime: float
    size: int
    width: int | None = None
    height: int | None = None
    blur_hash: str | None = Field(default=None, alias="blurHash")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class CacheStats(BaseModel):
    """Cache usage statistics."""
    preview_files: int
    record_files: int
    total_size_mb: float
    disk_usage_percent: float
    cache_dir: str
