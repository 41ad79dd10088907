"""Cache statistics routes."""

import asyncio

from fastapi import APIRouter

from filedeck.schemas.cache import CacheStats
from filedeck.services import get_file_manager
from filedeck.services.preview_cache import PREVIEWS_DIR
from filedeck.utils.storage import get_directory_size, get_disk_usage

router = APIRouter()


def _collect_stats() -> CacheStats:
    cache = get_file_manager().cache
    previews_root = cache.absolute(PREVIEWS_DIR)

    previews = records = 0
    if previews_root.is_dir():
        for f in previews_root.rglob("*"):
            if not f.is_file():
                continue
            if f.suffix == ".png":
                previews += 1
            elif f.suffix == ".json":
                records += 1

    return CacheStats(
        preview_files=previews,
        record_files=records,
        total_size_mb=round(get_directory_size(cache.root) / 1024 / 1024, 2),
        disk_usage_percent=get_disk_usage(cache.root)["percent"],
        cache_dir=str(cache.root),
    )


@router.get("/stats", response_model=CacheStats)
async def cache_stats():
    """Cache usage statistics."""
    return await asyncio.to_thread(_collect_stats)
