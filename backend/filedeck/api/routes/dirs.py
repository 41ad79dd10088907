"""Directory tree route."""

import asyncio

from fastapi import APIRouter, Query

from filedeck.schemas.files import DirItem
from filedeck.services import get_file_manager

router = APIRouter()


@router.get("", response_model=list[DirItem])
async def list_dirs(
    from_dir: str = Query("", alias="fromDir"),
    max_depth: int = Query(99, alias="maxDepth", ge=0),
    hide_dirs: list[str] = Query([], alias="hideDirs"),
):
    """Flat list of directories; ``filled`` is False where children were not listed."""
    fm = get_file_manager()
    return await asyncio.to_thread(fm.list_dirs, from_dir, max_depth, hide_dirs)
