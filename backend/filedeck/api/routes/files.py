"""File API routes — paged listings, previews, originals, cache invalidation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from fastapi import APIRouter, Query
from fastapi.responses import FileResponse

from filedeck.errors import MalformedRequestError
from filedeck.schemas.files import (
    FilesRequest,
    ListFilesRequest,
    ListingPage,
    PreviewResolution,
    SpecifiedFile,
)
from filedeck.services import get_file_manager, get_path_locks
from filedeck.services.listing import ListingOptions

logger = logging.getLogger(__name__)
router = APIRouter()


async def _locked(path: str, fn: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking cache operation in a worker thread, one per path at a time."""
    async with get_path_locks().hold(path):
        worker = asyncio.ensure_future(asyncio.to_thread(fn, *args))
        try:
            return await asyncio.shield(worker)
        except asyncio.CancelledError:
            # The thread cannot be stopped; hold the lock until it is done
            await asyncio.wait({worker})
            raise


@router.post("/list", response_model=ListingPage)
async def list_files(body: ListFilesRequest):
    """One page of a directory listing with image formats attached."""
    fm = get_file_manager()
    if len(body.format_ids) != len(body.format_suffixes):
        raise MalformedRequestError(
            "formatIds and formatSuffixes differ in length",
            format_ids=len(body.format_ids), format_suffixes=len(body.format_suffixes),
        )

    dir_path = fm.to_relative_path(body.dir)
    options = ListingOptions(
        page_size=body.max_files,
        formats=list(zip(body.format_ids, body.format_suffixes)),
        allow=body.white_list,
        deny=body.black_list,
        filter=body.filter,
        order_by=body.order_by,
        ascending=body.order_asc,
        last_file=body.last_file,
        last_index=body.last_index,
        pinned=body.always_include,
    )
    return await asyncio.to_thread(fm.list_files_paged, dir_path, options)


@router.post("/specified", response_model=list[SpecifiedFile])
async def list_files_specified(body: FilesRequest):
    """Entries for root-relative paths ("dir/file.png"); missing files are skipped."""
    fm = get_file_manager()
    return await asyncio.to_thread(fm.list_files_specified, body.files)


@router.get("/preview")
async def get_preview(f: str = Query(...)):
    """Preview image from the cache, or the original for vector formats."""
    fm = get_file_manager()
    path = fm.to_relative_path(f)
    result = await _locked(path, fm.get_preview, path)
    location = fm.location_storage(result).absolute(result.location)
    return FileResponse(location, media_type=result.mime_type)


@router.get("/preview-resolution", response_model=PreviewResolution)
async def get_preview_and_resolution(f: str = Query(...)):
    """Embedded preview (data URL) plus original width/height."""
    fm = get_file_manager()
    path = fm.to_relative_path(f)
    return await _locked(path, fm.get_preview_and_resolution, path)


@router.get("/original")
async def get_original(f: str = Query(...)):
    fm = get_file_manager()
    mime_type, location = fm.get_original(fm.to_relative_path(f))
    return FileResponse(location, media_type=mime_type)


@router.post("/delete")
async def delete_files(body: FilesRequest):
    """Delete files together with their cache entries and derived formats."""
    fm = get_file_manager()
    if not body.files:
        raise MalformedRequestError("No files given")

    paths = [fm.to_relative_path(p) for p in body.files]
    for path in paths:
        await _locked(path, fm.delete_files, [path], body.format_suffixes)
    logger.info("Deleted %d file(s)", len(paths))
    return {"deleted": len(paths)}


@router.post("/invalidate")
async def invalidate(body: FilesRequest):
    """Drop cached previews (and derived formats) of overwritten files."""
    fm = get_file_manager()
    if not body.files:
        raise MalformedRequestError("No files given")

    paths = [fm.to_relative_path(p) for p in body.files]
    for path in paths:
        await _locked(path, fm.invalidate, path, body.format_suffixes)
    return {"invalidated": len(paths)}
