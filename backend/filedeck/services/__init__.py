"""Business logic services — singleton registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from filedeck.config import settings

if TYPE_CHECKING:
    from filedeck.services.file_manager import FileManager
    from filedeck.services.path_locks import PathLocks

logger = logging.getLogger(__name__)

_file_manager: FileManager | None = None
_path_locks: PathLocks | None = None


def init_services(files_dir: str | None = None, cache_dir: str | None = None) -> None:
    """Create and wire up all service singletons."""
    global _file_manager, _path_locks

    from filedeck.services.file_manager import FileManager
    from filedeck.services.path_locks import PathLocks

    _file_manager = FileManager(
        files_dir=files_dir or settings.files_dir,
        cache_dir=cache_dir or settings.cache_dir,
    )
    _path_locks = PathLocks()
    logger.info(
        "File manager initialized (files: %s, cache: %s)",
        _file_manager.files.root, _file_manager.cache.root,
    )


def shutdown_services() -> None:
    global _file_manager, _path_locks
    _file_manager = None
    _path_locks = None


def get_file_manager() -> FileManager:
    if _file_manager is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _file_manager


def get_path_locks() -> PathLocks:
    if _path_locks is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _path_locks
