"""Local storage driver and disk space utilities."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import NamedTuple

from filedeck.errors import (
    CacheWriteError,
    DirectoryNotFoundError,
    FileNotFoundInTreeError,
    PathValidationError,
    SourceAccessError,
)

logger = logging.getLogger(__name__)


class FileStat(NamedTuple):
    name: str
    mtime: float  # milliseconds
    size: int


def get_disk_usage(path: str | Path) -> dict:
    """Get disk usage for the given path."""
    usage = shutil.disk_usage(str(path))
    return {
        "total_bytes": usage.total,
        "used_bytes": usage.used,
        "free_bytes": usage.free,
        "percent": round(usage.used / usage.total * 100, 1) if usage.total > 0 else 0,
    }


def get_directory_size(path: str | Path) -> int:
    """Calculate total size of all files in a directory (recursive)."""
    total = 0
    for f in Path(path).rglob("*"):
        if f.is_file():
            total += f.stat().st_size
    return total


class LocalStorage:
    """A rooted directory tree addressed by "/"-prefixed relative paths.

    The same class backs both the source tree and the cache tree. With
    ``is_cache=True`` write and delete failures surface as ``CacheWriteError``
    so callers can tell a cache problem from a source-tree one.
    """

    def __init__(self, root: str | Path, is_cache: bool = False):
        self._root = Path(root).resolve()
        self._is_cache = is_cache
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise self._write_error("Unable to create root directory", path=str(self._root), cause=e)
        if not os.access(self._root, os.R_OK | os.W_OK):
            raise self._write_error("Root directory is not readable or writable", path=str(self._root))

    @property
    def root(self) -> Path:
        return self._root

    @property
    def root_name(self) -> str:
        return self._root.name

    @property
    def is_cache(self) -> bool:
        return self._is_cache

    def absolute(self, path: str) -> Path:
        """Resolve a relative path inside the root, rejecting traversal."""
        parts = [p for p in path.replace("\\", "/").split("/") if p not in ("", ".")]
        if ".." in parts:
            raise PathValidationError(path=path)
        full = self._root.joinpath(*parts)
        if full != self._root and self._root not in full.resolve().parents:
            raise PathValidationError(path=path)
        return full

    # -- queries -----------------------------------------------------------

    def exists(self, path: str) -> bool:
        return self.absolute(path).exists()

    def file_exists(self, path: str) -> bool:
        return self.absolute(path).is_file()

    def dir_exists(self, path: str) -> bool:
        return self.absolute(path).is_dir()

    def size(self, path: str) -> int:
        return self._stat(path).st_size

    def mtime(self, path: str) -> float:
        """Modification time in milliseconds, at full platform resolution."""
        return self._stat(path).st_mtime_ns / 1_000_000

    def _stat(self, path: str) -> os.stat_result:
        try:
            return self.absolute(path).stat()
        except FileNotFoundError as e:
            raise FileNotFoundInTreeError(path=path, cause=e, is_cache_issue=self._is_cache)
        except OSError as e:
            raise SourceAccessError(path=path, cause=e, is_cache_issue=self._is_cache)

    def files(self, path: str) -> list[FileStat]:
        """Regular files directly inside ``path`` (non-recursive)."""
        result: list[FileStat] = []
        for entry in self._scandir(path):
            try:
                if not entry.is_file():
                    continue
                st = entry.stat()
            except FileNotFoundError:
                # Removed between listing and stat
                continue
            result.append(FileStat(entry.name, st.st_mtime_ns / 1_000_000, st.st_size))
        return result

    def directories(self, path: str) -> list[str]:
        names = []
        for entry in self._scandir(path):
            try:
                if entry.is_dir():
                    names.append(entry.name)
            except OSError:
                continue
        return sorted(names)

    def _scandir(self, path: str) -> list[os.DirEntry]:
        full = self.absolute(path)
        if not full.is_dir():
            raise DirectoryNotFoundError(path=path, is_cache_issue=self._is_cache)
        try:
            with os.scandir(full) as it:
                return list(it)
        except OSError as e:
            raise SourceAccessError(
                "Unable to list children in the directory",
                path=path, cause=e, is_cache_issue=self._is_cache,
            )

    # -- contents ----------------------------------------------------------

    def read_bytes(self, path: str) -> bytes:
        try:
            return self.absolute(path).read_bytes()
        except FileNotFoundError as e:
            raise FileNotFoundInTreeError(path=path, cause=e, is_cache_issue=self._is_cache)
        except OSError as e:
            raise SourceAccessError(path=path, cause=e, is_cache_issue=self._is_cache)

    def write_bytes(self, path: str, data: bytes) -> None:
        """Write atomically: temp file in the target directory, then rename."""
        full = self.absolute(path)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{full.name}.", suffix=".tmp", dir=full.parent)
        except OSError as e:
            raise self._write_error("Unable to create a file", path=path, cause=e)

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, full)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise self._write_error(path=path, cause=e)

    def delete(self, path: str) -> None:
        """Delete a file or a whole directory. Missing paths are ignored."""
        full = self.absolute(path)
        try:
            if full.is_file() or full.is_symlink():
                full.unlink()
            elif full.is_dir():
                shutil.rmtree(full)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise self._write_error("Unable to delete", path=path, cause=e)

    def _write_error(self, message: str | None = None, **context):
        if self._is_cache:
            return CacheWriteError(message, **context)
        return SourceAccessError(message or "Unable to write file", **context)

    def __repr__(self) -> str:
        return f"<LocalStorage(root='{self._root}', is_cache={self._is_cache})>"
