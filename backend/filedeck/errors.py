"""Typed failures raised by the storage, preview and listing layers."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    PATH_VALIDATION = "path_validation"
    MALFORMED_REQUEST = "malformed_request"
    FILE_NOT_FOUND = "file_not_found"
    DIR_NOT_FOUND = "dir_not_found"
    NOT_AN_IMAGE = "not_an_image"
    SOURCE_ACCESS = "source_access"
    IMAGE_PROCESSING = "image_processing"
    CACHE_WRITE = "cache_write"
    CACHE_READ_PARSE = "cache_read_parse"


class FileDeckError(Exception):
    """Base failure. ``context`` holds structured details (path, cause, ...)."""

    kind: ErrorKind = ErrorKind.SOURCE_ACCESS
    default_message = "File operation failed"

    def __init__(self, message: str | None = None, *, is_cache_issue: bool = False, **context: Any):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.is_cache_issue = is_cache_issue
        self.context = {k: v for k, v in context.items() if v is not None}

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "isCacheIssue": self.is_cache_issue,
            "context": {k: str(v) for k, v in self.context.items()},
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(kind={self.kind.value}, message='{self.message}')>"


class PathValidationError(FileDeckError):
    kind = ErrorKind.PATH_VALIDATION
    default_message = "Path contains invalid symbols or is outside the root"


class MalformedRequestError(FileDeckError):
    kind = ErrorKind.MALFORMED_REQUEST
    default_message = "Malformed request"


class FileNotFoundInTreeError(FileDeckError):
    kind = ErrorKind.FILE_NOT_FOUND
    default_message = "File does not exist"


class DirectoryNotFoundError(FileDeckError):
    kind = ErrorKind.DIR_NOT_FOUND
    default_message = "Directory does not exist"


class NotAnImageError(FileDeckError):
    kind = ErrorKind.NOT_AN_IMAGE
    default_message = "File is not an image"


class SourceAccessError(FileDeckError):
    kind = ErrorKind.SOURCE_ACCESS
    default_message = "Unable to access file"


class ImageProcessingError(FileDeckError):
    kind = ErrorKind.IMAGE_PROCESSING
    default_message = "Unable to process image"


class CacheWriteError(FileDeckError):
    kind = ErrorKind.CACHE_WRITE
    default_message = "Unable to write into cache directory"

    def __init__(self, message: str | None = None, **context: Any):
        context.pop("is_cache_issue", None)
        super().__init__(message, is_cache_issue=True, **context)


class CacheReadParseError(FileDeckError):
    kind = ErrorKind.CACHE_READ_PARSE
    default_message = "Unable to parse cache record"

    def __init__(self, message: str | None = None, **context: Any):
        context.pop("is_cache_issue", None)
        super().__init__(message, is_cache_issue=True, **context)
