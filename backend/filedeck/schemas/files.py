"""File listing and preview schemas — wire names follow the widget (camelCase)."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class FileEntry(_CamelModel):
    """One enriched file in a listing. Image-only fields stay None for other files."""
    name: str
    size: int
    timestamp: float
    width: int | None = None
    height: int | None = None
    blur_hash: str | None = Field(default=None, alias="blurHash")
    formats: dict[str, "FileEntry"] | None = None


class ListingPage(_CamelModel):
    files: list[FileEntry]
    count_total: int = Field(alias="countTotal")
    count_filtered: int = Field(alias="countFiltered")
    is_end: bool = Field(alias="isEnd")


class ListFilesRequest(_CamelModel):
    dir: str
    max_files: int = Field(0, alias="maxFiles")
    last_file: str | None = Field(None, alias="lastFile")
    last_index: int | None = Field(None, alias="lastIndex", ge=-1)
    always_include: list[str] = Field(default_factory=list, alias="alwaysInclude")
    white_list: list[str] = Field(default_factory=list, alias="whiteList")
    black_list: list[str] = Field(default_factory=list, alias="blackList")
    filter: str = "*"
    order_by: Literal["name", "date", "size"] = Field("name", alias="orderBy")
    order_asc: bool = Field(True, alias="orderAsc")
    format_ids: list[str] = Field(default_factory=list, alias="formatIds")
    format_suffixes: list[str] = Field(default_factory=list, alias="formatSuffixes")


class FilesRequest(_CamelModel):
    files: list[str]
    format_suffixes: list[str] = Field(default_factory=list, alias="formatSuffixes")


class SpecifiedFile(BaseModel):
    dir: str
    file: FileEntry


class DirItem(BaseModel):
    """Directory tree node; ``filled`` is False when children were not listed."""
    p: str
    filled: bool


class PreviewResolution(BaseModel):
    width: int | None = None
    height: int | None = None
    preview: str | None = None  # data URL
