"""Paged directory listing: format grouping, filtering, natural sort and pinning."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Callable, Iterable

from filedeck.errors import MalformedRequestError
from filedeck.schemas.files import FileEntry, ListingPage
from filedeck.utils.files import get_ext, is_image, name_without_ext
from filedeck.utils.natsort import strnatcmp
from filedeck.utils.storage import FileStat
from filedeck.utils.wildcard import matches, matches_any

logger = logging.getLogger(__name__)

SORT_FIELDS = ("name", "date", "size")

# Builds the enriched entry for a file name inside the listed directory
EntryBuilder = Callable[[str], FileEntry]


@dataclass
class ListingOptions:
    page_size: int
    formats: list[tuple[str, str]] = field(default_factory=list)  # (format_id, suffix)
    allow: list[str] = field(default_factory=list)
    deny: list[str] = field(default_factory=list)
    filter: str = "*"
    order_by: str = "name"
    ascending: bool = True
    last_file: str | None = None
    last_index: int | None = None
    pinned: list[str] = field(default_factory=list)


def _sort_key(stat: FileStat, order_by: str) -> tuple:
    # The trailing name is only the join key, never compared
    if order_by == "date":
        return (stat.mtime, stat.name, stat.size, stat.name)
    if order_by == "size":
        return (stat.size, stat.name, stat.mtime, stat.name)
    return (stat.name, stat.mtime, stat.size, stat.name)


def _compare(a: tuple, b: tuple) -> int:
    for i in range(3):
        x, y = a[i], b[i]
        if isinstance(x, str):
            v = strnatcmp(x, y)
            if v:
                return v
        elif x != y:
            return 1 if x > y else -1
    return 0


class DirectoryListingEngine:
    """Turns a raw directory listing into one page of enriched entries.

    Stateless; each ``list_page`` call works on the listing it is given, so
    keyset cursors (``last_file``) stay meaningful while the directory
    changes between calls.
    """

    def list_page(
        self,
        raw_files: Iterable[FileStat],
        options: ListingOptions,
        build_entry: EntryBuilder,
    ) -> ListingPage:
        if options.page_size < 1:
            raise MalformedRequestError("Page size must be positive", page_size=options.page_size)
        if options.order_by not in SORT_FIELDS:
            raise MalformedRequestError("Unknown sort field", order_by=options.order_by)

        start = now = time.perf_counter()

        primaries, siblings = self.group_formats(raw_files, options.formats)
        now = _profile("Fill image formats", now)

        if options.allow:
            self._drop(primaries, siblings, lambda n: not matches_any(options.allow, n))
        self._drop(primaries, siblings, lambda n: matches_any(options.deny, n))
        count_total = len(primaries)
        now = _profile("Allow/deny lists", now)

        self._drop(primaries, siblings, lambda n: not matches(options.filter, n, case_insensitive=True))
        count_filtered = len(primaries)
        now = _profile("Filter", now)

        names = self.sort_names(primaries, options.order_by, options.ascending)
        now = _profile("Sorting", now)

        page_names, is_end = self.paginate(
            names, options.page_size, options.last_file, options.last_index, options.pinned,
        )
        now = _profile("Page slice", now)

        files = []
        for name in page_names:
            entry = build_entry(name)
            for format_id, _suffix in options.formats:
                sibling = siblings.get(format_id, {}).get(name)
                if sibling is not None and entry.formats is not None:
                    entry.formats[format_id] = build_entry(sibling)
            files.append(entry)
        _profile("Create output list", now)
        _profile("Total", start)

        return ListingPage(
            files=files,
            count_total=count_total,
            count_filtered=count_filtered,
            is_end=is_end,
        )

    # -- steps -------------------------------------------------------------

    @staticmethod
    def group_formats(
        raw_files: Iterable[FileStat],
        formats: list[tuple[str, str]],
    ) -> tuple[list[FileStat], dict[str, dict[str, str]]]:
        """Split into primaries and ``{format_id: {base_name: sibling_name}}``.

        An image whose name (extension stripped) ends with a configured suffix
        is a sibling of ``<name without suffix>.<its own ext>``; the first
        matching suffix wins.
        """
        primaries: list[FileStat] = []
        siblings: dict[str, dict[str, str]] = {format_id: {} for format_id, _ in formats}

        for stat in raw_files:
            format_id = None
            base = name_without_ext(stat.name)
            if is_image(stat.name):
                for fid, suffix in formats:
                    if suffix and base.endswith(suffix):
                        format_id = fid
                        base = base[: -len(suffix)]
                        break

            if format_id is None:
                primaries.append(stat)
            else:
                ext = get_ext(stat.name)
                siblings[format_id][f"{base}.{ext}" if ext else base] = stat.name
        return primaries, siblings

    @staticmethod
    def _drop(
        primaries: list[FileStat],
        siblings: dict[str, dict[str, str]],
        should_drop: Callable[[str], bool],
    ) -> None:
        """Remove primaries in place, along with their format siblings."""
        kept = []
        for stat in primaries:
            if should_drop(stat.name):
                for by_base in siblings.values():
                    by_base.pop(stat.name, None)
            else:
                kept.append(stat)
        primaries[:] = kept

    @staticmethod
    def sort_names(primaries: list[FileStat], order_by: str, ascending: bool) -> list[str]:
        keys = sorted((_sort_key(s, order_by) for s in primaries), key=cmp_to_key(_compare))
        names = [k[3] for k in keys]
        if not ascending:
            names.reverse()
        return names

    @staticmethod
    def paginate(
        names: list[str],
        page_size: int,
        last_file: str | None = None,
        last_index: int | None = None,
        pinned: list[str] | None = None,
    ) -> tuple[list[str], bool]:
        """Slice one page; pinned names are moved to the front of bounded pages."""
        if page_size < 1:
            raise MalformedRequestError("Page size must be positive", page_size=page_size)
        if last_index is not None and last_index < -1:
            raise MalformedRequestError("Cursor index out of range", last_index=last_index)

        start_index = 0
        if last_index is not None:
            start_index = last_index + 1
        if last_file:
            try:
                start_index = names.index(last_file) + 1
            except ValueError:
                pass

        is_end = start_index + page_size >= len(names)

        if start_index == 0 and page_size >= len(names):
            return list(names), is_end

        present = set(names)
        pins = [p for p in dict.fromkeys(pinned or []) if p in present]
        pin_set = set(pins)
        unpinned = [n for n in names if n not in pin_set]
        return pins + unpinned[start_index:start_index + page_size], is_end


def _profile(text: str, start: float) -> float:
    now = time.perf_counter()
    logger.debug("%.3f sec   %s", now - start, text)
    return now
