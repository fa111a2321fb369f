"""Listing entries shown in a pane, plus size and footer formatting."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Iterable, Mapping

COLUMN_KEY_NAME = "name"
COLUMN_KEY_NAME_RAW = "__name_raw"
COLUMN_KEY_ENTRY_ID = "__entry_id"
COLUMN_KEY_SIZE = "size"
COLUMN_KEY_DATE = "date"
COLUMN_KEY_TIME = "time"

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024


class EntryKind(IntEnum):
    """The kind of thing a listing entry refers to."""

    BUCKET = 0
    GCS_BUCKET = 1
    CONTAINER = 2
    DIRECTORY = 3
    OBJECT = 4


_DIR_LIKE_KINDS = frozenset(
    {EntryKind.BUCKET, EntryKind.GCS_BUCKET, EntryKind.CONTAINER, EntryKind.DIRECTORY}
)

_KIND_MARKERS = {
    EntryKind.BUCKET: "<BKT>",
    EntryKind.GCS_BUCKET: "<BKT>",
    EntryKind.CONTAINER: "<CNT>",
    EntryKind.DIRECTORY: "<DIR>",
}


@dataclass(frozen=True)
class Entry:
    """One row of a pane listing."""

    name: str = ""
    kind: EntryKind = EntryKind.OBJECT
    entry_id: str = ""
    full_path: str = ""
    size_bytes: int = 0
    mod_time: datetime | None = None

    @property
    def has_mod_time(self) -> bool:
        return self.mod_time is not None

    def is_dir_like(self) -> bool:
        """True for entries that can be entered: buckets, containers and directories."""
        return self.kind in _DIR_LIKE_KINDS

    def type_or_size(self) -> str:
        """The marker for navigable kinds, or the formatted size for objects."""
        if self.kind == EntryKind.OBJECT:
            return format_size(self.size_bytes)
        return _KIND_MARKERS.get(self.kind, "")


def sort_entries(entries: list[Entry]) -> None:
    """Sort in place: navigable entries first, then case-insensitively by name."""
    entries.sort(key=lambda e: (not e.is_dir_like(), e.name.lower()))


def format_size(size_bytes: int) -> str:
    """Human-readable size using binary units with one decimal place."""
    if size_bytes >= _GB:
        return f"{size_bytes / _GB:.1f}G"
    if size_bytes >= _MB:
        return f"{size_bytes / _MB:.1f}M"
    if size_bytes >= _KB:
        return f"{size_bytes / _KB:.1f}K"
    return str(size_bytes)


def footer_name_or_placeholder(name: str) -> str:
    return name or "<empty>"


def pane_footer(path: str, highlighted_name: str) -> str:
    return f"{path} | {footer_name_or_placeholder(highlighted_name)}"


def selected_count(selected: Mapping[str, bool] | Iterable[tuple[str, bool]]) -> int:
    """Number of entries marked as selected."""
    items = selected.items() if isinstance(selected, Mapping) else selected
    return sum(1 for _, is_selected in items if is_selected)