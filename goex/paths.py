"""Prefix and path helpers shared by the object-store backends."""

from __future__ import annotations

from typing import Sequence


def trim_prefix(value: str, prefix: str) -> str:
    """Remove ``prefix`` from the start of ``value`` when present."""
    if prefix and value.startswith(prefix):
        return value[len(prefix):]
    return value


def enter_prefix(full_path: str, delimiter: str) -> str:
    """The listing prefix for a directory path: the path with a trailing delimiter."""
    if full_path and not full_path.endswith(delimiter):
        return full_path + delimiter
    return full_path


def parent_highlight_name(prefix: str, root_name: str, delimiter: str) -> str:
    """Name to highlight after going up from ``prefix``: its last segment or the root."""
    trimmed = prefix.removesuffix(delimiter)
    if not trimmed:
        return root_name
    return trimmed.split(delimiter)[-1]


def parent_prefix(prefix: str, delimiter: str) -> str:
    """The prefix one level above ``prefix``; empty at the top."""
    trimmed = prefix.removesuffix(delimiter)
    if not trimmed:
        return ""
    last = trimmed.rfind(delimiter)
    if last < 0:
        return ""
    return trimmed[: last + len(delimiter)]


def hidden_by_segment(path: str, delimiter: str) -> bool:
    """True when any segment of ``path`` starts with a dot."""
    return any(segment.startswith(".") for segment in path.split(delimiter))


def unique_strings(values: Sequence[str]) -> list[str]:
    """Drop duplicates and empty strings, keeping first-seen order.

    Fewer than two values are returned unchanged.
    """
    if len(values) < 2:
        return list(values)
    return list(dict.fromkeys(value for value in values if value))