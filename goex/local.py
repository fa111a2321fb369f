"""Local file system backend."""

from __future__ import annotations

import os
import shutil
import stat as stat_mod
from datetime import datetime, timezone

from goex.backend import (
    DEFAULT_LOAD_TIMEOUT,
    InvalidLocationError,
    PaneBackend,
    is_delete_target_kind,
)
from goex.entry import Entry, EntryKind, sort_entries
from goex.location import LocalLocation, Location


class OSFileSystem:
    """Thin wrapper around the operating-system file calls the backend needs."""

    def read_dir(self, name: str) -> list[os.DirEntry]:
        """Directory entries sorted by name."""
        with os.scandir(name) as it:
            return sorted(it, key=lambda entry: entry.name)

    def stat(self, name: str) -> os.stat_result:
        return os.stat(name)

    def remove(self, name: str) -> None:
        """Remove a file or an empty directory."""
        if os.path.isdir(name) and not os.path.islink(name):
            os.rmdir(name)
        else:
            os.remove(name)

    def remove_all(self, path: str) -> None:
        """Remove ``path`` and everything under it; a missing path is not an error."""
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        elif os.path.lexists(path):
            os.remove(path)


def _join(*parts: str) -> str:
    return os.path.normpath(os.path.join(*parts))


def _basename(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip(os.sep)
    return os.path.basename(stripped) if stripped else os.sep


def _as_local(state: Location) -> LocalLocation:
    if not isinstance(state, LocalLocation):
        raise InvalidLocationError()
    return state


class LocalBackend(PaneBackend):
    """Browses directories on the local disk."""

    def __init__(self, fs: OSFileSystem | None, start_path: str) -> None:
        self._fs = fs if fs is not None else OSFileSystem()
        self._start_path = start_path

    def initial_location(self) -> Location:
        return LocalLocation(self._start_path)

    def display_path(self, state: Location) -> str:
        if not isinstance(state, LocalLocation):
            return "<invalid-local-location>"
        return state.path

    def parent_highlight_name(self, state: Location) -> str:
        if not isinstance(state, LocalLocation):
            return ""
        base = _basename(state.path)
        return "" if base in (".", os.sep) else base

    def load_timeout(self) -> float:
        return DEFAULT_LOAD_TIMEOUT

    def list(self, state: Location, show_hidden: bool) -> list[Entry]:
        local = _as_local(state)

        items: list[Entry] = []
        for dir_entry in self._fs.read_dir(local.path):
            name = dir_entry.name
            if not show_hidden and name.startswith("."):
                continue
            try:
                info = dir_entry.stat(follow_symlinks=False)
            except OSError:
                continue

            full_path = _join(local.path, name)
            items.append(
                Entry(
                    name=name,
                    kind=EntryKind.DIRECTORY if stat_mod.S_ISDIR(info.st_mode) else EntryKind.OBJECT,
                    entry_id=full_path,
                    full_path=full_path,
                    size_bytes=info.st_size,
                    mod_time=datetime.fromtimestamp(info.st_mtime, tz=timezone.utc),
                )
            )

        sort_entries(items)
        return items

    def enter(self, state: Location, highlighted: Entry) -> tuple[Location, bool]:
        if not highlighted.is_dir_like():
            return state, False
        target = _join(_as_local(state).path, highlighted.name)
        if not stat_mod.S_ISDIR(self._fs.stat(target).st_mode):
            return state, False
        return LocalLocation(target), True

    def delete(self, state: Location, highlighted: Entry) -> None:
        if not is_delete_target_kind(highlighted.kind):
            return
        target = _join(_as_local(state).path, highlighted.name)
        if highlighted.kind == EntryKind.DIRECTORY:
            self._fs.remove_all(target)
        else:
            self._fs.remove(target)

    def parent(self, state: Location) -> tuple[Location, bool]:
        if not isinstance(state, LocalLocation):
            return state, False
        parent = os.path.normpath(os.path.dirname(state.path))
        if parent == state.path:
            return state, False
        return LocalLocation(parent), True