"""The pane backend interface, shared listing types and the shared backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Sequence

from goex.entry import Entry, EntryKind, sort_entries
from goex.location import AzureLocation, AzureMode, Location
from goex.paths import (
    enter_prefix,
    hidden_by_segment,
    parent_highlight_name,
    parent_prefix,
    trim_prefix,
    unique_strings,
)

MAX_LIST_ENTRIES = 20000
DEFAULT_LOAD_TIMEOUT = 10.0
DEFAULT_OBJECT_STORE_TIMEOUT = 30.0


class InvalidLocationError(ValueError):
    """A location of the wrong type was handed to a backend."""

    def __init__(self, message: str = "invalid location type for backend") -> None:
        super().__init__(message)


class ObjectNotFoundError(LookupError):
    """An object-store client reports that an object or blob does not exist."""


@dataclass(frozen=True)
class ScopeItem:
    """A top-level storage scope (bucket or container) reported by a client."""

    name: str
    mod_time: datetime | None = None


@dataclass(frozen=True)
class ObjectItem:
    """An object or blob reported by a client listing."""

    name: str
    size_bytes: int = 0
    mod_time: datetime | None = None


@dataclass
class ListingPage:
    """One page of a delimited object listing: common prefixes and objects."""

    prefixes: list[str] = field(default_factory=list)
    objects: list[ObjectItem] = field(default_factory=list)


class PaneBackend(ABC):
    """What a pane needs from a storage backend."""

    @abstractmethod
    def list(self, state: Location, show_hidden: bool) -> list[Entry]:
        """Entries at ``state``, sorted for display."""

    @abstractmethod
    def enter(self, state: Location, highlighted: Entry) -> tuple[Location, bool]:
        """The location after entering ``highlighted`` and whether it changed."""

    @abstractmethod
    def delete(self, state: Location, highlighted: Entry) -> None:
        """Delete ``highlighted``; directories are removed recursively."""

    @abstractmethod
    def parent(self, state: Location) -> tuple[Location, bool]:
        """The location one level up and whether it changed."""

    @abstractmethod
    def parent_highlight_name(self, state: Location) -> str:
        """Name of the entry to highlight after moving to the parent."""

    @abstractmethod
    def display_path(self, state: Location) -> str:
        """Human-readable path for ``state``."""

    @abstractmethod
    def load_timeout(self) -> float:
        """Time budget for a listing, in seconds."""

    @abstractmethod
    def initial_location(self) -> Location:
        """Where a new pane using this backend starts."""


def is_delete_target_kind(kind: EntryKind) -> bool:
    """Only files/objects and directories can be deleted."""
    return kind in (EntryKind.OBJECT, EntryKind.DIRECTORY)


_DEFAULT_LOCATION = AzureLocation(AzureMode.CONTAINERS)


class StaticErrorBackend(PaneBackend):
    """A backend that could not be set up: every listing fails with the same error."""

    def __init__(
        self,
        error: BaseException | None = None,
        location: Location | None = None,
        display_path: str = "azure:/",
    ) -> None:
        self._error = error
        self._location = location
        self._display_path = display_path

    def _failure(self) -> BaseException:
        return self._error if self._error is not None else RuntimeError("backend unavailable")

    def initial_location(self) -> Location:
        return self._location if self._location is not None else _DEFAULT_LOCATION

    def list(self, state: Location, show_hidden: bool) -> list[Entry]:
        raise self._failure()

    def enter(self, state: Location, highlighted: Entry) -> tuple[Location, bool]:
        return state, False

    def delete(self, state: Location, highlighted: Entry) -> None:
        raise self._failure()

    def parent(self, state: Location) -> tuple[Location, bool]:
        return state, False

    def parent_highlight_name(self, state: Location) -> str:
        return ""

    def display_path(self, state: Location) -> str:
        return self._display_path or "backend:/"

    def load_timeout(self) -> float:
        return DEFAULT_LOAD_TIMEOUT


class ObjectStoreBackend(PaneBackend):
    """Navigation, listing and deletion shared by flat object stores with virtual folders.

    Subclasses name their location type, labels and entry-id prefixes, and map
    the client hooks onto their client's calls.
    """

    _label: str
    _scope_label: str
    _empty_path_message: str
    _root_display: str
    _scope_kind: EntryKind
    _scope_id_prefix: str
    _dir_id_prefix: str
    _object_id_prefix: str
    _location_type: type
    _root_mode: Any
    _objects_mode: Any
    _delimiter = "/"

    def __init__(self, client: Any, load_timeout: float | None = None) -> None:
        self._client = client
        if load_timeout is None or load_timeout <= 0:
            load_timeout = DEFAULT_OBJECT_STORE_TIMEOUT
        self._load_timeout = float(load_timeout)

    # Client hooks.

    @abstractmethod
    def _iter_scopes(self, client: Any) -> Iterable[ScopeItem | None]:
        """Top-level scopes reported by the client."""

    @abstractmethod
    def _iter_pages(self, client: Any, scope: str, prefix: str) -> Iterable[ListingPage | None]:
        """Delimited listing pages under ``prefix``."""

    @abstractmethod
    def _iter_names(self, client: Any, scope: str, prefix: str) -> Iterable[str]:
        """Every object name starting with ``prefix``."""

    @abstractmethod
    def _delete_one(self, client: Any, scope: str, name: str) -> None:
        """Delete a single object."""

    @abstractmethod
    def _delete_names(self, client: Any, scope: str, names: Sequence[str]) -> None:
        """Delete many objects, tolerating markers that do not exist."""

    # Shared behaviour.

    def _require_client(self) -> Any:
        if self._client is None:
            raise RuntimeError(f"{self._label} client not configured")
        return self._client

    def _append_checked(self, entries: list[Entry], entry: Entry) -> None:
        entries.append(entry)
        if len(entries) > MAX_LIST_ENTRIES:
            raise RuntimeError(
                f"{self._label} list exceeded max entries limit ({MAX_LIST_ENTRIES})"
            )

    def _is_hidden(self, path: str) -> bool:
        return hidden_by_segment(path, self._delimiter)

    def _objects_location(self, scope: str, prefix: str) -> Location:
        return self._location_type(self._objects_mode, scope, prefix)

    def initial_location(self) -> Location:
        return self._location_type(self._root_mode)

    def display_path(self, state: Location) -> str:
        if not isinstance(state, self._location_type):
            return f"{self._label}:<invalid-location>"
        if state.mode == self._root_mode:
            return self._root_display
        if not state.prefix:
            return f"{self._root_display}{state.scope}"
        return f"{self._root_display}{state.scope}/{state.prefix}"

    def parent_highlight_name(self, state: Location) -> str:
        if not isinstance(state, self._location_type) or state.mode != self._objects_mode:
            return ""
        return parent_highlight_name(state.prefix, state.scope, self._delimiter)

    def load_timeout(self) -> float:
        return self._load_timeout

    def list(self, state: Location, show_hidden: bool) -> list[Entry]:
        if not isinstance(state, self._location_type):
            raise InvalidLocationError()
        client = self._require_client()

        if state.mode == self._root_mode:
            return self._list_scopes(client, show_hidden)
        if state.mode == self._objects_mode:
            return self._list_objects(client, state.scope, state.prefix, show_hidden)
        raise ValueError(f"unknown {self._label} mode: {state.mode}")

    def enter(self, state: Location, highlighted: Entry) -> tuple[Location, bool]:
        if not isinstance(state, self._location_type):
            raise InvalidLocationError()

        if state.mode == self._root_mode:
            if highlighted.kind != self._scope_kind:
                return state, False
            return self._objects_location(highlighted.name, ""), True
        if state.mode == self._objects_mode:
            if highlighted.kind != EntryKind.DIRECTORY:
                return state, False
            next_prefix = enter_prefix(highlighted.full_path, self._delimiter)
            return self._objects_location(state.scope, next_prefix), True
        return state, False

    def delete(self, state: Location, highlighted: Entry) -> None:
        if not isinstance(state, self._location_type):
            raise InvalidLocationError()
        client = self._require_client()
        if state.mode != self._objects_mode or not is_delete_target_kind(highlighted.kind):
            return
        if not state.scope:
            raise ValueError(f"{self._scope_label} not selected")
        name = highlighted.full_path or highlighted.name
        if not name:
            raise ValueError(self._empty_path_message)

        if highlighted.kind == EntryKind.DIRECTORY:
            self._delete_prefix_recursive(client, state.scope, name)
        else:
            self._delete_one(client, state.scope, name)

    def parent(self, state: Location) -> tuple[Location, bool]:
        if not isinstance(state, self._location_type) or state.mode == self._root_mode:
            return state, False
        if not state.prefix:
            return self.initial_location(), True
        return self._objects_location(state.scope, parent_prefix(state.prefix, self._delimiter)), True

    def _list_scopes(self, client: Any, show_hidden: bool) -> list[Entry]:
        entries: list[Entry] = []
        for item in self._iter_scopes(client):
            if item is None or not item.name:
                continue
            if not show_hidden and self._is_hidden(item.name):
                continue
            self._append_checked(
                entries,
                Entry(
                    name=item.name,
                    kind=self._scope_kind,
                    entry_id=f"{self._scope_id_prefix}{item.name}",
                    full_path=item.name,
                    mod_time=item.mod_time,
                ),
            )

        sort_entries(entries)
        return entries

    def _list_objects(self, client: Any, scope: str, prefix: str, show_hidden: bool) -> list[Entry]:
        if not scope:
            raise ValueError(f"{self._scope_label} not selected")

        delimiter = self._delimiter
        entries: list[Entry] = []
        for page in self._iter_pages(client, scope, prefix):
            if page is None:
                continue

            for common_prefix in page.prefixes:
                if not common_prefix:
                    continue
                full_prefix = common_prefix.removesuffix(delimiter)
                display_name = trim_prefix(full_prefix, prefix).removesuffix(delimiter)
                if not display_name or (not show_hidden and self._is_hidden(display_name)):
                    continue
                self._append_checked(
                    entries,
                    Entry(
                        name=display_name,
                        kind=EntryKind.DIRECTORY,
                        entry_id=f"{self._dir_id_prefix}{scope}/{full_prefix}",
                        full_path=full_prefix,
                    ),
                )

            for item in page.objects:
                if item is None or not item.name:
                    continue
                display_name = trim_prefix(item.name, prefix)
                if not display_name or delimiter in display_name:
                    continue
                if not show_hidden and self._is_hidden(display_name):
                    continue
                self._append_checked(
                    entries,
                    Entry(
                        name=display_name,
                        kind=EntryKind.OBJECT,
                        entry_id=f"{self._object_id_prefix}{scope}/{item.name}",
                        full_path=item.name,
                        size_bytes=item.size_bytes,
                        mod_time=item.mod_time,
                    ),
                )

        sort_entries(entries)
        return entries

    def _delete_prefix_recursive(self, client: Any, scope: str, prefix: str) -> None:
        query_prefix = enter_prefix(prefix, self._delimiter)
        names = [name for name in self._iter_names(client, scope, query_prefix) if name]
        # Marker objects can exist as both "dir" and "dir/".
        names.extend((prefix, query_prefix))
        names = unique_strings(names)
        if names:
            self._delete_names(client, scope, names)