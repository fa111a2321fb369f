"""Google Cloud Storage backend: browse buckets and the virtual folders inside them."""

from __future__ import annotations

from typing import Iterable, Protocol

from goex.backend import (
    InvalidLocationError,
    ListingPage,
    ObjectNotFoundError,
    PaneBackend,
    ScopeItem,
    is_delete_target_kind,
)
from goex.entry import Entry, EntryKind, sort_entries
from goex.location import GCSLocation, GCSMode, Location
from goex.paths import (
    enter_prefix,
    hidden_by_segment,
    parent_highlight_name,
    parent_prefix,
    trim_prefix,
    unique_strings,
)

GCS_DELIMITER = "/"
MAX_GCS_ENTRIES = 20000
DEFAULT_GCS_PROJECT_ID = "goex"
DEFAULT_GCS_LOAD_TIMEOUT = 30.0


class GCSClient(Protocol):
    """The calls the GCS backend makes on a storage client."""

    def list_buckets(self, project_id: str) -> Iterable[ScopeItem | None]:
        """All buckets of ``project_id``."""

    def list_objects(
        self, bucket: str, prefix: str, delimiter: str
    ) -> Iterable[ListingPage | None]:
        """Delimited listing pages of ``bucket`` under ``prefix``."""

    def list_object_names(self, bucket: str, prefix: str) -> Iterable[str]:
        """Names of every object in ``bucket`` starting with ``prefix``."""

    def delete_object(self, bucket: str, name: str) -> None:
        """Delete one object; raises ObjectNotFoundError when it does not exist."""


def is_hidden_by_gcs_segment(path: str) -> bool:
    """True when any slash-separated segment of ``path`` starts with a dot."""
    return hidden_by_segment(path, GCS_DELIMITER)


def _check_limit(entries: list[Entry]) -> None:
    if len(entries) > MAX_GCS_ENTRIES:
        raise RuntimeError(f"gcs list exceeded max entries limit ({MAX_GCS_ENTRIES})")


class GCSBackend(PaneBackend):
    """Browses Google Cloud Storage buckets and the folders inside them."""

    def __init__(
        self,
        client: GCSClient | None,
        project_id: str = DEFAULT_GCS_PROJECT_ID,
        load_timeout: float | None = None,
    ) -> None:
        self._client = client
        self._project_id = project_id or DEFAULT_GCS_PROJECT_ID
        if load_timeout is None or load_timeout <= 0:
            load_timeout = DEFAULT_GCS_LOAD_TIMEOUT
        self._load_timeout = float(load_timeout)

    @property
    def project_id(self) -> str:
        return self._project_id

    def _require_client(self) -> GCSClient:
        if self._client is None:
            raise RuntimeError("gcs client not configured")
        return self._client

    def initial_location(self) -> Location:
        return GCSLocation(GCSMode.BUCKETS)

    def parent_highlight_name(self, state: Location) -> str:
        if not isinstance(state, GCSLocation) or state.mode != GCSMode.OBJECTS:
            return ""
        return parent_highlight_name(state.prefix, state.bucket, GCS_DELIMITER)

    def display_path(self, state: Location) -> str:
        if not isinstance(state, GCSLocation):
            return "gcs:<invalid-location>"
        if state.mode == GCSMode.BUCKETS:
            return "gcs:///"
        if not state.prefix:
            return f"gcs:///{state.bucket}"
        return f"gcs:///{state.bucket}/{state.prefix}"

    def load_timeout(self) -> float:
        return self._load_timeout

    def list(self, state: Location, show_hidden: bool) -> list[Entry]:
        if not isinstance(state, GCSLocation):
            raise InvalidLocationError()
        client = self._require_client()

        if state.mode == GCSMode.BUCKETS:
            return self._list_buckets(client, show_hidden)
        if state.mode == GCSMode.OBJECTS:
            return self._list_objects(client, state.bucket, state.prefix, show_hidden)
        raise ValueError(f"unknown gcs mode: {state.mode}")

    def enter(self, state: Location, highlighted: Entry) -> tuple[Location, bool]:
        if not isinstance(state, GCSLocation):
            raise InvalidLocationError()

        if state.mode == GCSMode.BUCKETS:
            if highlighted.kind != EntryKind.GCS_BUCKET:
                return state, False
            return GCSLocation(GCSMode.OBJECTS, bucket=highlighted.name, prefix=""), True
        if state.mode == GCSMode.OBJECTS:
            if highlighted.kind != EntryKind.DIRECTORY:
                return state, False
            next_prefix = enter_prefix(highlighted.full_path, GCS_DELIMITER)
            return GCSLocation(GCSMode.OBJECTS, bucket=state.bucket, prefix=next_prefix), True
        return state, False

    def delete(self, state: Location, highlighted: Entry) -> None:
        if not isinstance(state, GCSLocation):
            raise InvalidLocationError()
        client = self._require_client()
        if state.mode != GCSMode.OBJECTS or not is_delete_target_kind(highlighted.kind):
            return
        if not state.bucket:
            raise ValueError("gcs bucket not selected")
        object_key = highlighted.full_path or highlighted.name
        if not object_key:
            raise ValueError("gcs object key is empty")

        if highlighted.kind == EntryKind.DIRECTORY:
            self._delete_prefix_recursive(client, state.bucket, object_key)
            return
        client.delete_object(state.bucket, object_key)

    def parent(self, state: Location) -> tuple[Location, bool]:
        if not isinstance(state, GCSLocation):
            return state, False
        if state.mode == GCSMode.BUCKETS:
            return state, False
        if not state.prefix:
            return GCSLocation(GCSMode.BUCKETS), True
        parent = parent_prefix(state.prefix, GCS_DELIMITER)
        return GCSLocation(GCSMode.OBJECTS, bucket=state.bucket, prefix=parent), True

    def _list_buckets(self, client: GCSClient, show_hidden: bool) -> list[Entry]:
        entries: list[Entry] = []
        for bucket in client.list_buckets(self._project_id):
            if bucket is None or not bucket.name:
                continue
            name = bucket.name
            if not show_hidden and is_hidden_by_gcs_segment(name):
                continue
            entries.append(
                Entry(
                    name=name,
                    kind=EntryKind.GCS_BUCKET,
                    entry_id=f"gcs-bucket:{name}",
                    full_path=name,
                    mod_time=bucket.mod_time,
                )
            )
            _check_limit(entries)

        sort_entries(entries)
        return entries

    def _list_objects(
        self, client: GCSClient, bucket: str, prefix: str, show_hidden: bool
    ) -> list[Entry]:
        if not bucket:
            raise ValueError("gcs bucket not selected")

        entries: list[Entry] = []
        for page in client.list_objects(bucket, prefix, GCS_DELIMITER):
            if page is None:
                continue

            for object_prefix in page.prefixes:
                if not object_prefix:
                    continue
                full_prefix = object_prefix.removesuffix(GCS_DELIMITER)
                display_name = trim_prefix(full_prefix, prefix).removesuffix(GCS_DELIMITER)
                if not display_name:
                    continue
                if not show_hidden and is_hidden_by_gcs_segment(display_name):
                    continue
                entries.append(
                    Entry(
                        name=display_name,
                        kind=EntryKind.DIRECTORY,
                        entry_id=f"gcs-dir:{bucket}/{full_prefix}",
                        full_path=full_prefix,
                    )
                )
                _check_limit(entries)

            for item in page.objects:
                if item is None or not item.name:
                    continue
                full_name = item.name
                display_name = trim_prefix(full_name, prefix)
                if not display_name or GCS_DELIMITER in display_name:
                    continue
                if not show_hidden and is_hidden_by_gcs_segment(display_name):
                    continue
                entries.append(
                    Entry(
                        name=display_name,
                        kind=EntryKind.OBJECT,
                        entry_id=f"gcs-object:{bucket}/{full_name}",
                        full_path=full_name,
                        size_bytes=item.size_bytes,
                        mod_time=item.mod_time,
                    )
                )
                _check_limit(entries)

        sort_entries(entries)
        return entries

    def _delete_prefix_recursive(self, client: GCSClient, bucket: str, prefix: str) -> None:
        query_prefix = enter_prefix(prefix, GCS_DELIMITER)
        names = [name for name in client.list_object_names(bucket, query_prefix) if name]
        # Marker objects can exist as both "dir" and "dir/".
        names.extend((prefix, query_prefix))
        for name in unique_strings(names):
            try:
                client.delete_object(bucket, name)
            except ObjectNotFoundError:
                continue