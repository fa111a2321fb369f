from datetime import datetime, timezone

import pytest

from goex.backend import InvalidLocationError, ListingPage, ObjectItem, ObjectNotFoundError, ScopeItem
from goex.entry import Entry, EntryKind
from goex.gcs import MAX_GCS_ENTRIES, GCSBackend, is_hidden_by_gcs_segment
from goex.location import GCSLocation, GCSMode, LocalLocation, S3Location, S3Mode


class FakeGCSClient:
    def __init__(self, buckets=None, pages=None, names=None, missing=()):
        self.buckets = buckets or []
        self.pages = pages or []
        self.names = names or []
        self.missing = set(missing)
        self.deleted = []
        self.bucket_calls = []
        self.object_calls = []
        self.name_calls = []

    def list_buckets(self, project_id):
        self.bucket_calls.append(project_id)
        return iter(self.buckets)

    def list_objects(self, bucket, prefix, delimiter):
        self.object_calls.append((bucket, prefix, delimiter))
        return iter(self.pages)

    def list_object_names(self, bucket, prefix):
        self.name_calls.append((bucket, prefix))
        return iter(self.names)

    def delete_object(self, bucket, name):
        if name in self.missing:
            raise ObjectNotFoundError(name)
        self.deleted.append((bucket, name))


def test_enter_from_bucket_list_to_bucket_root():
    backend = GCSBackend(None, "goex", 0)
    start = GCSLocation(GCSMode.BUCKETS)
    nxt, changed = backend.enter(start, Entry(name="goex-dev", kind=EntryKind.GCS_BUCKET))
    assert changed is True
    assert nxt == GCSLocation(GCSMode.OBJECTS, bucket="goex-dev", prefix="")


def test_enter_ignores_s3_bucket_kind():
    backend = GCSBackend(None, "goex", 0)
    start = GCSLocation(GCSMode.BUCKETS)
    nxt, changed = backend.enter(start, Entry(name="b", kind=EntryKind.BUCKET))
    assert changed is False
    assert nxt == start


def test_enter_directory_adds_delimiter():
    backend = GCSBackend(None)
    start = GCSLocation(GCSMode.OBJECTS, bucket="b", prefix="docs/")
    nxt, changed = backend.enter(
        start, Entry(name="specs", kind=EntryKind.DIRECTORY, full_path="docs/specs")
    )
    assert changed is True
    assert nxt == GCSLocation(GCSMode.OBJECTS, bucket="b", prefix="docs/specs/")


def test_enter_rejects_wrong_location():
    with pytest.raises(InvalidLocationError):
        GCSBackend(None).enter(LocalLocation("/"), Entry(name="x", kind=EntryKind.DIRECTORY))


def test_parent_transitions():
    backend = GCSBackend(None, "goex", 0)
    loc = GCSLocation(GCSMode.OBJECTS, bucket="goex-dev", prefix="docs/specs/")

    parent, changed = backend.parent(loc)
    assert changed is True
    assert parent.prefix == "docs/"

    parent, changed = backend.parent(parent)
    assert changed is True
    assert parent.prefix == ""
    assert parent.mode == GCSMode.OBJECTS

    parent, changed = backend.parent(parent)
    assert changed is True
    assert parent.mode == GCSMode.BUCKETS

    same, changed = backend.parent(parent)
    assert changed is False
    assert same == parent


@pytest.mark.parametrize(
    "path, hidden",
    [
        ("plain.txt", False),
        (".env", True),
        ("docs/.secret/file.txt", True),
        ("docs/specs/file.txt", False),
    ],
)
def test_hidden_segment_detection(path, hidden):
    assert is_hidden_by_gcs_segment(path) is hidden


def test_display_path_convention():
    backend = GCSBackend(None, "goex", 0)
    assert backend.display_path(GCSLocation(GCSMode.BUCKETS)) == "gcs:///"
    assert backend.display_path(GCSLocation(GCSMode.OBJECTS, bucket="bucket")) == "gcs:///bucket"
    assert (
        backend.display_path(GCSLocation(GCSMode.OBJECTS, bucket="bucket", prefix="docs/"))
        == "gcs:///bucket/docs/"
    )
    assert backend.display_path(S3Location(S3Mode.BUCKETS)) == "gcs:<invalid-location>"


def test_parent_highlight_name():
    backend = GCSBackend(None)
    assert backend.parent_highlight_name(GCSLocation(GCSMode.BUCKETS)) == ""
    assert backend.parent_highlight_name(GCSLocation(GCSMode.OBJECTS, bucket="b")) == "b"
    assert (
        backend.parent_highlight_name(GCSLocation(GCSMode.OBJECTS, bucket="b", prefix="docs/specs/"))
        == "specs"
    )


def test_defaults_for_project_and_timeout():
    backend = GCSBackend(None, "", 0)
    assert backend.project_id == "goex"
    assert backend.load_timeout() == 30.0
    assert GCSBackend(None, "proj", 12).load_timeout() == 12.0


def test_initial_location():
    assert GCSBackend(None).initial_location() == GCSLocation(GCSMode.BUCKETS)


def test_list_requires_client():
    backend = GCSBackend(None, "goex", 0)
    with pytest.raises(RuntimeError, match="gcs client not configured"):
        backend.list(GCSLocation(GCSMode.BUCKETS), True)


def test_delete_requires_client():
    backend = GCSBackend(None, "goex", 0)
    with pytest.raises(RuntimeError):
        backend.delete(
            GCSLocation(GCSMode.OBJECTS, bucket="bucket"),
            Entry(name="alpha.txt", full_path="alpha.txt", kind=EntryKind.OBJECT),
        )


def test_list_rejects_wrong_location():
    with pytest.raises(InvalidLocationError):
        GCSBackend(FakeGCSClient()).list(LocalLocation("/"), True)


def test_list_buckets_uses_project_and_filters_hidden():
    created = datetime(2024, 1, 2, tzinfo=timezone.utc)
    client = FakeGCSClient(
        buckets=[ScopeItem("zeta", created), ScopeItem(".hidden"), None, ScopeItem("alpha")]
    )
    backend = GCSBackend(client, "myproj")
    entries = backend.list(GCSLocation(GCSMode.BUCKETS), False)
    assert [e.name for e in entries] == ["alpha", "zeta"]
    assert client.bucket_calls == ["myproj"]
    assert entries[1].entry_id == "gcs-bucket:zeta"
    assert entries[1].kind == EntryKind.GCS_BUCKET
    assert entries[1].mod_time == created
    assert entries[0].has_mod_time is False

    with_hidden = backend.list(GCSLocation(GCSMode.BUCKETS), True)
    assert [e.name for e in with_hidden] == [".hidden", "alpha", "zeta"]


def test_list_objects_requires_bucket():
    with pytest.raises(ValueError, match="gcs bucket not selected"):
        GCSBackend(FakeGCSClient()).list(GCSLocation(GCSMode.OBJECTS), True)


def test_list_objects_exceeding_limit_raises():
    objects = [ObjectItem(f"f{i}") for i in range(MAX_GCS_ENTRIES + 1)]
    client = FakeGCSClient(pages=[ListingPage(objects=objects)])
    with pytest.raises(RuntimeError, match="max entries limit"):
        GCSBackend(client).list(GCSLocation(GCSMode.OBJECTS, bucket="b"), True)


def test_delete_single_object():
    client = FakeGCSClient()
    GCSBackend(client).delete(
        GCSLocation(GCSMode.OBJECTS, bucket="b"),
        Entry(name="a.txt", full_path="docs/a.txt", kind=EntryKind.OBJECT),
    )
    assert client.deleted == [("b", "docs/a.txt")]


def test_delete_falls_back_to_name():
    client = FakeGCSClient()
    GCSBackend(client).delete(
        GCSLocation(GCSMode.OBJECTS, bucket="b"), Entry(name="a.txt", kind=EntryKind.OBJECT)
    )
    assert client.deleted == [("b", "a.txt")]


def test_delete_directory_recursively_skips_missing_markers():
    client = FakeGCSClient(names=["docs/a.txt", "docs/b/c.txt", "docs/a.txt"], missing={"docs"})
    GCSBackend(client).delete(
        GCSLocation(GCSMode.OBJECTS, bucket="b"),
        Entry(name="docs", full_path="docs", kind=EntryKind.DIRECTORY),
    )
    assert client.name_calls == [("b", "docs/")]
    assert client.deleted == [("b", "docs/a.txt"), ("b", "docs/b/c.txt"), ("b", "docs/")]


def test_delete_other_errors_propagate():
    class Failing(FakeGCSClient):
        def delete_object(self, bucket, name):
            raise PermissionError("denied")

    with pytest.raises(PermissionError):
        GCSBackend(Failing()).delete(
            GCSLocation(GCSMode.OBJECTS, bucket="b"),
            Entry(name="docs", full_path="docs", kind=EntryKind.DIRECTORY),
        )


def test_delete_in_bucket_mode_is_noop():
    client = FakeGCSClient()
    GCSBackend(client).delete(
        GCSLocation(GCSMode.BUCKETS), Entry(name="x", kind=EntryKind.OBJECT)
    )
    assert client.deleted == []


def test_delete_requires_bucket():
    with pytest.raises(ValueError, match="gcs bucket not selected"):
        GCSBackend(FakeGCSClient()).delete(
            GCSLocation(GCSMode.OBJECTS), Entry(name="x", kind=EntryKind.OBJECT)
        )


def test_delete_requires_key():
    with pytest.raises(ValueError, match="gcs object key is empty"):
        GCSBackend(FakeGCSClient()).delete(
            GCSLocation(GCSMode.OBJECTS, bucket="b"), Entry(kind=EntryKind.OBJECT)
        )