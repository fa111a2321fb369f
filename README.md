# goex

`goex` is the core of a two-pane file manager. Each pane browses one
backend. A backend can list a location, enter a directory or bucket, go to
the parent, delete an entry and give a printable path. This package has
backends for the local file system and for Google Cloud Storage. It also has
the shared pieces that object-store backends are built from, and seed data
for filling local object-store emulators.

## Modules

- `goex.location` holds the location types. `LocalLocation` is a path.
  `AzureLocation` (with `AzureMode`), `S3Location` (with `S3Mode`) and
  `GCSLocation` (with `GCSMode`) are each either the list of buckets or
  containers, or a prefix inside one of them.
- `goex.entry` holds `Entry` and `EntryKind`. It also has `sort_entries`,
  which puts directory-like entries first and then sorts by name without
  regard to case. `format_size` gives sizes such as `1.5K`. The footer
  helpers are `pane_footer`, `footer_name_or_placeholder` and
  `selected_count`.
- `goex.paths` holds prefix helpers: `trim_prefix`, `enter_prefix`,
  `parent_prefix`, `parent_highlight_name`, `hidden_by_segment` and
  `unique_strings`.
- `goex.backend` holds the `PaneBackend` interface and
  `StaticErrorBackend`. That backend stands in for one that could not be set
  up, and raises its stored error on every list and delete. The module also
  holds the listing types a client reports (`ScopeItem`, `ObjectItem`,
  `ListingPage`), `InvalidLocationError` and `ObjectNotFoundError`. Last, it
  holds `ObjectStoreBackend`, an abstract base that gives navigation,
  listing and recursive deletion to any flat object store with virtual
  folders.
- `goex.local` holds `LocalBackend` and `OSFileSystem`.
- `goex.gcs` holds `GCSBackend`.
- `goex.seed` builds sample data for object-store emulators.

## Browsing the local file system

```python
import os

from goex.local import LocalBackend, OSFileSystem

backend = LocalBackend(OSFileSystem(), os.getcwd())
here = backend.initial_location()

for entry in backend.list(here, show_hidden=False):
    print(entry.name, entry.type_or_size())

parent, changed = backend.parent(here)
print(backend.display_path(parent) if changed else "already at the root")
```

`enter(state, highlighted)` returns the new location and whether it
changed. `delete(state, highlighted)` removes a file. When the entry is a
directory, it removes the whole directory tree. If you pass a location of
the wrong type, the backend raises `InvalidLocationError`.

## Google Cloud Storage

`GCSBackend(client, project_id="goex", load_timeout=None)` takes any object
that has these methods:

- `list_buckets(project_id)` yields `ScopeItem`s.
- `list_objects(bucket, prefix, delimiter)` yields `ListingPage`s.
- `list_object_names(bucket, prefix)` yields names.
- `delete_object(bucket, name)` deletes one object. It raises
  `ObjectNotFoundError` when the object does not exist.

Navigation needs no client:

```python
from goex.gcs import GCSBackend
from goex.location import GCSLocation, GCSMode

backend = GCSBackend(None)
location = GCSLocation(mode=GCSMode.OBJECTS, bucket="media", prefix="images/icons/")
parent, _ = backend.parent(location)
print(backend.display_path(parent))   # gcs:///media/images/
```

If you list or delete without a client, you get an error. A name counts as
hidden when one of its segments starts with a dot. Hidden names are left out
unless `show_hidden` is true. A listing of more than 20,000 entries raises an
error. To delete a directory, the backend removes every object under its
prefix, plus any `dir` and `dir/` marker objects. Markers that are missing
are skipped.

## Seed data

`generate_seed_data(profile)` returns the `SeedItem`s for one emulator. The
profiles are `AZURITE_PROFILE`, `GCS_PROFILE` and `MINIO_PROFILE`. Each
profile has its own scope prefix and object prefix. Every scope gets the
same things:

- root files and a hidden root file
- a hidden `configs/.secrets` file
- 30 folders of 22 files, each folder with a hidden `.meta` file

A few sample documents come at the end. `seed(client, items)` first calls
`client.ensure_scope(name)` once for each scope, in sorted order. Then it
calls `client.upload(scope, name, content)` once for each item, and logs its
progress.

## What this package does not do

The package has no interactive screen and no command to start. It also has
no backend picker. It holds no ready-made backends for Azure Blob Storage or
S3; you can build them on `ObjectStoreBackend` with your own client.
Copying and moving between panes are not part of the package. It does not
open files in an editor. It does not create storage clients or connect to
real services. Every object-store client is one that you supply.