"""Seed data for local object-store emulators: Azurite, fake GCS and MinIO."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

logger = logging.getLogger(__name__)

BULK_FOLDERS_PER_SCOPE = 30
BULK_FILES_PER_FOLDER = 22
BULK_ROOT_FILES = 12
PROGRESS_LOG_EVERY = 250

BASE_SCOPES: tuple[str, ...] = (
    "goex-dev",
    "media",
    "finance",
    "logs",
    "reports",
    "archive",
    "datasets",
)


@dataclass(frozen=True)
class SeedProfile:
    """Naming rules for one emulator: scope and object prefixes and the scope label."""

    scope_prefix: str
    object_prefix: str
    scope_label: str

    def prefixed_scope(self, name: str) -> str:
        """The bucket or container name with this profile's prefix."""
        return self.scope_prefix + name


AZURITE_PROFILE = SeedProfile(scope_prefix="az-", object_prefix="az_", scope_label="container")
GCS_PROFILE = SeedProfile(scope_prefix="gcs-", object_prefix="gcs_", scope_label="bucket")
MINIO_PROFILE = SeedProfile(scope_prefix="s3-", object_prefix="s3_", scope_label="bucket")


@dataclass(frozen=True)
class SeedItem:
    """One object to upload: its bucket or container, its name and its text."""

    scope: str
    name: str
    content: str


class _SeedClient(Protocol):
    def ensure_scope(self, name: str) -> None:
        """Create the bucket or container if it does not exist."""

    def upload(self, scope: str, name: str, content: bytes) -> None:
        """Store ``content`` as object ``name`` in ``scope``."""


def prefixed_segment(name: str, object_prefix: str) -> str:
    """Prefix one path segment, keeping a leading dot in front."""
    if name.startswith("."):
        return "." + object_prefix + name[1:]
    return object_prefix + name


def prefixed_path(path: str, object_prefix: str) -> str:
    """Prefix every slash-separated segment of ``path``."""
    return "/".join(prefixed_segment(part, object_prefix) for part in path.split("/"))


def _scope_items(profile: SeedProfile, scope: str) -> Iterable[SeedItem]:
    label = profile.scope_label

    def item(path: str, content: str) -> SeedItem:
        return SeedItem(scope, prefixed_path(path, profile.object_prefix), content)

    yield item("root-file.txt", f"{label}={scope} root\n")
    yield item(".hidden-root.txt", f"hidden root in {scope}\n")
    yield item("configs/.secrets/app.env", f"{label.upper()}={scope}\n")

    for root_index in range(1, BULK_ROOT_FILES + 1):
        yield item(f"root-{root_index:03d}.txt", f"root file {root_index:03d} for {scope}\n")

    for folder in range(1, BULK_FOLDERS_PER_SCOPE + 1):
        for file_index in range(1, BULK_FILES_PER_FOLDER + 1):
            yield item(
                f"folder-{folder:03d}/file-{file_index:03d}.txt",
                f"{label}={scope} folder={folder:03d} file={file_index:03d}\n",
            )
        # Hidden segment for toggling hidden-entry behaviour in a pane.
        yield item(
            f"folder-{folder:03d}/.meta/hidden-{folder:03d}.json",
            f'{{"{label}":"{scope}","folder":{folder}}}\n',
        )


def generate_seed_data(profile: SeedProfile) -> list[SeedItem]:
    """Every object to seed for ``profile``, in upload order."""
    items: list[SeedItem] = []
    for base in BASE_SCOPES:
        items.extend(_scope_items(profile, profile.prefixed_scope(base)))

    # A few semantic samples used in manual checks.
    samples = (
        ("goex-dev", "docs/readme.md", "# docs\n"),
        ("goex-dev", "docs/specs/v1.txt", "spec v1\n"),
        ("media", "images/logo.png", "fakepng\n"),
        ("media", "images/icons/app.svg", "<svg></svg>\n"),
        ("media", "videos/demo.txt", "demo\n"),
    )
    items.extend(
        SeedItem(
            profile.prefixed_scope(base),
            prefixed_path(path, profile.object_prefix),
            content,
        )
        for base, path, content in samples
    )
    return items


def seed(client: _SeedClient, items: Sequence[SeedItem]) -> None:
    """Create every scope the items need, then upload the items in order."""
    scopes = sorted({item.scope for item in items})
    for scope in scopes:
        try:
            client.ensure_scope(scope)
        except Exception as exc:
            raise RuntimeError(f'ensure "{scope}": {exc}') from exc

    total = len(items)
    logger.info("Seeding %d objects across %d scopes", total, len(scopes))
    for done, item in enumerate(items, start=1):
        try:
            client.upload(item.scope, item.name, item.content.encode())
        except Exception as exc:
            raise RuntimeError(f"upload {item.scope}/{item.name}: {exc}") from exc
        if done % PROGRESS_LOG_EVERY == 0 or done == total:
            logger.info("Seed progress: %d/%d", done, total)