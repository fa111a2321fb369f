"""Pane locations for the local file system and the object-store backends."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class LocalLocation:
    """A directory on the local file system."""

    path: str


class AzureMode(str, Enum):
    """What an Azure pane is currently showing."""

    CONTAINERS = "containers"
    OBJECTS = "objects"


_BUCKET_MODES = [("BUCKETS", "buckets"), ("OBJECTS", "objects")]

S3Mode = Enum("S3Mode", _BUCKET_MODES, type=str, module=__name__, qualname="S3Mode")
GCSMode = Enum("GCSMode", _BUCKET_MODES, type=str, module=__name__, qualname="GCSMode")


@dataclass(frozen=True)
class AzureLocation:
    """A position in Azure Blob Storage: the container list or a prefix inside a container."""

    mode: AzureMode
    container: str = ""
    prefix: str = ""

    @property
    def scope(self) -> str:
        """The selected container."""
        return self.container


@dataclass(frozen=True)
class _BucketLocation:
    mode: str
    bucket: str = ""
    prefix: str = ""

    @property
    def scope(self) -> str:
        """The selected bucket."""
        return self.bucket


@dataclass(frozen=True)
class S3Location(_BucketLocation):
    """A position in S3: the bucket list or a prefix inside a bucket."""


@dataclass(frozen=True)
class GCSLocation(_BucketLocation):
    """A position in Google Cloud Storage: the bucket list or a prefix inside a bucket."""


Location = Union[LocalLocation, AzureLocation, S3Location, GCSLocation]