"""Artifact fetcher interface used by the resolution engine.

A fetcher turns a coordinate into a local file. The engine only depends on
this interface, so tests and alternative transports plug in freely.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from versioning.compare import is_at_least, is_snapshot, max_version
from versioning.errors import ArtifactNotFoundError, InvalidVersionError
from versioning.models import Coordinate
from versioning.parser import module_id_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchedArtifact:
    """A downloaded artifact and the coordinate that was actually fetched."""
    path: str
    coordinate: Coordinate


def group_path(namespace: str) -> str:
    """Convert a Maven group id to its repository path."""
    return namespace.replace(".", "/")


def artifact_file_name(identifier: str, version: str, file_type: str) -> str:
    """Local file name for a fetched artifact, e.g. ``idgen-4.14.0.jar``."""
    return f"{module_id_of(identifier)}-{version}.{file_type}"


def repository_path(namespace: str, identifier: str, version: str, file_type: str) -> str:
    """Relative path of an artifact inside a Maven repository layout."""
    return f"{group_path(namespace)}/{identifier}/{version}/{identifier}-{version}.{file_type}"


def pick_newer_release(requested: str, available: Iterable[str]) -> Optional[str]:
    """Pick the highest non-SNAPSHOT version not older than ``requested``.

    Malformed candidate versions are ignored.
    """
    eligible = []
    for candidate in available:
        try:
            if not is_snapshot(candidate) and is_at_least(candidate, requested):
                eligible.append(candidate)
        except InvalidVersionError:
            continue
    return max_version(eligible)


class ArtifactFetcher(ABC):
    """Produce a local file for a coordinate or fail."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name used in logs."""

    @abstractmethod
    def fetch(
        self,
        namespace: str,
        identifier: str,
        version: str,
        file_type: str,
        destination_dir: str,
    ) -> FetchedArtifact:
        """Place the artifact in ``destination_dir`` and describe it.

        Raises:
            ArtifactNotFoundError: if no matching artifact exists.
        """


class ChainFetcher(ArtifactFetcher):
    """Try several fetchers in order; the first success wins."""

    def __init__(self, fetchers: Sequence[ArtifactFetcher]):
        self.fetchers: List[ArtifactFetcher] = list(fetchers)

    @property
    def name(self) -> str:
        return "+".join(f.name for f in self.fetchers)

    def fetch(self, namespace, identifier, version, file_type, destination_dir):
        errors = []
        for fetcher in self.fetchers:
            try:
                return fetcher.fetch(namespace, identifier, version, file_type, destination_dir)
            except ArtifactNotFoundError as e:
                errors.append(f"{fetcher.name}: {e}")
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.warning("Fetcher %s failed for %s: %s", fetcher.name, identifier, e)
                errors.append(f"{fetcher.name}: {type(e).__name__}: {e}")
        raise ArtifactNotFoundError(
            f"{namespace}:{identifier}:{version}:{file_type} not found ({'; '.join(errors) or 'no fetchers'})"
        )
