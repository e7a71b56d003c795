"""Fetcher reading from a local Maven repository directory (``~/.m2`` layout)."""
from __future__ import annotations

import logging
import os
import shutil
from typing import List, Optional

from constants import Constants
from versioning.errors import ArtifactNotFoundError
from versioning.models import Coordinate

from .fetcher import (
    ArtifactFetcher,
    FetchedArtifact,
    artifact_file_name,
    group_path,
    pick_newer_release,
    repository_path,
)

logger = logging.getLogger(__name__)


class LocalRepositoryFetcher(ArtifactFetcher):
    """Copy artifacts out of a local repository into the working directory."""

    def __init__(self, root: Optional[str] = None, allow_newer: Optional[bool] = None):
        self.root = os.path.expanduser(root or Constants.LOCAL_REPOSITORY)
        self.allow_newer = Constants.ALLOW_NEWER if allow_newer is None else allow_newer

    @property
    def name(self) -> str:
        return "local"

    def _available_versions(self, namespace: str, identifier: str) -> List[str]:
        base = os.path.join(self.root, *group_path(namespace).split("/"), identifier)
        if not os.path.isdir(base):
            return []
        return sorted(d for d in os.listdir(base) if os.path.isdir(os.path.join(base, d)))

    def _source(self, namespace, identifier, version, file_type) -> str:
        return os.path.join(self.root, *repository_path(namespace, identifier, version, file_type).split("/"))

    def fetch(self, namespace, identifier, version, file_type, destination_dir):
        chosen = version
        source = self._source(namespace, identifier, version, file_type)
        if not os.path.isfile(source) and self.allow_newer:
            newer = pick_newer_release(version, self._available_versions(namespace, identifier))
            if newer is not None and newer != version:
                candidate = self._source(namespace, identifier, newer, file_type)
                if os.path.isfile(candidate):
                    logger.info(
                        "%s:%s:%s not in local repository, using newer release %s",
                        namespace, identifier, version, newer,
                    )
                    chosen, source = newer, candidate
        if not os.path.isfile(source):
            raise ArtifactNotFoundError(f"{namespace}:{identifier}:{version}:{file_type} not found in {self.root}")

        dest = os.path.join(destination_dir, artifact_file_name(identifier, chosen, file_type))
        shutil.copyfile(source, dest)
        return FetchedArtifact(path=dest, coordinate=Coordinate(namespace, identifier, chosen, file_type))
