"""HTTP fetcher for Maven-layout module repositories."""
from __future__ import annotations

import logging
import os
from typing import List, Optional, Sequence
from xml.etree.ElementTree import ParseError

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from constants import Constants
from common.http_client import download_file, robust_get
from common.logging_utils import extra_context, is_debug_enabled, safe_url
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


class MavenRepositoryFetcher(ArtifactFetcher):
    """Download module artifacts from one or more remote Maven repositories.

    When the exact version is missing and ``allow_newer`` is set, the
    repository's maven-metadata.xml is consulted and the newest release at or
    above the requested version is fetched instead.
    """

    def __init__(self, repositories: Optional[Sequence[str]] = None, allow_newer: Optional[bool] = None):
        repos = repositories if repositories is not None else Constants.REPOSITORY_URLS
        self.repositories: List[str] = [r.rstrip("/") for r in repos]
        self.allow_newer = Constants.ALLOW_NEWER if allow_newer is None else allow_newer

    @property
    def name(self) -> str:
        return "remote"

    def _metadata_versions(self, repo: str, namespace: str, identifier: str) -> List[str]:
        """Return versions listed in maven-metadata.xml in source order."""
        url = f"{repo}/{group_path(namespace)}/{identifier}/{Constants.METADATA_FILE}"
        status_code, _, text = robust_get(url)
        if status_code != 200 or not text:
            return []
        try:
            root = DefusedET.fromstring(text)
        except (ParseError, DefusedXmlException):
            logger.debug("Unreadable metadata at %s", safe_url(url))
            return []
        versions_elem = root.find("versioning/versions")
        if versions_elem is None:
            return []
        return [v.text.strip() for v in versions_elem.findall("version") if v.text and v.text.strip()]

    def _download(self, repo, namespace, identifier, version, file_type, destination_dir) -> Optional[FetchedArtifact]:
        url = f"{repo}/{repository_path(namespace, identifier, version, file_type)}"
        dest = os.path.join(destination_dir, artifact_file_name(identifier, version, file_type))
        status = download_file(url, dest)
        if status != 200:
            return None
        if is_debug_enabled(logger):
            logger.debug("Artifact downloaded", extra=extra_context(
                event="fetch", component="remote", action="download",
                outcome="success", target=safe_url(url)
            ))
        return FetchedArtifact(
            path=dest,
            coordinate=Coordinate(namespace, identifier, version, file_type),
        )

    def fetch(self, namespace, identifier, version, file_type, destination_dir):
        for repo in self.repositories:
            artifact = self._download(repo, namespace, identifier, version, file_type, destination_dir)
            if artifact is not None:
                return artifact

        if self.allow_newer:
            for repo in self.repositories:
                newer = pick_newer_release(version, self._metadata_versions(repo, namespace, identifier))
                if newer is None or newer == version:
                    continue
                logger.info(
                    "%s:%s:%s not published, using newer release %s",
                    namespace, identifier, version, newer,
                )
                artifact = self._download(repo, namespace, identifier, newer, file_type, destination_dir)
                if artifact is not None:
                    return artifact

        raise ArtifactNotFoundError(f"{namespace}:{identifier}:{version}:{file_type} not found in remote repositories")
