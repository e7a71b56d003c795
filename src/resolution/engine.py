"""Transitive module resolution.

Given a root coordinate the resolver fetches the module artifact, reads the
modules it requires and works through them depth-first in declaration order.
Each module id keeps the highest version seen so far; a request at the same
or a lower version is skipped, which also stops dependency cycles. Modules
that cannot be fetched or parsed are recorded as unresolved and never abort
their siblings.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, Timer
from manifest.reader import extract_required_modules
from registry.fetcher import ArtifactFetcher, FetchedArtifact
from versioning.compare import compare_versions, validate_version
from versioning.errors import ArtifactNotFoundError, ResolutionError
from versioning.models import Coordinate, ModuleEntry, Ordering
from versioning.parser import module_id_of, normalize_artifact_id

logger = logging.getLogger(__name__)

STEP_LIMIT_REASON = "resolution step limit reached"


class ResolutionState:
    """Resolved and unresolved modules, both keyed by module id.

    Writes are last-write-wins. Readers get read-only views.
    """

    def __init__(self) -> None:
        self._resolved: Dict[str, ModuleEntry] = {}
        self._unresolved: Dict[str, ModuleEntry] = {}
        self._failures: List[ModuleEntry] = []

    @property
    def resolved(self) -> Mapping[str, ModuleEntry]:
        return MappingProxyType(self._resolved)

    @property
    def unresolved(self) -> Mapping[str, ModuleEntry]:
        return MappingProxyType(self._unresolved)

    @property
    def failures(self) -> Tuple[ModuleEntry, ...]:
        """Every failed attempt in order, including ones later superseded."""
        return tuple(self._failures)

    def mark_resolved(self, entry: ModuleEntry) -> None:
        self._resolved[entry.module_id] = entry

    def mark_unresolved(self, entry: ModuleEntry) -> None:
        self._unresolved[entry.module_id] = entry
        self._failures.append(entry)

    def reconcile(self) -> List[str]:
        """Drop unresolved records for modules that ended up resolved.

        Returns:
            list: module ids removed from the unresolved set.
        """
        removed = [module_id for module_id in self._unresolved if module_id in self._resolved]
        for module_id in removed:
            del self._unresolved[module_id]
        return removed


class ModuleResolver:
    """Resolve the dependency closure of a module.

    Args:
        fetcher: collaborator that downloads artifacts.
        candidate_groups: group ids tried for every fetch, in order.
        candidate_types: file types tried for every group, in order.
        work_dir: parent directory for the per-call temporary directory;
            the system temp directory when None.
        max_steps: cap on resolution attempts per ``resolve`` call.
    """

    def __init__(
        self,
        fetcher: ArtifactFetcher,
        *,
        candidate_groups: Optional[Sequence[str]] = None,
        candidate_types: Optional[Sequence[str]] = None,
        work_dir: Optional[str] = None,
        max_steps: Optional[int] = None,
    ):
        self.fetcher = fetcher
        self.candidate_groups = list(candidate_groups or Constants.CANDIDATE_GROUPS)
        self.candidate_types = list(candidate_types or Constants.CANDIDATE_TYPES)
        self.work_dir = work_dir if work_dir is not None else Constants.WORK_DIR
        self.max_steps = max_steps if max_steps is not None else Constants.MAX_STEPS
        self.state = ResolutionState()

    def resolve(self, namespace: str, identifier: str, version: str) -> ResolutionState:
        """Resolve ``namespace:identifier:version`` and everything it requires.

        Raises:
            OSError: if the temporary working directory cannot be created or
                removed. Failures of individual modules never raise.
        """
        if self.work_dir:
            os.makedirs(self.work_dir, exist_ok=True)
        work_dir = tempfile.mkdtemp(prefix=Constants.WORK_DIR_PREFIX, dir=self.work_dir)
        try:
            with Timer() as t:
                self._resolve_closure(Coordinate(namespace, identifier, version), work_dir)
            removed = self.state.reconcile()
            if is_debug_enabled(logger):
                logger.debug("Resolution finished", extra=extra_context(
                    event="function_exit", component="resolver", action="resolve",
                    resolved=len(self.state.resolved), unresolved=len(self.state.unresolved),
                    reconciled=len(removed), duration_ms=t.duration_ms()
                ))
        finally:
            shutil.rmtree(work_dir)
        return self.state

    def _resolve_closure(self, root: Coordinate, work_dir: str) -> None:
        # Explicit LIFO stack; children are pushed reversed so they are
        # visited in declaration order, each subtree before the next sibling.
        stack: List[Coordinate] = [root]
        steps = 0
        while stack:
            if steps >= self.max_steps:
                logger.warning(
                    "Stopping after %s resolution steps; %s pending request(s) left unresolved",
                    steps, len(stack),
                )
                for pending in stack:
                    self._mark_failed(pending, STEP_LIMIT_REASON)
                return
            steps += 1
            coord = stack.pop()
            dependencies = self._resolve_one(coord, work_dir)
            stack.extend(reversed(dependencies))

    def _resolve_one(self, coord: Coordinate, work_dir: str) -> List[Coordinate]:
        """Resolve a single module; return the dependencies still to visit."""
        artifact_id = normalize_artifact_id(coord.identifier)
        module_id = module_id_of(artifact_id)
        version = coord.version
        logger.info("Resolving: groupId=%s, artifactId=%s, version=%s", coord.namespace, artifact_id, version)

        try:
            current = self.state.resolved.get(module_id)
            if current is not None and compare_versions(current.version, version) != Ordering.LESS:
                logger.info(
                    "Already resolved %s at same or higher version (%s >= %s)",
                    module_id, current.version, version,
                )
                return []
            if current is None:
                validate_version(version)

            artifact = self._fetch(coord.namespace, artifact_id, version, work_dir)
            # Recorded before reading dependencies so a cycle back to this
            # module hits the short-circuit above.
            self.state.mark_resolved(ModuleEntry(module_id, coord.namespace, artifact.coordinate.version))
            return extract_required_modules(artifact.path)
        except ResolutionError as e:
            self._mark_failed(coord, f"{type(e).__name__}: {e}")
            return []
        except Exception as e:  # pylint: disable=broad-exception-caught
            # Corrupt archives surface as zlib.error, EOFError and the like.
            logger.debug("Unexpected error resolving %s", module_id, exc_info=True)
            self._mark_failed(coord, f"{type(e).__name__}: {e}")
            return []

    def _mark_failed(self, coord: Coordinate, reason: str) -> None:
        module_id = module_id_of(normalize_artifact_id(coord.identifier))
        self.state.mark_unresolved(ModuleEntry(module_id, coord.namespace, coord.version, reason=reason))
        logger.warning(
            "Failed to resolve: groupId=%s, artifactId=%s, version=%s",
            coord.namespace, coord.identifier, coord.version,
        )
        logger.warning("Reason: %s", reason)

    def _fetch(self, namespace: str, artifact_id: str, version: str, work_dir: str) -> FetchedArtifact:
        """Try every candidate group and file type until one fetch succeeds."""
        for group in self.candidate_groups:
            for file_type in self.candidate_types:
                try:
                    return self.fetcher.fetch(group, artifact_id, version, file_type, work_dir)
                except Exception as e:  # pylint: disable=broad-exception-caught
                    if is_debug_enabled(logger):
                        logger.debug("Fetch attempt failed", exc_info=True, extra=extra_context(
                            event="fetch", component="resolver", action="fetch",
                            outcome=type(e).__name__, target=f"{group}:{artifact_id}:{version}:{file_type}"
                        ))
        raise ArtifactNotFoundError(f"Failed to download artifact: {namespace}:{artifact_id}:{version}")
