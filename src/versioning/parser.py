"""Token parsing utilities for module coordinates."""

import re
from typing import Optional, Tuple

from constants import Constants
from .models import Coordinate

_MODULE_SUFFIX_RE = re.compile("(" + "|".join(re.escape(s) for s in Constants.MODULE_SUFFIXES) + ")+$")


def tokenize_rightmost_colon(s: str) -> Tuple[str, Optional[str]]:
    """Return (identifier, version or None) using the rightmost-colon rule."""
    s = s.strip()
    if ':' not in s:
        return s, None
    parts = s.rsplit(':', 1)
    identifier = parts[0].strip()
    tail = parts[1].strip() if len(parts) > 1 else ''
    version = tail if tail else None
    return identifier, version


def parse_coordinate(token: str) -> Coordinate:
    """Parse ``group:artifact:version`` into a Coordinate.

    The version is split off with the rightmost-colon rule, so only the
    group:artifact part has to be well formed.

    Raises:
        ValueError: if any of the three parts is missing.
    """
    id_part, version = tokenize_rightmost_colon(token)
    if version is None or id_part.count(':') != 1:
        raise ValueError(f"Invalid module coordinate '{token}'. Expected 'groupId:artifactId:version'.")
    group, artifact = (p.strip() for p in id_part.split(':', 1))
    if not group or not artifact:
        raise ValueError(f"Invalid module coordinate '{token}'. Expected 'groupId:artifactId:version'.")
    return Coordinate(namespace=group, identifier=artifact, version=version)


def normalize_artifact_id(identifier: str) -> str:
    """Ensure the identifier carries the ``-omod`` artifact suffix."""
    identifier = identifier.strip()
    if Constants.ARTIFACT_SUFFIX in identifier:
        return identifier
    return identifier + Constants.ARTIFACT_SUFFIX


def module_id_of(identifier: str) -> str:
    """Strip trailing ``-omod``/``-module`` suffixes to get the module id."""
    return _MODULE_SUFFIX_RE.sub("", identifier.strip())
