"""Ordering of dotted numeric versions with optional pre-release qualifiers.

A version is a numeric base (``1.2.0``) optionally followed by ``-`` and a
qualifier (``1.2.0-beta``). Bases compare segment by segment with missing
trailing segments treated as 0, a release outranks any qualified version of
the same base, and qualifiers rank ``alpha < beta < SNAPSHOT``. Qualifiers
outside that list rank below all known ones and compare lexically among
themselves, case-insensitively.
"""

from functools import cmp_to_key
from typing import Iterable, List, Optional, Tuple

from constants import Constants
from .errors import InvalidVersionError
from .models import Ordering

ParsedVersion = Tuple[List[int], str]


def parse_version(version: str) -> ParsedVersion:
    """Split ``version`` into integer base segments and a qualifier.

    Raises:
        InvalidVersionError: if the string is empty or a base segment is not
            a non-negative integer.
    """
    if not isinstance(version, str) or not version.strip():
        raise InvalidVersionError(version, "empty version")
    text = version.strip()
    base, sep, qualifier = text.partition("-")
    if sep and not qualifier:
        raise InvalidVersionError(version, "empty qualifier")
    segments = []
    for part in base.split("."):
        if not part.isdigit() or not part.isascii():
            raise InvalidVersionError(version, f"non-numeric segment {part!r}")
        segments.append(int(part))
    return segments, qualifier


def _qualifier_rank(qualifier: str) -> int:
    """Index in the known qualifier list, or -1 when unknown."""
    try:
        return Constants.QUALIFIERS.index(qualifier.lower())
    except ValueError:
        return -1


def _sign(value: int) -> Ordering:
    if value < 0:
        return Ordering.LESS
    if value > 0:
        return Ordering.GREATER
    return Ordering.EQUAL


def _compare_qualifiers(q1: str, q2: str) -> Ordering:
    if q1.lower() == q2.lower():
        return Ordering.EQUAL
    # A release outranks any pre-release.
    if not q1:
        return Ordering.GREATER
    if not q2:
        return Ordering.LESS
    r1, r2 = _qualifier_rank(q1), _qualifier_rank(q2)
    if r1 != r2:
        return _sign(r1 - r2)
    a, b = q1.lower(), q2.lower()
    return _sign((a > b) - (a < b))


def compare_versions(v1: str, v2: str) -> Ordering:
    """Compare two versions.

    Returns:
        Ordering: LESS, EQUAL or GREATER for ``v1`` relative to ``v2``.

    Raises:
        InvalidVersionError: if either version is malformed.
    """
    base1, q1 = parse_version(v1)
    base2, q2 = parse_version(v2)
    for i in range(max(len(base1), len(base2))):
        p1 = base1[i] if i < len(base1) else 0
        p2 = base2[i] if i < len(base2) else 0
        if p1 != p2:
            return _sign(p1 - p2)
    return _compare_qualifiers(q1, q2)


def validate_version(version: str) -> str:
    """Probe ``version`` against the base version ``0``.

    Returns the version unchanged so callers can use it inline.
    """
    compare_versions("0", version)
    return version


def is_at_least(version: str, minimum: str) -> bool:
    """True when ``version`` is equal to or newer than ``minimum``."""
    return compare_versions(version, minimum) != Ordering.LESS


def is_snapshot(version: str) -> bool:
    """True for ``-SNAPSHOT`` development versions."""
    _, qualifier = parse_version(version)
    return qualifier.lower() == Constants.SNAPSHOT_QUALIFIER.lower()


version_key = cmp_to_key(lambda a, b: compare_versions(a, b).value)


def max_version(versions: Iterable[str]) -> Optional[str]:
    """Return the highest well-formed version, ignoring malformed ones."""
    valid = []
    for candidate in versions:
        try:
            valid.append(validate_version(candidate))
        except InvalidVersionError:
            continue
    return max(valid, key=version_key, default=None)
