"""Loose version parsing for framework version checks and analytics buckets.

Manifest files carry anything from exact versions (``4.2.1``) to npm
ranges (``^15.3.0``, ``>=2.0 <3``) and PEP 440 pins (``Django>=4.2``).
The helpers here reduce those to ``(major, minor, patch)`` tuples that
can be compared with ordinary tuple ordering.
"""

from __future__ import annotations

import re
from typing import Callable

VersionTuple = tuple[int, int, int]

# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

_COERCE_RE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")

_RANGE_ATOM_RE = re.compile(
    r"(?P<op>>=|<=|==|>|<|=|\^|~>?|~=)?\s*v?"
    r"(?P<major>\d+|[xX*])(?:\.(?P<minor>\d+|[xX*]))?(?:\.(?P<patch>\d+|[xX*]))?"
    r"(?:-[0-9A-Za-z.\-]+)?(?:\+[0-9A-Za-z.\-]+)?"
)

_WILDCARDS = {"x", "X", "*"}


def coerce_version(version: str | None) -> VersionTuple | None:
    """Extract the first ``major[.minor[.patch]]`` found in a string.

    Args:
        version: Any version-ish string, e.g. ``"v4.2"`` or ``"^15.3.0"``.

    Returns:
        The version as a tuple with missing parts set to 0, or None when
        the string holds no digits.
    """
    if not version:
        return None
    m = _COERCE_RE.search(version)
    if not m:
        return None
    return int(m.group(1)), int(m.group(2) or 0), int(m.group(3) or 0)


def parse_version(version: str) -> VersionTuple:
    """Parse a ``major.minor.patch`` string, raising on anything looser.

    Raises:
        ValueError: If the string holds no version number.
    """
    coerced = coerce_version(version)
    if coerced is None:
        raise ValueError(f"Invalid version: {version!r}")
    return coerced


def _part(value: str | None) -> int:
    if value is None or value in _WILDCARDS:
        return 0
    return int(value)


def min_version(range_spec: str) -> VersionTuple | None:
    """Return the lowest version that satisfies an npm-style range.

    ``||`` alternatives take the lowest of their lower bounds. Upper
    bounds (``<``, ``<=``) do not raise the floor.

    Args:
        range_spec: A version or range, e.g. ``"^1.2.3 || >=2.0.0"``.

    Returns:
        The lowest matching version, or None if the range is unparseable.
    """
    spec = range_spec.strip()
    if spec in _WILDCARDS or spec == "":
        return (0, 0, 0)

    floors: list[VersionTuple] = []
    for alternative in spec.split("||"):
        alternative = alternative.strip()
        if not alternative:
            continue
        atoms = list(_RANGE_ATOM_RE.finditer(alternative))
        matched = "".join(a.group(0) for a in atoms).replace(" ", "")
        if not atoms or len(matched) < len(re.sub(r"[\s,]", "", alternative)):
            return None

        floor: VersionTuple = (0, 0, 0)
        for atom in atoms:
            op = atom.group("op") or "="
            if op in ("<", "<="):
                continue
            candidate = (
                _part(atom.group("major")),
                _part(atom.group("minor")),
                _part(atom.group("patch")),
            )
            if op == ">":
                candidate = (candidate[0], candidate[1], candidate[2] + 1)
            floor = max(floor, candidate)
        floors.append(floor)

    return min(floors) if floors else None


def is_version_below(version: str, minimum: str) -> bool:
    """Return True when ``version`` coerces to something below ``minimum``.

    A version that cannot be coerced is never reported as below.
    """
    coerced = coerce_version(version)
    if coerced is None:
        return False
    return coerced < parse_version(minimum)


def format_version(version: VersionTuple) -> str:
    """Render a version tuple as ``major.minor.patch``."""
    return ".".join(str(part) for part in version)


# ---------------------------------------------------------------------------
# Analytics buckets
# ---------------------------------------------------------------------------


def create_version_bucket(
    min_major_version: int | None = None,
) -> Callable[[str | None], str]:
    """Build a function that groups versions by major for analytics.

    Args:
        min_major_version: Versions below this major are reported as
            ``"<{min}.0.0"``.

    Returns:
        A callable mapping ``"15.3.0"`` to ``"15.x"``, a missing version to
        ``"none"`` and an unparseable one to ``"invalid"``.

    Example::

        bucket = create_version_bucket(11)
        bucket("15.3.0")  # "15.x"
        bucket("10.0.0")  # "<11.0.0"
    """

    def bucket(version: str | None) -> str:
        if not version:
            return "none"
        floor = min_version(version)
        if floor is None:
            return "invalid"
        major = floor[0]
        if min_major_version is not None and major < min_major_version:
            return f"<{min_major_version}.0.0"
        return f"{major}.x"

    return bucket
