"""
Version helpers for update notices and checkout targets.

Versions are compared with packaging.version. Floating versions (tracking a
branch tip, e.g. "dev-main" or "1.x-dev") cannot be ordered, so moving
between them is always reported as an update.
"""

import re
from typing import Callable

from packaging.version import InvalidVersion, Version

FloatingPredicate = Callable[[str], bool]

_FLOATING_MARKERS = re.compile(r"(^dev-|-dev$)", re.IGNORECASE)
_BRANCH_MARKERS = re.compile(r"(?:^dev-|(?:\.x)?-dev$)", re.IGNORECASE)
_COMMIT_HASH = re.compile(r"^[a-f0-9]{40}$")


def is_floating(version: str) -> bool:
    """
    Default predicate for versions that follow a moving branch.

    Examples:
        dev-main -> True
        2.x-dev -> True
        1.0.0.0 -> False
    """
    return bool(_FLOATING_MARKERS.search(version or ""))


def is_commit_hash(ref: str) -> bool:
    """Check if a reference is a full 40 character commit hash."""
    return bool(_COMMIT_HASH.match(ref or ""))


def short_reference(ref: str) -> str:
    """Abbreviate full commit hashes for display, leave other references as-is."""
    if is_commit_hash(ref):
        return ref[:7]
    return ref


def branch_name_from_version(pretty_version: str) -> str:
    """
    Derive the branch a floating version tracks.

    Examples:
        dev-master -> master
        2.x-dev -> 2
        1.0.0 -> 1.0.0
    """
    return _BRANCH_MARKERS.sub("", pretty_version or "")


def is_upgrade(
    from_version: str,
    to_version: str,
    floating: FloatingPredicate = is_floating,
) -> bool:
    """
    Decide whether moving from one normalized version to another is an upgrade.

    Identical versions, transitions involving a floating version and versions
    that cannot be parsed all count as upgrades; only a strictly lower fixed
    target is a downgrade.
    """
    if from_version == to_version:
        return True
    if floating(from_version) or floating(to_version):
        return True
    try:
        return Version(to_version) >= Version(from_version)
    except InvalidVersion:
        return True
