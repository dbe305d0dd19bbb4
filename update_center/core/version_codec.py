"""Semantic version to sortable integer encoding.

``major.minor.patch`` becomes ``major * 10000 + minor * 100 + patch``. Ordering is
only correct while minor and patch stay below 100; the raw version string is always
stored next to its code, so no decoder exists.
"""
from typing import List

COMPONENT_LIMIT = 100


def _components(version: str) -> List[int]:
    parts = []
    for raw in (version or "").split(".")[:3]:
        try:
            parts.append(int(raw))
        except ValueError:
            parts.append(0)
    while len(parts) < 3:
        parts.append(0)
    return parts


def encode(version: str) -> int:
    """Encode ``version`` into its integer version code.

    Missing or non-numeric components count as 0 and anything past the third
    component is ignored.
    """
    major, minor, patch = _components(version)
    return major * COMPONENT_LIMIT * COMPONENT_LIMIT + minor * COMPONENT_LIMIT + patch


def is_encodable(version: str) -> bool:
    """Whether ``version`` orders correctly under :func:`encode`."""
    _, minor, patch = _components(version)
    return 0 <= minor < COMPONENT_LIMIT and 0 <= patch < COMPONENT_LIMIT
