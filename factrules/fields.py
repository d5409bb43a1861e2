"""Fact field paths and safe accessors.

Rules address values inside the fact bag with dot-separated paths such as
"address.bedroom.furniture". All field access goes through resolve() so
missing fields degrade to None instead of raising.
"""

from collections.abc import Mapping
from typing import Any, List, Optional

PATH_SEPARATOR = "."


def split_path(field_path: str) -> List[str]:
    """Split a dot-separated path into its segments.

    Returns an empty list for an empty path or one containing an empty
    segment ("a..b", ".a", "a."), since neither can address a value.
    """
    if not field_path:
        return []
    parts = field_path.split(PATH_SEPARATOR)
    if any(part == "" for part in parts):
        return []
    return parts


def resolve(facts: Mapping, field_path: str) -> Optional[Any]:
    """Safely get a value from the fact bag by path.

    Args:
        facts: Nested mapping of fact values
        field_path: Dot-separated path like "user.name"

    Returns:
        The value at the path as-is (scalar, sequence or mapping), or None
        if any segment is missing or a non-mapping is hit before the last
        segment. Sequences are never traversed.
    """
    parts = split_path(field_path)
    if not parts:
        return None

    current: Any = facts
    for part in parts:
        if not isinstance(current, Mapping):
            return None
        if part not in current:
            return None
        current = current[part]

    return current
