"""
Git ref classification.
"""

import re
from typing import Optional

TAG_REF_PATTERN = re.compile(r"(?:^|/)refs/tags/")
BRANCH_REF_PATTERN = re.compile(r"(?:^|/)refs/heads/")


def is_tag_ref(ref: str) -> bool:
    """True if the ref points at a tag, e.g. ``refs/tags/v1.0``."""
    return TAG_REF_PATTERN.search(ref) is not None


def branch_name_from_ref(ref: str) -> Optional[str]:
    """
    Extract the short branch name from a branch ref.

    Args:
        ref: A git ref such as ``refs/heads/feature/x``

    Returns:
        The branch name (``feature/x``), or None when the ref is not a
        branch ref or the name is empty. None means "do not filter by branch".
    """
    parts = BRANCH_REF_PATTERN.split(ref, maxsplit=1)
    if len(parts) > 1 and parts[1]:
        return parts[1]
    return None
