"""Known false-positive corpus shared by all families."""

from __future__ import annotations

import re
from typing import Sequence, Tuple

DEFAULT_FALSE_POSITIVES: Tuple[str, ...] = ("example", "xxxxxx", "aaaaaa", "abcde", "00000", "sample", "*****")

# 40 hex chars: git SHAs and similar digests
HASH_PATTERN = re.compile(r"^[a-f0-9]{40}$")
UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def is_likely_uuid(value: str) -> bool:
    return bool(UUID_PATTERN.match(value))


def _is_valid_utf8(value: str) -> bool:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def is_known_false_positive(
    value: str,
    false_positives: Sequence[str] = DEFAULT_FALSE_POSITIVES,
    allow_uuid: bool = False,
) -> Tuple[bool, str]:
    """
    Check *value* against the false-positive corpus.

    Returns:
        ``(True, reason)`` for a false positive, ``(False, "")`` otherwise.
        Checks run in order: invalid UTF-8, exact term, contained term,
        40-hex hash, UUID (skipped when *allow_uuid*).
    """
    if not _is_valid_utf8(value):
        return True, "invalid utf8"

    lower = value.lower()
    if lower in false_positives:
        return True, f"matches term: {lower}"

    for term in false_positives:
        if term in lower:
            return True, f"contains term: {term}"

    if HASH_PATTERN.match(value):
        return True, "matches hash pattern"

    if not allow_uuid and is_likely_uuid(value):
        return True, "matches UUID pattern"

    return False, ""
