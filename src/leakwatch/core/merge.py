"""Fold freshly scanned findings into the stored set."""

from __future__ import annotations

import copy
from typing import List, Optional, Tuple
from urllib.parse import urlsplit

from .findings import Finding


def _origin(url: str) -> Optional[Tuple[str, str, Optional[int]]]:
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None
    return parts.scheme.lower(), parts.hostname.lower(), port


def is_same_origin(url1: str, url2: str) -> bool:
    """True when both URLs parse and share scheme, host and port."""
    origin = _origin(url1)
    return origin is not None and origin == _origin(url2)


def merge_findings(existing: List[Finding], new: List[Finding], current_url: str = "") -> List[Finding]:
    """
    Merge *new* findings into a copy of *existing*.

    A new finding whose fingerprint is already recorded contributes its first
    occurrence: an existing occurrence from the same origin is moved to the
    new location, otherwise the occurrence is added.
    """
    merged = copy.deepcopy(list(existing))
    by_fingerprint = {finding.fingerprint: finding for finding in merged}

    for new_finding in new:
        current = by_fingerprint.get(new_finding.fingerprint)
        if current is None:
            added = copy.deepcopy(new_finding)
            merged.append(added)
            by_fingerprint[added.fingerprint] = added
            continue
        if not new_finding.occurrences:
            continue

        new_occurrence = new_finding.occurrences[0]
        for index, occurrence in enumerate(current.occurrences):
            if is_same_origin(occurrence.url, new_occurrence.url or current_url):
                current.occurrences[index] = occurrence.moved_to(new_occurrence.file_path, new_occurrence.url)
                break
        else:
            current.add_occurrence(new_occurrence)

    return merged
