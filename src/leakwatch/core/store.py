# SPDX-License-Identifier: MIT
"""
Findings stores.

The store is a whole-snapshot container: readers get every finding at once
and writers replace the full list. Detectors only call ``get_existing`` for
deduplication; the recheck engine and scan callers use ``retrieve`` and
``store``.
"""
from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

from .exceptions import StoreError
from .findings import Finding

logger = logging.getLogger(__name__)


class FindingsStore(ABC):
    """Abstract findings store."""

    @abstractmethod
    def retrieve(self) -> List[Finding]:
        """Return a snapshot of every stored finding."""

    @abstractmethod
    def store(self, findings: List[Finding]) -> None:
        """Replace the stored findings with *findings*."""

    def get_existing(self) -> List[Finding]:
        """Findings consulted by detectors for deduplication."""
        return self.retrieve()


class MemoryFindingsStore(FindingsStore):
    """In-process store; reads and writes are deep copies."""

    def __init__(self, findings: List[Finding] = None):
        self._findings: List[Finding] = copy.deepcopy(list(findings or []))

    def retrieve(self) -> List[Finding]:
        return copy.deepcopy(self._findings)

    def store(self, findings: List[Finding]) -> None:
        self._findings = copy.deepcopy(list(findings))


class JsonFindingsStore(FindingsStore):
    """Store backed by a single JSON file holding a list of findings."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def retrieve(self) -> List[Finding]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise StoreError(f"Failed to read findings: {e}", path=str(self.path)) from e

        if raw is None:
            return []
        if not isinstance(raw, list):
            raise StoreError("Findings file must contain a JSON list", path=str(self.path))
        try:
            return [Finding.from_dict(item) for item in raw if isinstance(item, dict)]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Malformed finding record: {e}", path=str(self.path)) from e

    def store(self, findings: List[Finding]) -> None:
        payload = [finding.to_dict() for finding in findings]
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            tmp_path.replace(self.path)
        except OSError as e:
            raise StoreError(f"Failed to write findings: {e}", path=str(self.path)) from e
        logger.debug("Stored %d findings in %s", len(payload), self.path)
