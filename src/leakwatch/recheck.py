# SPDX-License-Identifier: MIT
"""
Validity recheck engine.

Re-validates stored findings against their providers and persists the new
validity with a read-modify-write of the whole store.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from .core.findings import Finding, Validity, utc_now_iso
from .core.store import FindingsStore
from .detectors import Detector, DetectorContext, detector_for

logger = logging.getLogger(__name__)


class RecheckEngine:
    """
    Recheck findings one at a time.

    The first usable component of a finding decides its validity. A
    validator exception marks the finding ``failed``.
    """

    def __init__(self, store: FindingsStore, context: Optional[DetectorContext] = None):
        self.store = store
        self.context = context or DetectorContext(store=store)
        self._handlers: Dict[str, Optional[Detector]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def handler(self, secret_type: str) -> Optional[Detector]:
        if secret_type not in self._handlers:
            self._handlers[secret_type] = detector_for(secret_type, self.context)
        return self._handlers[secret_type]

    def _lock(self, fingerprint: str) -> asyncio.Lock:
        return self._locks.setdefault(fingerprint, asyncio.Lock())

    async def recheck(self, finding: Finding) -> Optional[str]:
        """Re-validate *finding*; returns the persisted validity or ``None`` when skipped."""
        detector = self.handler(finding.secret_type)
        if detector is None:
            logger.warning("No recheck handler for secret type %r; skipping", finding.secret_type)
            return None

        async with self._lock(finding.fingerprint):
            validity: Optional[Validity] = None
            for component in finding.secret_value.components():
                if not detector.has_credential(component):
                    continue
                try:
                    result = await detector.revalidate(component)
                except Exception as e:
                    logger.warning("Recheck of %s failed: %s", finding.fingerprint[:12], e)
                    validity = Validity.FAILED
                    break
                if not result.valid:
                    validity = Validity.INVALID
                elif finding.validity is Validity.INVALID:
                    logger.info("%s finding %s is valid again", finding.secret_type, finding.fingerprint[:12])
                    validity = Validity.VALID
                else:
                    validity = Validity.VALID
                break

            if validity is None:
                logger.info("Finding %s has no usable credential component", finding.fingerprint[:12])
                return None

            validated_at = utc_now_iso()
            self._persist(finding.fingerprint, validity, validated_at)
            finding.validity = validity
            finding.validated_at = validated_at
            return validity.value

    def _persist(self, fingerprint: str, validity: Validity, validated_at: str) -> None:
        findings = self.store.retrieve()
        for stored in findings:
            if stored.fingerprint == fingerprint:
                stored.validity = validity
                stored.validated_at = validated_at
                break
        else:
            logger.debug("Finding %s is not in the store; nothing persisted", fingerprint[:12])
            return
        self.store.store(findings)

    async def recheck_fingerprint(self, fingerprint: str) -> Optional[str]:
        for finding in self.store.retrieve():
            if finding.fingerprint == fingerprint:
                return await self.recheck(finding)
        raise KeyError(fingerprint)

    async def recheck_all(self) -> Dict[str, Optional[str]]:
        """Recheck every stored finding sequentially."""
        results: Dict[str, Optional[str]] = {}
        for finding in self.store.retrieve():
            results[finding.fingerprint] = await self.recheck(finding)
        return results
