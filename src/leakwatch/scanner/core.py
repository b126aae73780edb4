# SPDX-License-Identifier: MIT
"""
Scan orchestration.

All enabled detectors run concurrently over one page text; a failing
detector is reported in ``ScanResult.errors`` without affecting the others.
Validated occurrences are grouped into one ``Finding`` per fingerprint.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import httpx

from leakwatch.core.findings import Finding, Occurrence, Validity, utc_now_iso
from leakwatch.core.merge import merge_findings
from leakwatch.core.redaction import redact_evidence_string
from leakwatch.core.store import FindingsStore, JsonFindingsStore
from leakwatch.detectors import DetectorContext, DetectorRegistry, build_registry
from leakwatch.source_location import SourceLocationResolver
from leakwatch.validate.core import ValidatorSettings

from .config import get_default_scanner_config

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Findings of one scan plus the error of every detector that failed."""

    url: str = ""
    findings: List[Finding] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "findings": [finding.to_dict() for finding in self.findings],
            "errors": dict(self.errors),
        }


def group_occurrences(occurrences: Iterable[Occurrence], now: Optional[str] = None) -> List[Finding]:
    """Group *occurrences* into findings keyed by fingerprint, first-seen order."""
    now = now or utc_now_iso()
    grouped: Dict[str, Finding] = {}
    for occurrence in occurrences:
        finding = grouped.get(occurrence.fingerprint)
        if finding is None:
            finding = Finding(
                fingerprint=occurrence.fingerprint,
                secret_type=occurrence.secret_type,
                secret_value=occurrence.secret_value,
                validity=Validity.VALID,
                validated_at=now,
                discovered_at=now,
                is_new=True,
            )
            grouped[occurrence.fingerprint] = finding
        finding.add_occurrence(occurrence)
    return list(grouped.values())


class Scanner:
    """
    Run every registered detector over page content.

    Args:
        registry: Detectors to run; defaults to every family
        store: Findings store used for deduplication and ``scan_and_store``
    """

    def __init__(self, registry: Optional[DetectorRegistry] = None, store: Optional[FindingsStore] = None):
        if registry is None:
            context = DetectorContext(store=store) if store is not None else DetectorContext()
            registry = build_registry(context)
            store = context.store
        self.registry = registry
        self.store = store

    @classmethod
    def from_config(
        cls,
        config: Optional[Dict[str, Any]] = None,
        store: Optional[FindingsStore] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "Scanner":
        """Build a scanner (and its detector context) from a loaded configuration."""
        config = config or get_default_scanner_config()
        source_maps = config.get("source_maps", {}) or {}
        context = DetectorContext(
            store=store if store is not None else JsonFindingsStore(config["store_path"]),
            resolver=SourceLocationResolver(
                client=client,
                timeout=float(source_maps.get("timeout", 10.0)),
                enabled=bool(source_maps.get("enabled", True)),
            ),
            settings=ValidatorSettings.from_config(config),
            client=client,
        )
        registry = build_registry(context, disabled=config.get("disabled_detectors") or [])
        return cls(registry=registry, store=context.store)

    async def run(self, content: str, url: str) -> ScanResult:
        """Scan *content* with every detector concurrently."""
        detectors = self.registry.detectors()
        outcomes = await asyncio.gather(
            *(detector.detect(content, url) for detector in detectors), return_exceptions=True
        )

        result = ScanResult(url=url)
        occurrences: List[Occurrence] = []
        for detector, outcome in zip(detectors, outcomes):
            if isinstance(outcome, Exception):
                # exception text may echo a candidate secret
                message = redact_evidence_string(f"{type(outcome).__name__}: {outcome}")
                logger.error("Detector %s failed on %s: %s", detector.name, url, message)
                result.errors[detector.name] = message
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            occurrences.extend(outcome)

        result.findings = group_occurrences(occurrences)
        logger.info("Scanned %s: %d finding(s), %d detector error(s)", url, len(result.findings), len(result.errors))
        return result

    async def scan(self, content: str, url: str) -> List[Finding]:
        return (await self.run(content, url)).findings

    async def scan_and_store(self, content: str, url: str) -> ScanResult:
        """Scan, merge the new findings into the store and write it back."""
        if self.store is None:
            raise ValueError("Scanner has no findings store")
        result = await self.run(content, url)
        if result.findings:
            merged = merge_findings(self.store.retrieve(), result.findings, url)
            self.store.store(merged)
        return result
