# SPDX-License-Identifier: MIT
"""
Detector base classes.

A detector owns one credential family. It extracts candidates with the
family patterns, filters them for accuracy, skips anything already recorded
in the findings store, validates the rest against the provider and turns
each valid credential into an ``Occurrence`` located in the original source.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from itertools import chain
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Type

import httpx

from ..accuracy import is_known_false_positive, is_programming_pattern, shannon_entropy
from ..core.findings import Finding, Occurrence, SecretFields, SecretValue, SourceContent
from ..core.fingerprint import compute_fingerprint
from ..core.redaction import redact_secret
from ..core.store import FindingsStore, MemoryFindingsStore
from ..patterns import SecretPattern, get_pattern
from ..source_location import SourceLocationResolver
from ..validate.core import HTTPValidator, ValidationResult, ValidatorSettings

logger = logging.getLogger(__name__)


@dataclass
class DetectorContext:
    """Collaborators shared by every detector of a scan."""

    store: FindingsStore = field(default_factory=MemoryFindingsStore)
    resolver: SourceLocationResolver = field(default_factory=SourceLocationResolver)
    settings: ValidatorSettings = field(default_factory=ValidatorSettings)
    client: Optional[httpx.AsyncClient] = None


class PairingPolicy(Enum):
    """How primary and secondary candidates of a multi-part secret are combined."""

    FIRST_VALID = "first_valid"  # stop at the first valid pairing per primary
    ALL_VALID = "all_valid"  # keep every valid pairing
    ZIP = "zip"  # pair the i-th primary with the i-th secondary


class Detector(ABC):
    """
    Base class for family detectors.

    Class attributes:
        secret_type: Family name, also the detector id
        validator_class: Validator used for live checks
        fields: Secret fields passed to the validator, in argument order
        optional_fields: Subset of ``fields`` that may be absent
        dedup_fields: Fields compared against stored findings
        dedup_any: Treat a match on any dedup field as already found
        resource_pattern: Pattern whose resource type map labels occurrences
    """

    secret_type: str = ""
    validator_class: Type[HTTPValidator] = HTTPValidator
    fields: Tuple[str, ...] = ("api_key",)
    optional_fields: Tuple[str, ...] = ()
    dedup_fields: Tuple[str, ...] = ()
    dedup_any: bool = False
    resource_pattern: str = ""

    # accuracy filters
    false_positive_check: bool = False
    code_like_check: bool = False
    allow_uuid: bool = False

    # source location
    require_all: bool = False

    def __init__(self, context: Optional[DetectorContext] = None):
        self.context = context or DetectorContext()
        self.validator = self.validator_class(client=self.context.client, settings=self.context.settings)

    @property
    def name(self) -> str:
        return self.secret_type

    @property
    def resource_types(self) -> Dict[str, str]:
        return get_pattern(self.resource_pattern).resource_types if self.resource_pattern else {}

    async def detect(self, content: str, url: str) -> List[Occurrence]:
        """Return validated occurrences found in *content* served from *url*."""
        if not isinstance(content, str) or not content.strip():
            return []
        occurrences = await self.find(content, url or "")
        if occurrences:
            logger.info("%s: %d valid occurrence(s) in %s", self.secret_type, len(occurrences), url)
        return occurrences

    @abstractmethod
    async def find(self, content: str, url: str) -> List[Occurrence]:
        """Family pipeline; *content* is non-empty text."""

    # -- accuracy -----------------------------------------------------
    def passes_filters(self, value: str, pattern: Optional[SecretPattern] = None, entropy: Optional[float] = None) -> bool:
        """Apply the entropy, false-positive and identifier filters to *value*."""
        threshold = entropy if entropy is not None else (pattern.entropy if pattern else 0.0)
        if threshold and shannon_entropy(value) < threshold:
            return False
        if self.false_positive_check:
            rejected, reason = is_known_false_positive(value, allow_uuid=self.allow_uuid)
            if rejected:
                logger.debug("%s: dropping %s (%s)", self.secret_type, redact_secret(value), reason)
                return False
        if self.code_like_check and is_programming_pattern(value):
            logger.debug("%s: dropping identifier-like %s", self.secret_type, redact_secret(value))
            return False
        return True

    def extract(self, content: str, pattern_name: str, accept: Optional[Callable[[str], bool]] = None) -> List[str]:
        """Unique candidates of *pattern_name* that pass the accuracy filters."""
        pattern = get_pattern(pattern_name)
        return [
            candidate
            for candidate in pattern.find_all(content)
            if self.passes_filters(candidate, pattern) and (accept is None or accept(candidate))
        ]

    # -- deduplication ------------------------------------------------
    def existing_findings(self) -> List[Finding]:
        """Stored findings of this family."""
        return [f for f in self.context.store.get_existing() if f.secret_type == self.secret_type]

    def already_found(self, existing: Iterable[Finding], fields: SecretFields) -> bool:
        """True when a stored component carries the same dedup field values as *fields*."""
        keys = self.dedup_fields or self.fields[:1]
        wanted = {k: fields.get(k) for k in keys if fields.get(k)}
        if not wanted:
            return False
        for finding in existing:
            values = chain([finding.secret_value], (o.secret_value for o in finding.occurrences))
            for component in chain.from_iterable(v.components() for v in values):
                hits = [component.get(k) == v for k, v in wanted.items()]
                if (any(hits) if self.dedup_any else all(hits)):
                    return True
        return False

    # -- validation ---------------------------------------------------
    def validation_args(self, fields: SecretFields) -> Tuple[Any, ...]:
        return tuple(fields.get(name) for name in self.fields)

    def has_credential(self, fields: SecretFields) -> bool:
        """True when *fields* carries every required validator input."""
        return all(fields.get(name) for name in self.fields if name not in self.optional_fields)

    async def revalidate(self, fields: SecretFields) -> ValidationResult:
        """Validate a stored component; validator exceptions propagate."""
        return await self.validator(*self.validation_args(fields))

    async def check(self, fields: SecretFields) -> Optional[ValidationResult]:
        """Validate *fields*; ``None`` unless the provider confirms them."""
        try:
            result = await self.validator(*self.validation_args(fields))
        except Exception as e:
            logger.warning("%s: validator %s raised: %s", self.secret_type, self.validator.name, e)
            return None
        if not result.valid:
            logger.debug("%s: candidate rejected: %s", self.secret_type, result.error)
            return None
        return result

    # -- correlation --------------------------------------------------
    async def correlate(
        self,
        existing: List[Finding],
        primaries: Sequence[Any],
        secondaries: Sequence[Any],
        policy: PairingPolicy,
        build: Callable[[Any, Any], Optional[SecretFields]],
    ) -> List[Tuple[SecretFields, ValidationResult]]:
        """
        Validate combinations of primary and secondary candidates.

        *build* turns one pairing into secret fields, or ``None`` to skip it.
        """
        if policy is PairingPolicy.ZIP:
            groups = [[(p, s)] for p, s in zip(primaries, secondaries)]
        else:
            groups = [[(p, s) for s in secondaries] for p in primaries]

        accepted: List[Tuple[SecretFields, ValidationResult]] = []
        for group in groups:
            for primary, secondary in group:
                fields = build(primary, secondary)
                if fields is None or self.already_found(existing, fields):
                    continue
                result = await self.check(fields)
                if result is None:
                    continue
                accepted.append((fields, result))
                if policy is PairingPolicy.FIRST_VALID:
                    break
        return accepted

    # -- assembly -----------------------------------------------------
    async def locate(self, content: str, url: str, fields: SecretFields, needles: Sequence[str]) -> SourceContent:
        return await self.context.resolver.resolve(content, url, fields, needles, require_all=self.require_all)

    def assemble(self, fields: SecretFields, url: str, result: ValidationResult, source: SourceContent) -> Occurrence:
        value = SecretValue.single(**fields)
        return Occurrence(
            secret_type=self.secret_type,
            fingerprint=compute_fingerprint(value),
            secret_value=value,
            file_path=url,
            url=url,
            source_content=source,
            resource_type=self.resource_types.get(result.type) if result.type else None,
            metadata=dict(result.metadata),
        )

    async def emit(
        self, content: str, url: str, fields: SecretFields, needles: Sequence[str], result: ValidationResult
    ) -> Occurrence:
        source = await self.locate(content, url, fields, needles)
        return self.assemble(fields, url, result, source)


class SingleKeyDetector(Detector):
    """Detector for families whose secret is one pattern match."""

    pattern_name: str = ""

    def __init__(self, context: Optional[DetectorContext] = None):
        super().__init__(context)
        if not self.resource_pattern:
            self.resource_pattern = self.pattern_name

    def accept(self, candidate: str) -> bool:
        """Family-specific filter applied after the shared ones."""
        return True

    def candidates(self, content: str) -> List[str]:
        return self.extract(content, self.pattern_name, self.accept)

    async def find(self, content: str, url: str) -> List[Occurrence]:
        existing = self.existing_findings()
        occurrences = []
        for candidate in self.candidates(content):
            fields = {self.fields[0]: candidate}
            if self.already_found(existing, fields):
                continue
            result = await self.check(fields)
            if result is None:
                continue
            occurrences.append(await self.emit(content, url, fields, [candidate], result))
        return occurrences
