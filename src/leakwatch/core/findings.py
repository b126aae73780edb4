"""Finding data structures for leakwatch.

Wire shapes use the camelCase keys the findings store and the HTTP service
exchange; the dataclasses themselves use snake_case attributes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

SecretFields = Dict[str, Optional[str]]

SENTINEL_LINE = -1
MATCH_KEY = "match"


class Validity(Enum):
    """Validity lifecycle of a recorded finding."""

    VALID = "valid"
    INVALID = "invalid"
    UNKNOWN = "unknown"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: Any) -> "Validity":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class SecretValue:
    """Tagged secret payload.

    ``kind`` is ``"single"`` when the value holds one flat field map (stored
    under the ``match`` key) and ``"multi"`` when it holds several keyed
    sub-records.
    """

    kind: str
    records: Dict[str, SecretFields]

    SINGLE = "single"
    MULTI = "multi"

    @classmethod
    def single(cls, **fields: Optional[str]) -> "SecretValue":
        return cls(kind=cls.SINGLE, records={MATCH_KEY: dict(fields)})

    @classmethod
    def multi(cls, records: Dict[str, SecretFields]) -> "SecretValue":
        return cls(kind=cls.MULTI, records={k: dict(v) for k, v in records.items()})

    @classmethod
    def from_raw(cls, raw: Any) -> "SecretValue":
        """Normalize any stored shape into a tagged value.

        Accepted shapes: ``{"match": {...}}``, a flat map of scalar fields,
        or an arbitrary-keyed map of sub-records (each optionally wrapped in
        its own ``match``).
        """
        if isinstance(raw, SecretValue):
            return raw
        if not isinstance(raw, dict) or not raw:
            return cls(kind=cls.SINGLE, records={MATCH_KEY: {}})

        if set(raw) == {MATCH_KEY} and isinstance(raw[MATCH_KEY], dict):
            return cls(kind=cls.SINGLE, records={MATCH_KEY: _flat(raw[MATCH_KEY])})

        if all(not isinstance(v, dict) for v in raw.values()):
            return cls(kind=cls.SINGLE, records={MATCH_KEY: _flat(raw)})

        records: Dict[str, SecretFields] = {}
        for key, value in raw.items():
            if not isinstance(value, dict):
                continue
            inner = value.get(MATCH_KEY)
            records[key] = _flat(inner if isinstance(inner, dict) else value)
        if len(records) == 1 and MATCH_KEY in records:
            return cls(kind=cls.SINGLE, records=records)
        return cls(kind=cls.MULTI, records=records)

    @property
    def fields(self) -> SecretFields:
        """The field map of a single value, or the first record of a multi value."""
        for record in self.records.values():
            return record
        return {}

    def components(self) -> Iterator[SecretFields]:
        yield from self.records.values()

    def values(self) -> List[str]:
        """Every non-empty string field across all components."""
        return [
            v for record in self.records.values() for v in record.values() if isinstance(v, str) and v
        ]

    def to_dict(self) -> Dict[str, SecretFields]:
        return {k: dict(v) for k, v in self.records.items()}


def _flat(data: Dict[str, Any]) -> SecretFields:
    return {str(k): (v if v is None or isinstance(v, str) else str(v)) for k, v in data.items()}


@dataclass(frozen=True)
class SourceContent:
    """Located snippet of a secret, either in original source or in the bundle."""

    content: str
    content_filename: str
    start_line: int = SENTINEL_LINE
    end_line: int = SENTINEL_LINE
    exact_match_numbers: List[int] = field(default_factory=lambda: [SENTINEL_LINE])

    def __post_init__(self):
        if (self.start_line == SENTINEL_LINE) != (self.end_line == SENTINEL_LINE):
            raise ValueError("contentStartLineNum and contentEndLineNum must both be set or both be -1")

    @property
    def is_sentinel(self) -> bool:
        return self.start_line == SENTINEL_LINE

    @classmethod
    def sentinel(cls, fields: SecretFields, url: str) -> "SourceContent":
        """Fallback content used when no source map location is available."""
        return cls(
            content=json.dumps(fields, separators=(",", ":")),
            content_filename=url.split("/")[-1] if url else "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "contentFilename": self.content_filename,
            "contentStartLineNum": self.start_line,
            "contentEndLineNum": self.end_line,
            "exactMatchNumbers": list(self.exact_match_numbers),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceContent":
        return cls(
            content=data.get("content", ""),
            content_filename=data.get("contentFilename", ""),
            start_line=int(data.get("contentStartLineNum", SENTINEL_LINE)),
            end_line=int(data.get("contentEndLineNum", SENTINEL_LINE)),
            exact_match_numbers=list(data.get("exactMatchNumbers") or [SENTINEL_LINE]),
        )


@dataclass(frozen=True)
class Occurrence:
    """One validated instance of a secret at one location."""

    secret_type: str
    fingerprint: str
    secret_value: SecretValue
    file_path: str
    url: str
    source_content: SourceContent
    resource_type: Optional[str] = None
    validity: Validity = Validity.VALID
    metadata: Dict[str, Any] = field(default_factory=dict)

    def moved_to(self, file_path: str, url: str) -> "Occurrence":
        return replace(self, file_path=file_path, url=url)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "secretType": self.secret_type,
            "fingerprint": self.fingerprint,
            "secretValue": self.secret_value.to_dict(),
            "filePath": self.file_path,
            "url": self.url,
            "sourceContent": self.source_content.to_dict(),
            "validity": self.validity.value,
        }
        if self.resource_type:
            result["type"] = self.resource_type
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Occurrence":
        secret_value = SecretValue.from_raw(data.get("secretValue"))
        raw_source = data.get("sourceContent")
        if isinstance(raw_source, dict):
            source = SourceContent.from_dict(raw_source)
        else:
            source = SourceContent.sentinel(secret_value.fields, data.get("url", ""))
        return cls(
            secret_type=data.get("secretType", ""),
            fingerprint=data.get("fingerprint", ""),
            secret_value=secret_value,
            file_path=data.get("filePath", ""),
            url=data.get("url", ""),
            source_content=source,
            resource_type=data.get("type"),
            validity=Validity.parse(data.get("validity", Validity.VALID.value)),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class Finding:
    """Aggregate of occurrences sharing one fingerprint."""

    fingerprint: str
    secret_type: str
    secret_value: SecretValue
    occurrences: List[Occurrence] = field(default_factory=list)
    validity: Validity = Validity.VALID
    validated_at: Optional[str] = None
    discovered_at: Optional[str] = None
    is_new: bool = True

    @property
    def num_occurrences(self) -> int:
        return len(self.occurrences)

    def add_occurrence(self, occurrence: Occurrence) -> bool:
        """Add *occurrence* unless an identical one is already recorded."""
        if occurrence in self.occurrences:
            return False
        self.occurrences.append(occurrence)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fingerprint": self.fingerprint,
            "secretType": self.secret_type,
            "secretValue": self.secret_value.to_dict(),
            "numOccurrences": self.num_occurrences,
            "occurrences": [o.to_dict() for o in self.occurrences],
            "validity": self.validity.value,
            "validatedAt": self.validated_at,
            "discoveredAt": self.discovered_at,
            "isNew": self.is_new,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Finding":
        finding = cls(
            fingerprint=data.get("fingerprint", ""),
            secret_type=data.get("secretType", ""),
            secret_value=SecretValue.from_raw(data.get("secretValue")),
            validity=Validity.parse(data.get("validity")),
            validated_at=data.get("validatedAt"),
            discovered_at=data.get("discoveredAt"),
            is_new=bool(data.get("isNew", False)),
        )
        for raw in data.get("occurrences") or []:
            if isinstance(raw, dict):
                finding.add_occurrence(Occurrence.from_dict(raw))
        return finding
