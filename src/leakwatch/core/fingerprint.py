"""Deterministic fingerprints for secret values."""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, Union

from .findings import SecretValue


def canonical_json(data: Any) -> str:
    """Serialize *data* with sorted keys and no insignificant whitespace."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_fingerprint(value: Union[SecretValue, Dict[str, Any]], algorithm: str = "sha512") -> str:
    """Hex digest of the canonical JSON form of *value*.

    Equal secret values always produce equal fingerprints, whatever the
    insertion order of their fields.
    """
    payload = value.to_dict() if isinstance(value, SecretValue) else value
    digest = hashlib.new(algorithm)
    digest.update(canonical_json(payload).encode("utf-8"))
    return digest.hexdigest()
