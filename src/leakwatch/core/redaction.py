# SPDX-License-Identifier: MIT
"""
Central redaction utilities for leakwatch.

Every surface that prints or serializes findings for humans (console, CLI
JSON output, log messages) goes through these helpers so plaintext secrets
never leave the findings store.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List


def redact_secret(secret: str) -> str:
    """
    Redact secret showing first 6 + last 4 characters.

    For secrets <= 10 characters, shows only ****.
    For secrets > 10 characters, shows first6****last4.
    """
    if not secret or len(secret) <= 10:
        return "****"
    return secret[:6] + "****" + secret[-4:]


def redact_evidence_string(evidence: str) -> str:
    """Redact secret-looking tokens (16+ chars) inside free text."""
    return "\n".join(
        re.sub(r"\b[A-Za-z0-9+/_-]{16,}\b", lambda m: redact_secret(m.group(0)), line)
        for line in evidence.split("\n")
    )


def redact_text(text: str, secrets: Iterable[str]) -> str:
    """Replace each known secret inside *text* with its redacted form."""
    # longest first so a secret that contains another is replaced whole
    for secret in sorted({s for s in secrets if s}, key=len, reverse=True):
        text = text.replace(secret, redact_secret(secret))
    return text


def _redact_fields(record: Dict[str, Any], secrets: List[str]) -> Dict[str, Any]:
    redacted = {}
    for key, value in record.items():
        if isinstance(value, str) and value in secrets and key not in ("url", "registry", "email"):
            redacted[key] = redact_secret(value)
        else:
            redacted[key] = value
    return redacted


def _secret_strings(secret_value: Dict[str, Any]) -> List[str]:
    secrets = []
    for record in secret_value.values():
        if isinstance(record, dict):
            for key, value in record.items():
                if isinstance(value, str) and value and key not in ("url", "registry", "email"):
                    secrets.append(value)
    return secrets


def redact_occurrence(occurrence: Dict[str, Any], secrets: List[str]) -> Dict[str, Any]:
    redacted = occurrence.copy()
    if isinstance(redacted.get("secretValue"), dict):
        redacted["secretValue"] = {
            k: _redact_fields(v, secrets) if isinstance(v, dict) else v
            for k, v in redacted["secretValue"].items()
        }
    source = redacted.get("sourceContent")
    if isinstance(source, dict) and isinstance(source.get("content"), str):
        source = source.copy()
        source["content"] = redact_text(source["content"], secrets)
        redacted["sourceContent"] = source
    return redacted


def redact_finding(finding: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact secrets in a serialized finding.

    Args:
        finding: Finding dictionary as produced by ``Finding.to_dict``

    Returns:
        Copy of the finding with secret fields and snippets redacted
    """
    redacted = finding.copy()
    secret_value = finding.get("secretValue")
    if not isinstance(secret_value, dict):
        return redacted

    secrets = _secret_strings(secret_value)
    redacted["secretValue"] = {
        k: _redact_fields(v, secrets) if isinstance(v, dict) else v for k, v in secret_value.items()
    }
    if isinstance(finding.get("occurrences"), list):
        redacted["occurrences"] = [
            redact_occurrence(o, secrets) if isinstance(o, dict) else o for o in finding["occurrences"]
        ]
    return redacted


def redact_findings_list(findings: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [redact_finding(finding) for finding in findings]


def redact_scan_result(result: Dict[str, Any]) -> Dict[str, Any]:
    """Redact secrets in a complete scan result (``{"findings": [...], ...}``)."""
    redacted_result = result.copy()
    if "findings" in redacted_result and isinstance(redacted_result["findings"], list):
        redacted_result["findings"] = redact_findings_list(redacted_result["findings"])
    return redacted_result
