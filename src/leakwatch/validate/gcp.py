# SPDX-License-Identifier: MIT
"""Structural validator for Google Cloud service account keys."""
from __future__ import annotations

import json

from .core import HTTPValidator, ValidationResult

PUBLIC_SERVICE_ACCOUNTS = frozenset({"image-pulling@authenticated-image-pulling.iam.gserviceaccount.com"})


class GCPValidator(HTTPValidator):
    """
    Accept a key document when it has the shape of a real service account key.

    No token exchange is attempted, so this validator works with the network
    kill-switch on.
    """

    name = "gcp"
    requires_network = False

    async def validate(self, service_account_key: str) -> ValidationResult:
        try:
            data = json.loads(service_account_key)
        except ValueError:
            return ValidationResult.invalid("Service account key is not valid JSON")
        if not isinstance(data, dict):
            return ValidationResult.invalid("Service account key is not a JSON object")

        if data.get("type") != "service_account":
            return ValidationResult.invalid("Not a service account key")
        for field in ("project_id", "private_key_id"):
            if not data.get(field):
                return ValidationResult.invalid(f"Missing {field}")

        private_key = data.get("private_key") or ""
        if "BEGIN PRIVATE KEY" not in private_key or "END PRIVATE KEY" not in private_key:
            return ValidationResult.invalid("Malformed private key")

        email = data.get("client_email") or ""
        if "@" not in email or "." not in email:
            return ValidationResult.invalid("Malformed client email")
        if email in PUBLIC_SERVICE_ACCOUNTS:
            return ValidationResult.invalid("Publicly shared service account - skipped")

        return ValidationResult.ok(
            type="SERVICE_ACCOUNT", projectId=data["project_id"], clientEmail=email
        )
