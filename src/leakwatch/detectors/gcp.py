# SPDX-License-Identifier: MIT
"""
Google Cloud service account key detector.

Bundlers tend to split a key file into separate string literals, so the key
is reassembled field by field before it is checked.
"""
from __future__ import annotations

import json
from typing import Dict, List, Optional

from ..accuracy import is_known_false_positive
from ..core.findings import Occurrence
from ..patterns import GCP_AUTH_URI, GCP_COMPONENTS, GCP_TOKEN_URI, get_pattern
from ..validate.gcp import GCPValidator
from .base import Detector

REQUIRED_COMPONENTS = (
    "project_id",
    "private_key_id",
    "private_key",
    "client_email",
    "auth_provider_x509_cert_url",
)

# order in which components are located in the original source
LOCATE_ORDER = REQUIRED_COMPONENTS[:4] + ("client_id", "auth_provider_x509_cert_url")


def extract_components(content: str) -> Dict[str, str]:
    """First match of every service account field present in *content*."""
    components = {}
    for name, regex in GCP_COMPONENTS.items():
        match = regex.search(content)
        if match:
            components[name] = match.group(1)
    return components


def build_credentials(components: Dict[str, str]) -> Optional[Dict[str, str]]:
    if any(not components.get(name) for name in REQUIRED_COMPONENTS):
        return None
    return {
        "type": "service_account",
        "project_id": components["project_id"],
        "private_key_id": components["private_key_id"],
        "private_key": components["private_key"].replace("\\n", "\n"),
        "client_email": components["client_email"],
        "client_id": components.get("client_id", ""),
        "auth_uri": GCP_AUTH_URI,
        "token_uri": GCP_TOKEN_URI,
        "auth_provider_x509_cert_url": components["auth_provider_x509_cert_url"],
        "client_x509_cert_url": components.get("client_x509_cert_url", ""),
    }


class GCPDetector(Detector):
    secret_type = "Google Cloud Platform"
    validator_class = GCPValidator
    fields = ("service_account_key",)
    resource_pattern = "GCP Service Account Key"

    async def find(self, content: str, url: str) -> List[Occurrence]:
        if not get_pattern("GCP Service Account Key").search(content):
            return []
        components = extract_components(content)
        credentials = build_credentials(components)
        if credentials is None:
            return []

        document = json.dumps(credentials)
        rejected, _ = is_known_false_positive(document)
        if rejected:
            return []

        fields = {"service_account_key": document}
        fields.update({k: v for k, v in credentials.items() if k != "private_key"})
        if self.already_found(self.existing_findings(), fields):
            return []
        result = await self.check(fields)
        if result is None:
            return []

        needles = [components[name] for name in LOCATE_ORDER if components.get(name)]
        return [await self.emit(content, url, fields, needles, result)]
