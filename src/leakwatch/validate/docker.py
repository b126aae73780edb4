# SPDX-License-Identifier: MIT
"""
Docker registry credential validator.

Speaks the registry v2 handshake: a direct Basic-authenticated ``/v2/``
probe, then the bearer token realm advertised in ``WWW-Authenticate``.
"""
from __future__ import annotations

import json
import re
from typing import Dict, Optional
from urllib.parse import urlencode

from .core import HTTPValidator, ValidationResult

EXAMPLE_REGISTRIES = frozenset(
    {
        "https://index.docker.io/v1/",
        "registry.hostname.com",
        "registry.example.com:5000",
        "registry2.example.com:5000",
        "your.private.registry.example.com",
    }
)

_CHALLENGE_PARAM = re.compile(r'(\w+)="?([^",]+)"?')


def normalize_registry(registry: str) -> str:
    """Return the ``/v2/`` endpoint URL for a registry host."""
    host = registry.strip()
    if host in ("docker.io", "https://docker.io"):
        host = "index.docker.io"
    host = host.rstrip("/")
    if not host.startswith(("http://", "https://")):
        host = f"https://{host}"
    return f"{host}/v2/"


def parse_bearer_challenge(header: str) -> Optional[Dict[str, str]]:
    """Parse ``Bearer realm="...",service="..."`` into a dict."""
    if not header or not header.lower().startswith("bearer "):
        return None
    params = dict(_CHALLENGE_PARAM.findall(header[len("bearer ") :]))
    return params if "realm" in params else None


class DockerValidator(HTTPValidator):
    """
    Validate a ``{"auths": {registry: {...}}}`` credentials document.

    Only the first registry entry is probed.
    """

    name = "docker"

    async def validate(self, credentials: str) -> ValidationResult:
        try:
            auths = json.loads(credentials).get("auths") or {}
        except (ValueError, AttributeError):
            return ValidationResult.invalid("Invalid Docker credentials format")
        if not auths:
            return ValidationResult.invalid("No registry credentials present")

        registry, entry = next(iter(auths.items()))
        if registry in EXAMPLE_REGISTRIES:
            return ValidationResult.invalid("Example registry - validation skipped")
        entry = entry or {}
        auth = entry.get("auth")
        if not auth:
            return ValidationResult.invalid("Missing auth for registry")

        headers = {"Authorization": f"Basic {auth}"}
        response = await self.request("GET", normalize_registry(registry), headers=headers)
        if response.status_code == 200:
            return ValidationResult.ok(type="REGISTRY", registry=registry, username=entry.get("username"))

        if response.status_code == 401:
            challenge = parse_bearer_challenge(response.headers.get("www-authenticate", ""))
            if challenge:
                query = {"account": entry.get("username") or ""}
                if challenge.get("service"):
                    query["service"] = challenge["service"]
                token_url = f"{challenge['realm']}?{urlencode(query)}"
                token_response = await self.request("GET", token_url, headers=headers)
                if token_response.status_code == 200:
                    return ValidationResult.ok(type="REGISTRY", registry=registry, username=entry.get("username"))
                return ValidationResult.invalid(f"Token endpoint returned status {token_response.status_code}")
            return ValidationResult.invalid("Invalid registry credentials")
        return ValidationResult.invalid(f"Registry returned status {response.status_code}")
