# SPDX-License-Identifier: MIT
"""
Docker registry credentials detector.

Bundles often inline a ``~/.docker/config.json`` style ``auths`` object,
usually as a JavaScript literal rather than strict JSON.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from typing import Any, Dict, List, Optional

from ..accuracy import shannon_entropy
from ..core.findings import Occurrence, SecretFields
from ..patterns import get_pattern
from ..validate.docker import DockerValidator
from .base import Detector

logger = logging.getLogger(__name__)

AUTH_ENTROPY = 3.0
PASSWORD_ENTROPY = 1.0

UNQUOTED_KEY = re.compile(r"([{,]\s*)([a-zA-Z_$][a-zA-Z0-9_$]*)\s*:")


def parse_auths_block(content: str, start: int) -> Optional[Dict[str, Any]]:
    """
    Parse the registry map that opens at *start* (just past ``auths: {``).

    Returns ``None`` when the block cannot be parsed even after quoting bare
    JavaScript keys.
    """
    depth = 1
    end = start
    for i in range(start, len(content)):
        if content[i] == "{":
            depth += 1
        elif content[i] == "}":
            depth -= 1
        end = i
        if depth == 0:
            break
    block = "{" + content[start:end] + "}"

    for text in (block, UNQUOTED_KEY.sub(r'\1"\2":', block)):
        try:
            parsed = json.loads(text)
        except ValueError:
            continue
        return parsed if isinstance(parsed, dict) else None
    return None


def process_docker_auth(entry: Dict[str, Any]) -> Optional[Dict[str, str]]:
    """
    Reconcile the ``auth`` token with explicit username/password.

    Returns the normalized ``{auth, username, password}`` or ``None`` when the
    credentials are incomplete or contradict each other.
    """
    username = entry.get("username") or ""
    password = entry.get("password") or ""
    if not (username and password):
        username = password = ""
    auth = entry.get("auth")

    if auth:
        try:
            decoded = base64.b64decode(auth, validate=True).decode("utf-8")
        except (binascii.Error, ValueError):
            return None
        parts = decoded.split(":")
        if len(parts) == 2:
            if username and password:
                if parts[0] != username or parts[1] != password:
                    return None
            else:
                username, password = parts

    if not (username and password):
        return None

    encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    if auth and encoded != auth:
        return None
    return {"auth": encoded, "username": username, "password": password}


def credentials_document(fields: SecretFields) -> str:
    """The ``auths`` document the registry validator consumes."""
    entry = {k: fields.get(k) or "" for k in ("auth", "username", "password", "email")}
    return json.dumps({"auths": {fields.get("registry") or "": entry}})


class DockerDetector(Detector):
    secret_type = "Docker"
    validator_class = DockerValidator
    fields = ("registry", "auth")
    dedup_fields = ("auth", "registry")
    dedup_any = True
    resource_pattern = "Docker Auth Config"

    def validation_args(self, fields: SecretFields):
        return (credentials_document(fields),)

    async def find(self, content: str, url: str) -> List[Occurrence]:
        pattern = get_pattern("Docker Auth Config")
        existing = self.existing_findings()
        occurrences = []

        for match in pattern.regex.finditer(content):
            auths = parse_auths_block(content, match.end())
            if not auths:
                continue
            for registry, entry in auths.items():
                if not isinstance(entry, dict):
                    continue
                processed = process_docker_auth(entry)
                if processed is None:
                    continue
                if shannon_entropy(processed["auth"]) < AUTH_ENTROPY:
                    continue
                if shannon_entropy(processed["password"]) < PASSWORD_ENTROPY:
                    continue

                fields = {"registry": registry, **processed, "email": entry.get("email") or ""}
                if self.already_found(existing, fields):
                    continue
                result = await self.check(fields)
                if result is None:
                    continue

                source = await self.context.resolver.resolve_block(content, url, fields, match.group(0))
                occurrences.append(self.assemble(fields, url, result, source))
        return occurrences
