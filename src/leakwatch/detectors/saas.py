# SPDX-License-Identifier: MIT
"""SaaS, messaging and payments detectors."""
from __future__ import annotations

import re
from typing import List, Optional

from ..core.findings import Occurrence
from ..patterns import get_pattern
from ..validate.saas import (
    ApolloValidator,
    ArtifactoryValidator,
    JotFormValidator,
    MailchimpValidator,
    MailgunValidator,
    MakeMCPValidator,
    MakeValidator,
    PayPalOAuthValidator,
    RapidAPIValidator,
    SlackValidator,
    TelegramBotValidator,
)
from .base import Detector, PairingPolicy, SingleKeyDetector

# Identifier shapes that collide with the 22-char Apollo key alphabet
APOLLO_CODE_PATTERNS = [
    re.compile(r"^[A-Z][a-z]+(?:[A-Z][a-z]+)+$"),
    re.compile(r"^[a-z]+(?:[A-Z][a-z]+)+$"),
    re.compile(r"^[A-Za-z]*[A-Z]{3,}[A-Za-z]*$"),
    re.compile(r"^[A-Za-z]+\d{1,3}[A-Za-z]+$"),
]

MCP_TOKEN = re.compile(r"/u/([a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})/")


class ApolloDetector(SingleKeyDetector):
    secret_type = "Apollo"
    pattern_name = "Apollo API Key"
    validator_class = ApolloValidator
    false_positive_check = True

    def accept(self, candidate: str) -> bool:
        return not any(p.match(candidate) for p in APOLLO_CODE_PATTERNS)


class JotFormDetector(SingleKeyDetector):
    secret_type = "JotForm"
    pattern_name = "JotForm API Key"
    validator_class = JotFormValidator
    code_like_check = True


class MailchimpDetector(SingleKeyDetector):
    secret_type = "Mailchimp"
    pattern_name = "Mailchimp API Key"
    validator_class = MailchimpValidator
    code_like_check = True


class MailgunDetector(SingleKeyDetector):
    secret_type = "Mailgun"
    pattern_name = "Mailgun Original Token"
    validator_class = MailgunValidator
    code_like_check = True

    TOKEN_PATTERNS = ("Mailgun Original Token", "Mailgun Key Token", "Mailgun Hex Token")

    def candidates(self, content: str) -> List[str]:
        found: List[str] = []
        for name in self.TOKEN_PATTERNS:
            found.extend(c for c in self.extract(content, name) if c not in found)
        return found


class RapidAPIDetector(SingleKeyDetector):
    secret_type = "RapidAPI"
    pattern_name = "RapidAPI Key"
    validator_class = RapidAPIValidator
    code_like_check = True


class SlackDetector(SingleKeyDetector):
    secret_type = "Slack"
    pattern_name = "Slack Token"
    validator_class = SlackValidator
    fields = ("token",)
    false_positive_check = True


class TelegramBotTokenDetector(SingleKeyDetector):
    secret_type = "Telegram Bot Token"
    pattern_name = "Telegram Bot Token"
    validator_class = TelegramBotValidator
    fields = ("bot_token",)


class MakeDetector(SingleKeyDetector):
    secret_type = "Make"
    pattern_name = "Make API Token"
    validator_class = MakeValidator
    fields = ("api_token",)
    false_positive_check = True
    allow_uuid = True


class MakeMCPDetector(Detector):
    """Make MCP server URLs; the UUID path segment is the credential."""

    secret_type = "Make MCP"
    validator_class = MakeMCPValidator
    fields = ("full_url",)
    dedup_fields = ("mcp_token",)
    resource_pattern = "Make MCP Token"
    false_positive_check = True
    allow_uuid = True

    async def find(self, content: str, url: str) -> List[Occurrence]:
        pattern = get_pattern("Make MCP Token")
        existing = self.existing_findings()
        occurrences = []
        for full_url in pattern.find_all(content):
            token = MCP_TOKEN.search(full_url)
            if token is None or not self.passes_filters(token.group(1), pattern):
                continue
            fields = {"mcp_token": token.group(1), "full_url": full_url}
            if self.already_found(existing, fields):
                continue
            result = await self.check(fields)
            if result is None:
                continue
            occurrences.append(await self.emit(content, url, fields, [full_url], result))
        return occurrences


class ArtifactoryDetector(Detector):
    """Artifactory token; the first JFrog URL that accepts it is recorded."""

    secret_type = "Artifactory"
    validator_class = ArtifactoryValidator
    fields = ("api_key", "url")
    optional_fields = ("url",)
    dedup_fields = ("api_key",)
    resource_pattern = "Artifactory Access Token"

    async def find(self, content: str, url: str) -> List[Occurrence]:
        tokens = self.extract(content, "Artifactory Access Token")
        if not tokens:
            return []
        hosts: List[Optional[str]] = list(self.extract(content, "Artifactory URL")) or [None]
        pairs = await self.correlate(
            self.existing_findings(), tokens, hosts, PairingPolicy.FIRST_VALID,
            lambda token, host: {"api_key": token, "url": host},
        )
        occurrences = []
        for fields, result in pairs:
            needles = [fields["api_key"]] + ([fields["url"]] if fields["url"] else [])
            occurrences.append(await self.emit(content, url, fields, needles, result))
        return occurrences


class PayPalOAuthDetector(Detector):
    """PayPal client id and secret, paired by position."""

    secret_type = "PayPal OAuth"
    validator_class = PayPalOAuthValidator
    fields = ("client_id", "client_secret")
    dedup_fields = ("client_id",)
    resource_pattern = "PayPal OAuth Client ID"
    false_positive_check = True
    require_all = True

    async def find(self, content: str, url: str) -> List[Occurrence]:
        client_ids = self.extract(content, "PayPal OAuth Client ID")
        if not client_ids:
            return []
        id_pattern = get_pattern("PayPal OAuth Client ID")
        secrets = self.extract(content, "PayPal OAuth Client Secret", lambda s: not id_pattern.search(s))
        pairs = await self.correlate(
            self.existing_findings(), client_ids, secrets, PairingPolicy.ZIP,
            lambda client_id, secret: {"client_id": client_id, "client_secret": secret},
        )
        return [
            await self.emit(content, url, fields, [fields["client_id"], fields["client_secret"]], result)
            for fields, result in pairs
        ]
