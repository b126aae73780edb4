# SPDX-License-Identifier: MIT
"""
AWS Access Key detectors.

Access key ids are correlated with every nearby 40-character secret; session
credentials additionally need an STS session token that plausibly belongs to
the secret.
"""
from __future__ import annotations

from typing import List

from ..core.findings import Occurrence
from ..validate.aws import AWSAccessKeyValidator, AWSSessionKeyValidator
from .base import Detector, PairingPolicy

# base64 fragments of "aws" and "origin_ec" that STS session tokens embed
SESSION_TOKEN_MARKERS = ("YXdz", "Jb3JpZ2luX2Vj")


def session_token_matches(token: str, secret: str) -> bool:
    return any(marker in token for marker in SESSION_TOKEN_MARKERS) or secret in token


class AWSAccessKeysDetector(Detector):
    secret_type = "AWS Access & Secret Keys"
    validator_class = AWSAccessKeyValidator
    fields = ("access_key_id", "secret_key_id")
    dedup_fields = ("access_key_id",)
    resource_pattern = "AWS Access Key"
    false_positive_check = True

    async def find(self, content: str, url: str) -> List[Occurrence]:
        access_keys = self.extract(content, "AWS Access Key")
        if not access_keys:
            return []
        secret_keys = self.extract(content, "AWS Secret Key")
        pairs = await self.correlate(
            self.existing_findings(), access_keys, secret_keys, PairingPolicy.ALL_VALID,
            lambda key_id, secret: {"access_key_id": key_id, "secret_key_id": secret},
        )
        return [
            await self.emit(content, url, fields, [fields["access_key_id"], fields["secret_key_id"]], result)
            for fields, result in pairs
        ]


class AWSSessionKeysDetector(Detector):
    secret_type = "AWS Session Keys"
    validator_class = AWSSessionKeyValidator
    fields = ("access_key_id", "secret_key_id", "session_key_id")
    dedup_fields = ("access_key_id",)
    resource_pattern = "AWS Session Key ID"
    false_positive_check = True

    async def find(self, content: str, url: str) -> List[Occurrence]:
        access_keys = self.extract(content, "AWS Session Key ID")
        if not access_keys:
            return []
        secret_keys = self.extract(content, "AWS Session Secret Key")
        tokens = self.extract(content, "AWS Session Token")
        credentials = [(s, t) for s in secret_keys for t in tokens if session_token_matches(t, s)]

        def build(key_id, credential):
            secret, token = credential
            return {"access_key_id": key_id, "secret_key_id": secret, "session_key_id": token}

        pairs = await self.correlate(
            self.existing_findings(), access_keys, credentials, PairingPolicy.ALL_VALID, build
        )
        return [
            await self.emit(
                content, url, fields,
                [fields["access_key_id"], fields["secret_key_id"], fields["session_key_id"]],
                result,
            )
            for fields, result in pairs
        ]
