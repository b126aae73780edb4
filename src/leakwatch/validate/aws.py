# SPDX-License-Identifier: MIT
"""
AWS credential validators.

Both key families call STS ``GetCallerIdentity`` with a hand-built
Signature Version 4 request; session keys add ``x-amz-security-token`` to
the signed headers. A 403 is retried once after a short pause because fresh
STS credentials can take a moment to propagate.
"""
from __future__ import annotations

import asyncio
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Dict, Optional
from urllib.parse import quote

from .core import HTTPValidator, ValidationResult, json_body

STS_HOST = "sts.amazonaws.com"
STS_REGION = "us-east-1"
STS_SERVICE = "sts"
ALGORITHM = "AWS4-HMAC-SHA256"
QUERY = {"Action": "GetCallerIdentity", "Version": "2011-06-15"}


def _sha256(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _hmac(key: bytes, data: str) -> bytes:
    return hmac.new(key, data.encode("utf-8"), hashlib.sha256).digest()


def sign_get_caller_identity(
    access_key_id: str,
    secret_access_key: str,
    session_token: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """Return the headers of a SigV4-signed STS GetCallerIdentity GET."""
    now = now or datetime.now(timezone.utc)
    datestamp = now.strftime("%Y%m%d")
    amz_date = now.strftime("%Y%m%dT%H%M%SZ")

    canonical_query = "&".join(f"{quote(k, safe='')}={quote(v, safe='')}" for k, v in sorted(QUERY.items()))
    canonical_headers = f"host:{STS_HOST}\nx-amz-date:{amz_date}\n"
    signed_headers = "host;x-amz-date"
    if session_token:
        canonical_headers += f"x-amz-security-token:{session_token}\n"
        signed_headers += ";x-amz-security-token"
    payload_hash = _sha256("")

    canonical_request = "\n".join(
        ["GET", "/", canonical_query, canonical_headers, signed_headers, payload_hash]
    )
    scope = f"{datestamp}/{STS_REGION}/{STS_SERVICE}/aws4_request"
    string_to_sign = "\n".join([ALGORITHM, amz_date, scope, _sha256(canonical_request)])

    key = _hmac(f"AWS4{secret_access_key}".encode("utf-8"), datestamp)
    key = _hmac(key, STS_REGION)
    key = _hmac(key, STS_SERVICE)
    key = _hmac(key, "aws4_request")
    signature = hmac.new(key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    headers = {
        "Accept": "application/json",
        "Authorization": f"{ALGORITHM} Credential={access_key_id}/{scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}",
        "x-amz-date": amz_date,
        "x-amz-content-sha256": payload_hash,
    }
    if session_token:
        headers["x-amz-security-token"] = session_token
    return headers


class AWSAccessKeyValidator(HTTPValidator):
    """Validate an access key id + secret pair via STS."""

    name = "aws_access_keys"
    retry_delay = 5.0

    async def _caller_identity(
        self, access_key_id: str, secret_access_key: str, session_token: Optional[str] = None
    ) -> ValidationResult:
        url = f"https://{STS_HOST}/?" + "&".join(f"{k}={v}" for k, v in sorted(QUERY.items()))
        for attempt in range(2):
            headers = sign_get_caller_identity(access_key_id.strip(), secret_access_key.strip(), session_token)
            response = await self.request("GET", url, headers=headers)
            if response.is_success:
                data = json_body(response) or {}
                result = (data.get("GetCallerIdentityResponse") or {}).get("GetCallerIdentityResult") or {}
                return ValidationResult.ok(
                    type=access_key_id[:4], accountId=result.get("Account", ""), arn=result.get("Arn", "")
                )
            if response.status_code == 403 and attempt == 0:
                await asyncio.sleep(self.retry_delay)
                continue
            break
        return ValidationResult.invalid(f"STS returned status {response.status_code}", accountId="", arn="")

    async def validate(self, access_key_id: str, secret_access_key: str) -> ValidationResult:
        return await self._caller_identity(access_key_id, secret_access_key)


class AWSSessionKeyValidator(AWSAccessKeyValidator):
    """Validate temporary STS credentials (id + secret + session token)."""

    name = "aws_session_keys"

    async def validate(self, access_key_id: str, secret_access_key: str, session_token: str) -> ValidationResult:
        return await self._caller_identity(access_key_id, secret_access_key, session_token)
