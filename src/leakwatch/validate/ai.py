# SPDX-License-Identifier: MIT
"""
Live validators for AI provider credentials.

Groq, OpenAI, Anthropic, DeepSeek, DeepAI, Hugging Face, Gemini,
Azure OpenAI and LangSmith.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import re
import time
from datetime import datetime, timezone
from typing import Optional

from .core import HTTPValidator, ValidationResult, json_body, status_result


def _iso_from_epoch(value) -> Optional[str]:
    if not value:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc).isoformat().replace("+00:00", "Z")


class GroqValidator(HTTPValidator):
    name = "groq"

    async def validate(self, api_key: str) -> ValidationResult:
        response = await self.request(
            "GET",
            "https://api.groq.com/openai/v1/models",
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        )
        return status_result(response, type="API_KEY")


class OpenAIValidator(HTTPValidator):
    name = "openai"

    async def validate(self, api_key: str) -> ValidationResult:
        response = await self.request(
            "GET",
            "https://api.openai.com/v1/me",
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json; charset=utf-8"},
        )
        if response.status_code == 401:
            return ValidationResult.invalid("Invalid API key")
        if response.status_code != 200:
            return ValidationResult.invalid(f"Unexpected HTTP response status {response.status_code}")

        data = json_body(response) or {}
        orgs = (data.get("orgs") or {}).get("data") or []
        metadata = {
            "id": data.get("id"),
            "totalOrgs": len(orgs),
            "mfaEnabled": data.get("mfa_flag_enabled"),
            "createdAt": _iso_from_epoch(data.get("created")),
        }
        if orgs:
            metadata.update(
                description=orgs[0].get("description"),
                isPersonal=orgs[0].get("personal"),
                isDefault=orgs[0].get("is_default"),
            )
        return ValidationResult.ok(type="USER", **metadata)


class AnthropicValidator(HTTPValidator):
    """Probe the admin endpoint first, then the regular models endpoint."""

    name = "anthropic"
    ENDPOINTS = (
        ("ADMIN", "https://api.anthropic.com/v1/organizations/api_keys"),
        ("USER", "https://api.anthropic.com/v1/models"),
    )

    async def validate(self, api_key: str) -> ValidationResult:
        headers = {"x-api-key": api_key, "anthropic-version": "2023-06-01", "Content-Type": "application/json"}
        for key_type, endpoint in self.ENDPOINTS:
            response = await self.request("GET", endpoint, headers=headers)
            if response.status_code == 200:
                return ValidationResult.ok(type=key_type)
            if response.status_code in (401, 404):
                continue
            return ValidationResult.invalid(f"Unexpected HTTP status {response.status_code} from {endpoint}")
        return ValidationResult.invalid("Invalid API key")


class DeepSeekValidator(HTTPValidator):
    name = "deepseek"

    async def validate(self, api_key: str) -> ValidationResult:
        response = await self.request(
            "GET",
            "https://api.deepseek.com/user/balance",
            headers={"Authorization": f"Bearer {api_key}", "Accept": "application/json"},
        )
        if not response.is_success:
            return status_result(response)
        data = json_body(response) or {}
        return ValidationResult.ok(
            type="API_KEY",
            isAvailable=data.get("is_available"),
            balanceInfos=data.get("balance_infos") or [],
        )


class DeepAIValidator(HTTPValidator):
    name = "deepai"

    async def validate(self, api_key: str) -> ValidationResult:
        response = await self.request(
            "POST",
            "https://api.deepai.org/api/text-tagging",
            headers={"api-key": api_key},
            files={"text": (None, "test")},
        )
        if response.is_success:
            return ValidationResult.ok(type="API_KEY", response=json_body(response))
        if response.status_code in (401, 403):
            return ValidationResult.invalid("Invalid API key")
        return ValidationResult.invalid(f"Unexpected status code: {response.status_code}")


class HuggingFaceValidator(HTTPValidator):
    name = "huggingface"

    async def validate(self, api_key: str) -> ValidationResult:
        response = await self.request(
            "GET",
            "https://huggingface.co/api/whoami-v2",
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        )
        if response.status_code == 401:
            return ValidationResult.invalid("Invalid API key")
        if not response.is_success:
            return ValidationResult.invalid(f"Unexpected HTTP response status {response.status_code}")

        data = json_body(response) or {}
        auth = data.get("auth") or {}
        token = auth.get("accessToken") or {}
        token_type = "USER"
        token_info = "Unknown Token Type"
        display, role = token.get("displayName"), token.get("role")
        if display or role:
            if display and role:
                token_info = f"{display} ({role})"
            else:
                token_info = display or f"({role})"
        elif auth.get("type"):
            token_info = auth["type"]
            token_type = "ORGANIZATION"

        return ValidationResult.ok(
            type=token_type,
            username=data.get("name"),
            email=data.get("email"),
            tokenInfo=token_info,
            organizations=[f"{org.get('name')}:{org.get('roleInOrg')}" for org in data.get("orgs") or []],
        )


class GeminiValidator(HTTPValidator):
    """Gemini exchange REST API: HMAC-SHA384 signed account request."""

    name = "gemini"
    BASE_URL = "https://api.gemini.com"
    ENDPOINT = "/v1/account"

    def build_headers(self, api_key: str, api_secret: str, nonce: Optional[int] = None) -> dict:
        params = {"request": self.ENDPOINT, "nonce": str(nonce if nonce is not None else int(time.time() * 1_000_000))}
        if api_key.split("-")[0] == "master":
            params["account"] = "primary"
        payload = base64.b64encode(json.dumps(params, separators=(",", ":")).encode()).decode()
        signature = hmac.new(api_secret.encode(), payload.encode(), hashlib.sha384).hexdigest()
        return {
            "Content-Type": "text/plain",
            "Content-Length": "0",
            "X-GEMINI-APIKEY": api_key,
            "X-GEMINI-PAYLOAD": payload,
            "X-GEMINI-SIGNATURE": signature,
            "Cache-Control": "no-cache",
        }

    async def validate(self, api_key: str, api_secret: str) -> ValidationResult:
        response = await self.request(
            "POST", self.BASE_URL + self.ENDPOINT, headers=self.build_headers(api_key, api_secret)
        )
        if response.status_code in (401, 403):
            return ValidationResult.invalid("Invalid API key or secret")
        if not response.is_success:
            return ValidationResult.invalid(f"Unexpected HTTP response status {response.status_code}")

        data = json_body(response) or {}
        is_master = api_key.split("-")[0] == "master"
        return ValidationResult.ok(
            type="MASTER" if is_master else "ACCOUNT",
            account=data.get("account"),
            name=data.get("name"),
            isMainAccount=is_master,
            isActive=data.get("is_active"),
            tradeVolume=data.get("trade_volume_30d"),
            accountCreated=_iso_from_epoch(data.get("created")),
        )


AZURE_REGION = re.compile(r"https?://([^.]+)\.openai\.azure\.com")


class AzureOpenAIValidator(HTTPValidator):
    name = "azure_openai"
    API_VERSION = "2024-02-01"

    async def validate(self, api_key: str, url: Optional[str] = None) -> ValidationResult:
        if not url:
            return ValidationResult.invalid("Azure OpenAI endpoint URL is required for validation")
        endpoint = f"{url.rstrip('/')}/openai/models?api-version={self.API_VERSION}"
        response = await self.request("GET", endpoint, headers={"Api-Key": api_key, "Content-Type": "application/json"})

        if response.status_code == 401:
            return ValidationResult.invalid("Invalid Azure OpenAI API key")
        if response.status_code == 403:
            return ValidationResult.invalid("Azure OpenAI API key lacks permission for this resource")
        if response.status_code == 404:
            return ValidationResult.invalid("Azure OpenAI endpoint not found")
        if not response.is_success:
            return ValidationResult.invalid(f"API returned status {response.status_code}")

        data = json_body(response) or {}
        if data.get("object") != "list" and "data" not in data:
            return ValidationResult.invalid("Unexpected response body from Azure OpenAI")
        region = AZURE_REGION.match(url)
        return ValidationResult.ok(
            type="API_KEY",
            deployments=[item.get("id") for item in data.get("data") or [] if isinstance(item, dict)],
            region=region.group(1) if region else None,
        )


class LangSmithValidator(HTTPValidator):
    name = "langsmith"

    async def validate(self, api_key: str) -> ValidationResult:
        response = await self.request(
            "GET",
            "https://api.smith.langchain.com/api/v1/api-key",
            headers={"X-API-Key": api_key, "Content-Type": "application/json"},
        )
        if response.status_code == 200:
            return ValidationResult.ok(type="PERSONAL" if api_key.startswith("lsv2_pt_") else "SERVICE")
        if response.status_code in (401, 403):
            return ValidationResult.invalid("Unauthorized")
        return ValidationResult.invalid(f"Unexpected HTTP status {response.status_code}")
