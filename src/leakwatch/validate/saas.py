# SPDX-License-Identifier: MIT
"""
Live validators for SaaS and messaging credentials.

Apollo, Artifactory, JotForm, Mailchimp, Mailgun, Make, Make MCP,
PayPal OAuth, RapidAPI, Slack and Telegram.
"""
from __future__ import annotations

import base64
from typing import Optional

from .core import HTTPValidator, ValidationResult, json_body, status_result


def _basic(user: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")


class ApolloValidator(HTTPValidator):
    name = "apollo"

    async def validate(self, api_key: str) -> ValidationResult:
        response = await self.request(
            "GET",
            "https://api.apollo.io/v1/auth/health",
            headers={"x-api-key": api_key, "Content-Type": "application/json", "Cache-Control": "no-cache"},
        )
        if response.status_code == 200:
            data = json_body(response) or {}
            if data.get("is_logged_in") is True:
                return ValidationResult.ok(type="API_KEY")
            return ValidationResult.invalid("API key is not logged in")
        return status_result(response)


class ArtifactoryValidator(HTTPValidator):
    name = "artifactory"

    async def validate(self, api_key: str, url: Optional[str] = None) -> ValidationResult:
        if not url:
            return ValidationResult.invalid("Artifactory URL is required for validation")
        base = url if url.startswith(("http://", "https://")) else f"https://{url}"
        response = await self.request(
            "GET",
            f"{base.rstrip('/')}/artifactory/api/storageinfo",
            headers={"X-JFrog-Art-Api": api_key, "Content-Type": "application/json"},
        )
        if response.is_success:
            return ValidationResult.ok(type="ACCESS_TOKEN", permissions=["read"])
        if response.status_code == 403:
            return ValidationResult.invalid("Token exists but lacks required permissions")
        if response.status_code == 401:
            return ValidationResult.invalid("Invalid Artifactory access token")
        return ValidationResult.invalid(f"API returned status {response.status_code}")


class JotFormValidator(HTTPValidator):
    name = "jotform"

    async def validate(self, api_key: str) -> ValidationResult:
        response = await self.request(
            "GET", "https://api.jotform.com/user", params={"apiKey": api_key}, headers={"Accept": "application/json"}
        )
        return status_result(response, type="API_KEY")


class MailchimpValidator(HTTPValidator):
    name = "mailchimp"

    async def validate(self, api_key: str) -> ValidationResult:
        parts = api_key.split("-")
        if len(parts) < 2 or not parts[1]:
            return ValidationResult.invalid("Invalid API key format - missing datacenter")
        response = await self.request(
            "GET",
            f"https://{parts[1]}.api.mailchimp.com/3.0/",
            headers={"Accept": "application/json", "Authorization": _basic("anystring", api_key)},
        )
        return status_result(response, type="API_KEY")


class MailgunValidator(HTTPValidator):
    name = "mailgun"

    async def validate(self, api_key: str) -> ValidationResult:
        # 72-char tokens are already base64 basic credentials
        authorization = f"Basic {api_key}" if len(api_key) == 72 else _basic("api", api_key)
        response = await self.request(
            "GET", "https://api.mailgun.net/v3/domains", headers={"Authorization": authorization}
        )
        if response.is_success:
            data = json_body(response) or {}
            return ValidationResult.ok(type="API_KEY", totalDomains=data.get("total_count"))
        return status_result(response)


class MakeValidator(HTTPValidator):
    """Probe each Make region in priority order; the first positive answer wins."""

    name = "make"
    BASE_URLS = (
        "https://eu1.make.com/api/v2/",
        "https://eu2.make.com/api/v2/",
        "https://us1.make.com/api/v2/",
        "https://us2.make.com/api/v2/",
        "https://eu1.make.celonis.com/api/v2/",
        "https://eu2.make.celonis.com/api/v2/",
    )

    async def validate(self, api_token: str) -> ValidationResult:
        headers = {"Authorization": f"Token {api_token}", "Content-Type": "application/json"}
        for base in self.BASE_URLS:
            response = await self.request("GET", base + "users/me/current-authorization", headers=headers)
            if response.status_code == 200 and isinstance(json_body(response), list):
                return ValidationResult.ok(type="API_TOKEN", region=base.split("//")[1].split("/")[0])
        return ValidationResult.invalid("Token rejected by every Make region")


class MakeMCPValidator(HTTPValidator):
    name = "make_mcp"

    async def validate(self, full_url: str) -> ValidationResult:
        status = await self.stream_status(
            "GET", full_url, headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"}
        )
        if status == 200:
            return ValidationResult.ok(type="MCP_TOKEN")
        return ValidationResult.invalid(f"MCP endpoint returned status {status}")


class PayPalOAuthValidator(HTTPValidator):
    name = "paypal_oauth"
    TOKEN_URL = "https://api-m.sandbox.paypal.com/v1/oauth2/token"

    async def validate(self, client_id: str, client_secret: str) -> ValidationResult:
        response = await self.request(
            "POST",
            self.TOKEN_URL,
            headers={"Authorization": _basic(client_id, client_secret), "Accept": "application/json"},
            data={"grant_type": "client_credentials"},
        )
        data = json_body(response) or {}
        if response.is_success:
            return ValidationResult.ok(
                type="CLIENT_CREDENTIALS", scope=data.get("scope"), appId=data.get("app_id")
            )
        error = data.get("error_description") or data.get("error") or f"API returned status {response.status_code}"
        return ValidationResult.invalid(error)


class RapidAPIValidator(HTTPValidator):
    name = "rapidapi"
    ENDPOINT = "https://covid-193.p.rapidapi.com/countries"

    async def validate(self, api_key: str) -> ValidationResult:
        response = await self.request(
            "GET",
            self.ENDPOINT,
            headers={"x-rapidapi-key": api_key, "x-rapidapi-host": "covid-193.p.rapidapi.com"},
        )
        if response.is_success:
            return ValidationResult.ok(type="API_KEY")
        if response.status_code in (401, 403):
            return ValidationResult.invalid("Unauthorized")
        return ValidationResult.invalid(f"Unexpected HTTP status {response.status_code} from {self.ENDPOINT}")


SLACK_ERRORS = {
    "invalid_auth": "Invalid authentication token",
    "account_inactive": "Authentication token is for a deleted user or workspace",
    "token_revoked": "Authentication token has been revoked",
}

SLACK_TOKEN_TYPES = {
    "xoxb": "BOT",
    "xoxp": "USER",
    "xoxa": "WORKSPACE_ACCESS",
    "xoxr": "WORKSPACE_REFRESH",
}


class SlackValidator(HTTPValidator):
    name = "slack"

    async def validate(self, token: str) -> ValidationResult:
        response = await self.request(
            "POST",
            "https://slack.com/api/auth.test",
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json; charset=utf-8"},
        )
        if not response.is_success:
            return ValidationResult.invalid(f"HTTP {response.status_code}: {response.reason_phrase}")

        data = json_body(response) or {}
        if not data.get("ok"):
            error = data.get("error")
            return ValidationResult.invalid(SLACK_ERRORS.get(error, error or "Unknown error"))
        return ValidationResult.ok(
            type=SLACK_TOKEN_TYPES.get(token[:4]),
            url=data.get("url"),
            team=data.get("team"),
            user=data.get("user"),
            teamId=data.get("team_id"),
            userId=data.get("user_id"),
            botId=data.get("bot_id"),
        )


class TelegramBotValidator(HTTPValidator):
    name = "telegram_bot_token"

    async def validate(self, bot_token: str) -> ValidationResult:
        response = await self.request("GET", f"https://api.telegram.org/bot{bot_token}/getMe")
        if response.is_success:
            data = json_body(response) or {}
            if data.get("ok"):
                return ValidationResult.ok(type="BOT_TOKEN", username=(data.get("result") or {}).get("username"))
            return ValidationResult.invalid(data.get("description") or "Invalid bot token")
        if response.status_code in (401, 404):
            return ValidationResult.invalid("Unauthorized or not found")
        return ValidationResult.invalid(f"Unexpected HTTP status {response.status_code}")
