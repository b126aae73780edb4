# SPDX-License-Identifier: MIT
"""
Validator core with a network kill-switch and per-validator rate limits.

Every family validator derives from ``HTTPValidator``; it owns the HTTP
transport, converts transport failures into invalid results, and honours the
``validators`` configuration section.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

NETWORK_DISABLED = "Network disabled - validator skipped"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one credential against its provider."""

    valid: bool
    error: Optional[str] = None
    type: Optional[str] = None  # key into the family's resource type map
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, type: Optional[str] = None, **metadata: Any) -> "ValidationResult":
        return cls(valid=True, type=type, metadata=metadata)

    @classmethod
    def invalid(cls, error: str, **metadata: Any) -> "ValidationResult":
        return cls(valid=False, error=error, metadata=metadata)


@dataclass(frozen=True)
class ValidatorSettings:
    """Runtime settings shared by all validators of a scan."""

    allow_network: bool = True
    timeout: float = 10.0
    qps: float = 0.0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ValidatorSettings":
        section = config.get("validators", {}) or {}
        return cls(
            allow_network=bool(section.get("allow_network", True)),
            timeout=float(section.get("timeout", 10.0)),
            qps=float(section.get("qps", 0.0)),
        )


class TokenBucket:
    """Token bucket for rate limiting."""

    def __init__(self, qps: float, capacity: Optional[float] = None):
        self.qps = qps
        # Burst capacity, never below one token
        self.capacity = max(capacity or qps, 1.0)
        self.tokens = self.capacity
        self.last_refill = time.monotonic()

    def _refill(self) -> None:
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.last_refill) * self.qps)
        self.last_refill = now

    def try_acquire(self, tokens: int = 1) -> bool:
        """Take *tokens* if available right now."""
        self._refill()
        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    async def acquire(self, tokens: int = 1) -> None:
        """Wait cooperatively until *tokens* can be taken."""
        while not self.try_acquire(tokens):
            await asyncio.sleep(max((tokens - self.tokens) / self.qps, 0.01))


class HTTPValidator:
    """
    Base class for provider validators.

    Subclasses implement ``validate`` and issue requests through
    ``request``; transport errors surface as ``httpx.HTTPError`` which
    ``__call__`` turns into invalid results.
    """

    name = "http"
    requires_network = True

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[ValidatorSettings] = None,
    ):
        self.client = client
        self.settings = settings or ValidatorSettings()
        self.bucket = TokenBucket(self.settings.qps) if self.settings.qps > 0 else None

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if self.bucket is not None:
            await self.bucket.acquire()
        kwargs.setdefault("timeout", self.settings.timeout)
        if self.client is not None:
            return await self.client.request(method, url, **kwargs)
        async with httpx.AsyncClient() as client:
            return await client.request(method, url, **kwargs)

    async def stream_status(self, method: str, url: str, **kwargs: Any) -> int:
        """Status code of a streaming response; the body is never read."""
        if self.bucket is not None:
            await self.bucket.acquire()
        kwargs.setdefault("timeout", self.settings.timeout)
        if self.client is not None:
            async with self.client.stream(method, url, **kwargs) as response:
                return response.status_code
        async with httpx.AsyncClient() as client:
            async with client.stream(method, url, **kwargs) as response:
                return response.status_code

    async def validate(self, *components: Any) -> ValidationResult:
        raise NotImplementedError

    async def __call__(self, *components: Any) -> ValidationResult:
        """Validate with the kill-switch and transport error handling applied."""
        if self.requires_network and not self.settings.allow_network:
            return ValidationResult.invalid(NETWORK_DISABLED)
        try:
            return await self.validate(*components)
        except httpx.TimeoutException:
            return ValidationResult.invalid("Request timeout")
        except httpx.HTTPError as e:
            return ValidationResult.invalid(f"Network error: {e}")


def status_result(
    response: httpx.Response,
    invalid_message: str = "Invalid API key",
    type: Optional[str] = None,
    **metadata: Any,
) -> ValidationResult:
    """Default classification: 2xx valid, 401/403 invalid, anything else invalid with status."""
    if response.is_success:
        return ValidationResult.ok(type=type, **metadata)
    if response.status_code in (401, 403):
        return ValidationResult.invalid(invalid_message)
    return ValidationResult.invalid(f"API returned status {response.status_code}")


def json_body(response: httpx.Response) -> Any:
    """Parsed JSON body or ``None`` when the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return None
