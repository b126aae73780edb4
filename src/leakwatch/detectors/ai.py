# SPDX-License-Identifier: MIT
"""AI provider detectors."""
from __future__ import annotations

from typing import List, Optional

from ..core.findings import Occurrence
from ..validate.ai import (
    AnthropicValidator,
    AzureOpenAIValidator,
    DeepAIValidator,
    DeepSeekValidator,
    GeminiValidator,
    GroqValidator,
    HuggingFaceValidator,
    LangSmithValidator,
    OpenAIValidator,
)
from .base import Detector, PairingPolicy, SingleKeyDetector

GROQ_KEY_LENGTH = 56


class GroqDetector(SingleKeyDetector):
    secret_type = "Groq"
    pattern_name = "Groq API Key"
    validator_class = GroqValidator
    code_like_check = True

    def accept(self, candidate: str) -> bool:
        return len(candidate) == GROQ_KEY_LENGTH


class OpenAIDetector(SingleKeyDetector):
    secret_type = "OpenAI"
    pattern_name = "OpenAI API Key"
    validator_class = OpenAIValidator


class AnthropicDetector(SingleKeyDetector):
    secret_type = "Anthropic AI"
    pattern_name = "Anthropic API Key"
    validator_class = AnthropicValidator


class DeepSeekDetector(SingleKeyDetector):
    secret_type = "DeepSeek"
    pattern_name = "DeepSeek API Key"
    validator_class = DeepSeekValidator


class DeepAIDetector(SingleKeyDetector):
    secret_type = "DeepAI"
    pattern_name = "DeepAI API Key"
    validator_class = DeepAIValidator


class HuggingFaceDetector(SingleKeyDetector):
    secret_type = "Hugging Face"
    pattern_name = "Hugging Face Token"
    validator_class = HuggingFaceValidator


class LangSmithDetector(SingleKeyDetector):
    secret_type = "LangSmith"
    pattern_name = "LangSmith API Key"
    validator_class = LangSmithValidator


class GeminiDetector(Detector):
    """Gemini exchange key + secret; every valid pairing is reported."""

    secret_type = "Gemini"
    validator_class = GeminiValidator
    fields = ("api_key", "api_secret")
    dedup_fields = ("api_key", "api_secret")
    resource_pattern = "Gemini API Key"

    async def find(self, content: str, url: str) -> List[Occurrence]:
        keys = self.extract(content, "Gemini API Key")
        if not keys:
            return []
        secrets = self.extract(content, "Gemini API Secret")
        existing = self.existing_findings()
        pairs = await self.correlate(
            existing, keys, secrets, PairingPolicy.ALL_VALID,
            lambda key, secret: {"api_key": key, "api_secret": secret},
        )
        return [
            await self.emit(content, url, fields, [fields["api_key"], fields["api_secret"]], result)
            for fields, result in pairs
        ]


class AzureOpenAIDetector(Detector):
    """Azure OpenAI key with an optional ``*.openai.azure.com`` endpoint."""

    secret_type = "Azure OpenAI"
    validator_class = AzureOpenAIValidator
    fields = ("api_key", "url")
    optional_fields = ("url",)
    dedup_fields = ("api_key",)
    resource_pattern = "Azure OpenAI API Key"

    async def find(self, content: str, url: str) -> List[Occurrence]:
        keys = self.extract(content, "Azure OpenAI API Key")
        if not keys:
            return []
        endpoints: List[Optional[str]] = list(self.extract(content, "Azure OpenAI URL")) or [None]
        existing = self.existing_findings()
        pairs = await self.correlate(
            existing, keys, endpoints, PairingPolicy.ALL_VALID,
            lambda key, endpoint: {"api_key": key, "url": endpoint},
        )
        occurrences = []
        for fields, result in pairs:
            needles = [fields["api_key"]] + ([fields["url"]] if fields["url"] else [])
            occurrences.append(await self.emit(content, url, fields, needles, result))
        return occurrences
