from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Type

from .ai import (
    AnthropicDetector,
    AzureOpenAIDetector,
    DeepAIDetector,
    DeepSeekDetector,
    GeminiDetector,
    GroqDetector,
    HuggingFaceDetector,
    LangSmithDetector,
    OpenAIDetector,
)
from .aws import AWSAccessKeysDetector, AWSSessionKeysDetector
from .base import Detector, DetectorContext
from .docker import DockerDetector
from .gcp import GCPDetector
from .saas import (
    ApolloDetector,
    ArtifactoryDetector,
    JotFormDetector,
    MailchimpDetector,
    MailgunDetector,
    MakeDetector,
    MakeMCPDetector,
    PayPalOAuthDetector,
    RapidAPIDetector,
    SlackDetector,
    TelegramBotTokenDetector,
)

# Static id -> detector table; ids are the family secret types
DETECTORS: Dict[str, Type[Detector]] = {
    cls.secret_type: cls
    for cls in (
        AWSAccessKeysDetector,
        AWSSessionKeysDetector,
        AnthropicDetector,
        OpenAIDetector,
        GeminiDetector,
        GroqDetector,
        HuggingFaceDetector,
        DeepSeekDetector,
        DeepAIDetector,
        AzureOpenAIDetector,
        ApolloDetector,
        ArtifactoryDetector,
        DockerDetector,
        GCPDetector,
        JotFormDetector,
        LangSmithDetector,
        MailchimpDetector,
        MailgunDetector,
        MakeDetector,
        MakeMCPDetector,
        PayPalOAuthDetector,
        RapidAPIDetector,
        SlackDetector,
        TelegramBotTokenDetector,
    )
}


class DetectorRegistry:
    """Light-weight container keeping track of detector instances."""

    def __init__(self) -> None:
        self._detectors: Dict[str, Detector] = {}

    def register(self, detector: Detector) -> None:
        """Add *detector*; duplicate names fail fast."""
        if detector.name in self._detectors:
            raise ValueError(f"Duplicate detector: {detector.name}")
        self._detectors[detector.name] = detector

    def get(self, name: str) -> Optional[Detector]:
        return self._detectors.get(name)

    def detectors(self) -> List[Detector]:
        """Return a copy of the registered detectors."""
        return list(self._detectors.values())

    def names(self) -> List[str]:
        return list(self._detectors)

    def __len__(self) -> int:
        return len(self._detectors)


def build_registry(context: Optional[DetectorContext] = None, disabled: Iterable[str] = ()) -> DetectorRegistry:
    """Instantiate every family detector except those named in *disabled*."""
    context = context or DetectorContext()
    skip = set(disabled)
    registry = DetectorRegistry()
    for name, cls in DETECTORS.items():
        if name not in skip:
            registry.register(cls(context))
    return registry


def detector_for(secret_type: str, context: Optional[DetectorContext] = None) -> Optional[Detector]:
    """Detector handling *secret_type*, or ``None`` for unknown families."""
    cls = DETECTORS.get(secret_type)
    return cls(context or DetectorContext()) if cls else None
