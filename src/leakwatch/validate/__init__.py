"""Provider validators, one per credential family."""
from .ai import (
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
from .aws import AWSAccessKeyValidator, AWSSessionKeyValidator, sign_get_caller_identity
from .core import (
    NETWORK_DISABLED,
    HTTPValidator,
    TokenBucket,
    ValidationResult,
    ValidatorSettings,
    json_body,
    status_result,
)
from .docker import DockerValidator
from .gcp import GCPValidator
from .saas import (
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

__all__ = [
    "NETWORK_DISABLED",
    "HTTPValidator",
    "TokenBucket",
    "ValidationResult",
    "ValidatorSettings",
    "json_body",
    "status_result",
    "sign_get_caller_identity",
    "AWSAccessKeyValidator",
    "AWSSessionKeyValidator",
    "AnthropicValidator",
    "AzureOpenAIValidator",
    "DeepAIValidator",
    "DeepSeekValidator",
    "GeminiValidator",
    "GroqValidator",
    "HuggingFaceValidator",
    "LangSmithValidator",
    "OpenAIValidator",
    "ApolloValidator",
    "ArtifactoryValidator",
    "JotFormValidator",
    "MailchimpValidator",
    "MailgunValidator",
    "MakeMCPValidator",
    "MakeValidator",
    "PayPalOAuthValidator",
    "RapidAPIValidator",
    "SlackValidator",
    "TelegramBotValidator",
    "DockerValidator",
    "GCPValidator",
]
