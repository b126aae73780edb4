# SPDX-License-Identifier: MIT
"""
Tests to ensure no plaintext secrets appear in rendered findings.
"""
from leakwatch.core.redaction import (
    redact_evidence_string,
    redact_finding,
    redact_scan_result,
    redact_secret,
    redact_text,
)

SECRET = "sk-Qw8Er7Ty6Ui5Op4As3Df2Gh1T3BlbkFJzX9cV8bN7mM6"


def serialized_finding():
    return {
        "fingerprint": "f",
        "secretType": "Azure OpenAI",
        "secretValue": {"match": {"api_key": SECRET, "url": "https://r.openai.azure.com"}},
        "occurrences": [
            {
                "secretValue": {"match": {"api_key": SECRET, "url": "https://r.openai.azure.com"}},
                "sourceContent": {"content": f'const key = "{SECRET}";'},
            }
        ],
    }


class TestSecretRedaction:
    """Redaction helpers."""

    def test_redact_secret(self):
        """First 6 and last 4 characters are kept."""
        assert redact_secret(SECRET) == SECRET[:6] + "****" + SECRET[-4:]

    def test_short_secret(self):
        """Short secrets are fully masked."""
        assert redact_secret("abcdefghij") == "****"
        assert redact_secret("") == "****"

    def test_redact_text(self):
        """Known secrets are replaced inside free text."""
        text = redact_text(f"token={SECRET}; other", [SECRET])
        assert SECRET not in text
        assert "other" in text

    def test_evidence_string(self):
        """Long tokens in evidence are masked, short words kept."""
        redacted = redact_evidence_string(f"found {SECRET}\nplain line")
        assert SECRET not in redacted
        assert "plain line" in redacted

    def test_finding_has_no_plaintext(self):
        """Secret fields and snippets are redacted; URLs are kept."""
        redacted = redact_finding(serialized_finding())
        rendered = str(redacted)
        assert SECRET not in rendered
        assert redacted["secretValue"]["match"]["url"] == "https://r.openai.azure.com"

    def test_scan_result(self):
        """A whole scan result is redacted."""
        result = redact_scan_result({"url": "u", "findings": [serialized_finding()], "errors": {}})
        assert SECRET not in str(result)
        assert result["url"] == "u"
