# SPDX-License-Identifier: MIT
"""
Tests for rechecking the validity of stored findings.
"""
import asyncio
from unittest.mock import patch

import httpx
import pytest

from conftest import Recorder
from leakwatch.core.findings import Finding, SecretValue, Validity
from leakwatch.core.store import MemoryFindingsStore
from leakwatch.detectors import DetectorContext
from leakwatch.detectors.ai import GroqDetector
from leakwatch.recheck import RecheckEngine


def groq_finding(fingerprint="fp-1", validity=Validity.VALID, value=None):
    return Finding(fingerprint, "Groq", value or SecretValue.single(api_key="gsk_live"), validity=validity)


def recheck(store, action, routes=None):
    recorder = Recorder(routes or {})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            engine = RecheckEngine(store, DetectorContext(store=store, client=client))
            return await action(engine)

    return asyncio.run(run()), recorder


class TestRecheckEngine:
    """Validity transitions and persistence."""

    def test_revoked_key_marked_invalid(self):
        """A rejected credential is persisted as invalid."""
        store = MemoryFindingsStore([groq_finding()])
        result, _ = recheck(store, lambda engine: engine.recheck_fingerprint("fp-1"))
        assert result == "invalid"
        stored = store.retrieve()[0]
        assert stored.validity is Validity.INVALID
        assert stored.validated_at is not None

    def test_valid_again(self):
        """An invalid finding can become valid again."""
        store = MemoryFindingsStore([groq_finding(validity=Validity.INVALID)])
        result, _ = recheck(
            store, lambda engine: engine.recheck_fingerprint("fp-1"), {"api.groq.com": (200, {})}
        )
        assert result == "valid"
        assert store.retrieve()[0].validity is Validity.VALID

    def test_validator_crash_marks_failed(self):
        """An exception while validating is persisted as failed."""
        store = MemoryFindingsStore([groq_finding()])
        with patch.object(GroqDetector, "revalidate", side_effect=RuntimeError("boom")):
            result, _ = recheck(store, lambda engine: engine.recheck_fingerprint("fp-1"))
        assert result == "failed"
        assert store.retrieve()[0].validity is Validity.FAILED

    def test_unknown_type_skipped(self):
        """Findings of unknown families are left alone."""
        store = MemoryFindingsStore([Finding("fp-x", "Nope", SecretValue.single(api_key="k"))])
        result, recorder = recheck(store, lambda engine: engine.recheck_fingerprint("fp-x"))
        assert result is None
        assert recorder.requests == []
        assert store.retrieve()[0].validated_at is None

    def test_first_usable_component_decides(self):
        """Only the first component with a credential is validated."""
        value = SecretValue.multi({"a": {"api_key": ""}, "b": {"api_key": "k1"}, "c": {"api_key": "k2"}})
        store = MemoryFindingsStore([groq_finding(value=value)])
        result, recorder = recheck(
            store, lambda engine: engine.recheck_fingerprint("fp-1"), {"api.groq.com": (200, {})}
        )
        assert result == "valid"
        assert [r.headers["authorization"] for r in recorder.requests] == ["Bearer k1"]

    def test_no_usable_component(self):
        """Findings without any credential are skipped."""
        store = MemoryFindingsStore([groq_finding(value=SecretValue.single(api_key=""))])
        result, recorder = recheck(store, lambda engine: engine.recheck_fingerprint("fp-1"))
        assert result is None
        assert recorder.requests == []

    def test_unknown_fingerprint(self):
        """Rechecking a fingerprint that is not stored raises KeyError."""
        with pytest.raises(KeyError):
            recheck(MemoryFindingsStore(), lambda engine: engine.recheck_fingerprint("missing"))

    def test_recheck_all(self):
        """Every stored finding is rechecked."""
        store = MemoryFindingsStore(
            [groq_finding("fp-1"), Finding("fp-2", "Nope", SecretValue.single(api_key="k"))]
        )
        result, _ = recheck(store, lambda engine: engine.recheck_all())
        assert result == {"fp-1": "invalid", "fp-2": None}
