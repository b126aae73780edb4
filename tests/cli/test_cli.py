# SPDX-License-Identifier: MIT
"""
Tests for the leakwatch command line interface.
"""
import json
from unittest.mock import patch

import httpx
import pytest

from conftest import Recorder
from leakwatch import __version__
from leakwatch.cli import main

GROQ_KEY = "gsk_" + "Xq7Lm2Pz9Rt4Vw8Ny3Kb6Hd1Jf5Gs0Ca" + "Qe7Tu2Io9Pa4Sd8Fg3Hj"
URL = "https://app.test/static/main.js"


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def mocked_providers():
    """Route every AsyncClient the CLI opens through a recorder."""
    recorder = Recorder({"api.groq.com": (200, {})})
    real_client = httpx.AsyncClient

    def factory(*args, **kwargs):
        return real_client(transport=httpx.MockTransport(recorder))

    with patch("leakwatch.cli.httpx.AsyncClient", side_effect=factory):
        yield recorder


class TestSimpleCommands:
    """version, detectors and init."""

    def test_version(self, capsys):
        """The installed version is printed."""
        assert main(["version"]) == 0
        assert capsys.readouterr().out.strip() == __version__

    def test_detectors(self, capsys):
        """Every detector id is listed."""
        assert main(["detectors"]) == 0
        names = capsys.readouterr().out.splitlines()
        assert len(names) == 24
        assert "Groq" in names

    def test_init(self, workspace):
        """init writes the template once unless forced."""
        assert main(["init"]) == 0
        assert (workspace / ".leakwatch.yml").read_text().startswith("# leakwatch configuration")
        assert main(["init"]) == 1
        assert main(["init", "--force"]) == 0

    def test_no_command(self, capsys):
        """Without a command the help is printed."""
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out


class TestScanCommand:
    """leakwatch scan."""

    def test_clean_file(self, workspace, capsys):
        """A file without secrets exits 0."""
        page = workspace / "page.js"
        page.write_text("console.log('hello');")
        assert main(["scan", str(page), "--url", URL, "--no-store"]) == 0
        assert "Total findings: 0" in capsys.readouterr().out

    def test_missing_config(self, workspace, capsys):
        """A missing explicit config exits 2."""
        page = workspace / "page.js"
        page.write_text("x")
        assert main(["scan", str(page), "--url", URL, "--config", "missing.yml"]) == 2
        assert "Error loading config" in capsys.readouterr().err

    def test_missing_file(self, workspace):
        """An unreadable input file exits 2."""
        assert main(["scan", str(workspace / "nope.js"), "--url", URL]) == 2

    def test_finding_redacted_and_stored(self, workspace, capsys, mocked_providers):
        """Findings exit 1, are redacted on screen and stored in plaintext."""
        page = workspace / "page.js"
        page.write_text(f'const groq = "{GROQ_KEY}";')
        store = workspace / "findings.json"

        assert main(["scan", str(page), "--url", URL, "--store", str(store)]) == 1
        out = capsys.readouterr().out
        assert "Groq: 1" in out
        assert GROQ_KEY not in out
        assert GROQ_KEY[:6] + "****" + GROQ_KEY[-4:] in out

        stored = json.loads(store.read_text())
        assert stored[0]["secretValue"] == {"match": {"api_key": GROQ_KEY}}
        assert mocked_providers.count("api.groq.com") == 1

    def test_json_output(self, workspace, capsys, mocked_providers):
        """JSON output is redacted unless secrets are requested."""
        page = workspace / "page.js"
        page.write_text(f'const groq = "{GROQ_KEY}";')

        assert main(["scan", str(page), "--url", URL, "--no-store", "--format", "json"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["findings"][0]["secretValue"]["match"]["api_key"] != GROQ_KEY

        assert main(["scan", str(page), "--url", URL, "--no-store", "--format", "json", "--show-secrets"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["findings"][0]["secretValue"]["match"]["api_key"] == GROQ_KEY
        assert not (workspace / ".leakwatch").exists()


class TestRecheckCommand:
    """leakwatch recheck."""

    def test_unknown_fingerprint(self, workspace, capsys):
        """Unknown fingerprints exit 1."""
        assert main(["recheck", "--fingerprint", "nope"]) == 1
        assert "No stored finding" in capsys.readouterr().err

    def test_recheck_all(self, workspace, capsys, mocked_providers):
        """Stored findings are rechecked and reported."""
        page = workspace / "page.js"
        page.write_text(f'const groq = "{GROQ_KEY}";')
        main(["scan", str(page), "--url", URL])
        capsys.readouterr()

        assert main(["recheck"]) == 0
        assert capsys.readouterr().out.strip().endswith("valid")
