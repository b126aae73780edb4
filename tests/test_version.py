# SPDX-License-Identifier: MIT
"""
Tests for package version metadata.
"""
import re

import leakwatch


class TestVersion:
    """Version string exposure."""

    def test_version_exists(self):
        """The package exposes __version__."""
        assert isinstance(leakwatch.__version__, str)
        assert leakwatch.__version__

    def test_semver_format(self):
        """The version follows MAJOR.MINOR.PATCH."""
        assert re.match(r"^\d+\.\d+\.\d+", leakwatch.__version__)
