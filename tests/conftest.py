"""Shared fixtures for VibeCheck tests."""

import pytest

from vibecheck.clients.cwe_client import get_cwe_cache
from vibecheck.scanners.models import ScannedFile


@pytest.fixture(autouse=True)
def clear_cwe_cache():
    """The CWE cache is process-wide; isolate every test from the others."""
    get_cwe_cache().clear()
    yield
    get_cwe_cache().clear()


@pytest.fixture
def make_file():
    """Build a ScannedFile from a path and content."""

    def _make(path: str, content: str = "") -> ScannedFile:
        ext = ""
        name = path.rsplit("/", 1)[-1]
        if "." in name:
            ext = "." + name.rsplit(".", 1)[-1].lower()
        return ScannedFile(path=path, content=content, size=len(content.encode("utf-8")), extension=ext)

    return _make
