"""
Shared pytest fixtures for the html_navigator test modules.

HTML samples live in fixtures/; each test module loads the ones it needs
through the load_html fixture.
"""

import sys
from pathlib import Path

import pytest

# Add repository root to path for imports when the package is not installed
sys.path.insert(0, str(Path(__file__).parent))

from html_navigator.config import reset_settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def load_html():
    """Return a loader: load_html("table") → contents of fixtures/table.html."""
    def _load(name: str) -> str:
        return (FIXTURES_DIR / f"{name}.html").read_text(encoding="utf-8")
    return _load


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test starts and ends with settings re-read from the environment."""
    reset_settings()
    yield
    reset_settings()
