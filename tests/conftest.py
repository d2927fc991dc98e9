from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Provide the fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def sections_html() -> str:
    """Provide the sectioned HTML fixture."""
    return (FIXTURES_DIR / "sections.html").read_text(encoding="utf-8")
