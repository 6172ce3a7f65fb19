"""Shared pytest fixtures."""

from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def conversation_path() -> Path:
    return FIXTURES_DIR / "conversation.html"


@pytest.fixture
def conversation_html() -> str:
    return _read_fixture("conversation.html")


@pytest.fixture
def empty_page_path() -> Path:
    return FIXTURES_DIR / "empty_page.html"


@pytest.fixture
def empty_page_html() -> str:
    return _read_fixture("empty_page.html")


@pytest.fixture
def avatar_conversation_html() -> str:
    return _read_fixture("avatar_conversation.html")
