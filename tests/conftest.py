"""Pytest configuration and fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from helpers import make_summary

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "chatcontext" / "prompts"


@pytest.fixture
def prompts_dir() -> Path:
    return PROMPTS_DIR


@pytest.fixture
def summary_message():
    return make_summary("A summary was made.")


@pytest.fixture
def summarizer(summary_message):
    """A summarizer whose `summarize` coroutine returns `summary_message`."""
    mock = AsyncMock()
    mock.summarize = AsyncMock(return_value=summary_message)
    return mock


@pytest.fixture
def chat_model():
    """Stands in for the model handle; the planner only passes it through."""
    return object()
