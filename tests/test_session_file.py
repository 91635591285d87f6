"""Tests for saving and resuming sessions."""

from chatcontext.memory.state import ConversationState, ModelMetadata, SessionState
from chatcontext.utils.session_file import load_session, save_session
from helpers import generate_messages, make_summary


def test_missing_file_returns_none(tmp_path):
    assert load_session(tmp_path / "missing.json") is None


def test_save_and_load(tmp_path):
    history = generate_messages(12)
    session = SessionState(
        model_metadata=ModelMetadata(session_id="abc", provider="openai", name="gpt-4o-mini"),
        message_context=ConversationState(
            history=history,
            context_window=[make_summary("first six"), *history[-6:]],
        ),
    )
    path = tmp_path / "sessions" / "chat.json"

    save_session(path, session)

    text = path.read_text(encoding="utf-8")
    assert '"contextWindow"' in text
    assert '"summary": true' in text
    assert load_session(path) == session


def test_unreadable_file_is_ignored(tmp_path):
    path = tmp_path / "chat.json"
    path.write_text("{not json", encoding="utf-8")

    assert load_session(path) is None
