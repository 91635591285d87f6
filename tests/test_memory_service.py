"""Tests for the conversation memory facade and its configuration."""

import pytest
from omegaconf import OmegaConf

from chatcontext.llm.mock_chat_model import MockChatModel
from chatcontext.memory.planner import ContextWindowConfig
from chatcontext.memory.service import ConversationMemoryService
from chatcontext.memory.state import ConversationState, Role
from chatcontext.memory.summarizer import LLMSummarizer
from chatcontext.utils.config_parser import load_app_config
from helpers import generate_messages, make_summary


def test_add_message_from_parts(summarizer):
    service = ConversationMemoryService(summarizer)
    message = service.add_message(
        role="user", content="explain this", metadata={"code_selection": {"file_path": "a.py"}}
    )

    assert message.role == Role.USER
    assert service.current() == message
    assert service.get_full_history() == [message]


def test_add_message_requires_role_and_content(summarizer):
    service = ConversationMemoryService(summarizer)
    with pytest.raises(ValueError):
        service.add_message(content="no role")


@pytest.mark.asyncio
async def test_scenario_summary_then_resume(summarizer, summary_message, chat_model):
    service = ConversationMemoryService(summarizer, ContextWindowConfig(history_limit=6))
    for message in generate_messages(10):
        service.add_message(message)

    window = await service.prepare_submission(chat_model)
    assert len(window) == 7

    state = service.serialize()
    resumed = ConversationMemoryService(summarizer, initial_state=state)

    assert resumed.get_working_log() == window
    assert len(resumed.get_full_history()) == 10
    # The restored checkpoint keeps the next turn from re-summarizing.
    assert await resumed.prepare_submission(chat_model) == window
    assert summarizer.summarize.await_count == 1


@pytest.mark.asyncio
async def test_restored_checkpoint_is_chained(summarizer, chat_model):
    old_summary = make_summary("An old summary.")
    state = ConversationState(history=generate_messages(3), context_window=[old_summary])
    service = ConversationMemoryService(summarizer, initial_state=state)
    new_messages = generate_messages(10, start=3)
    for message in new_messages:
        service.add_message(message)

    window = await service.prepare_submission(chat_model)

    summarizer.summarize.assert_awaited_once_with(new_messages[:4], chat_model, old_summary)
    assert len(window) == 7
    assert window[0].is_summary is True


def test_clear(summarizer):
    service = ConversationMemoryService(summarizer)
    for message in generate_messages(3):
        service.add_message(message)

    service.clear()

    assert service.get_full_history() == []
    assert service.get_working_log() == []
    assert service.current() is None


def test_from_config_reads_history_limit(prompts_dir):
    app_config = load_app_config()
    app_config.memory.history_limit = 4

    service = ConversationMemoryService.from_config(app_config, prompts_dir)

    assert service.planner.history_limit == 4
    assert service.planner.summary_trigger_count == 8
    assert isinstance(service.planner.summarizer, LLMSummarizer)
    assert service.planner.summarizer.llm_client is None


def test_from_config_invalid_limit_falls_back(prompts_dir):
    app_config = load_app_config()
    app_config.memory.history_limit = 0

    service = ConversationMemoryService.from_config(app_config, prompts_dir)

    assert service.planner.history_limit == 6


def test_from_config_dedicated_summarizer(prompts_dir):
    app_config = load_app_config()
    app_config.memory.summarizer_provider_key = "mock"

    service = ConversationMemoryService.from_config(app_config, prompts_dir)

    assert isinstance(service.planner.summarizer.llm_client, MockChatModel)


def test_from_config_without_memory_section(prompts_dir):
    app_config = OmegaConf.create({"llms": {"llm_providers": {}}})

    service = ConversationMemoryService.from_config(app_config, prompts_dir)

    assert service.planner.history_limit == 6
