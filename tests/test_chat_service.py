"""Tests for the chat turn graph: context preparation, generation and reply recording."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from chatcontext.llm.chat_service import ChatService
from chatcontext.llm.llm_factory import LLMFactory
from chatcontext.llm.mock_chat_model import MockChatModel
from chatcontext.memory.service import ConversationMemoryService
from chatcontext.memory.state import Message, ModelMetadata, Role
from chatcontext.utils.config_parser import load_app_config
from helpers import generate_messages


@pytest.fixture
def model_metadata():
    return ModelMetadata(session_id="test-session-123", provider="google", name="gemini-2.5-flash")


@pytest.fixture
def mock_chat_model():
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content="This is the AI response."))
    return model


@pytest.fixture
def chat_service(mock_chat_model):
    service = ChatService(llm_factory=MagicMock(spec=LLMFactory), system_prompt="System Prompt")
    service.get_chat_model = MagicMock(return_value=mock_chat_model)
    return service


@pytest.mark.asyncio
async def test_send_message(chat_service, mock_chat_model, model_metadata):
    processed_context = [Message(role=Role.USER, content="User Input")]
    memory_service = MagicMock()
    memory_service.prepare_submission = AsyncMock(return_value=processed_context)

    result = await chat_service.send_message(model_metadata, memory_service)

    assert result is True
    chat_service.get_chat_model.assert_called_once_with(model_metadata)
    memory_service.prepare_submission.assert_awaited_once_with(mock_chat_model)

    sent = mock_chat_model.ainvoke.await_args.args[0]
    assert sent == [SystemMessage(content="System Prompt"), HumanMessage(content="User Input")]

    memory_service.add_message.assert_called_once()
    reply = memory_service.add_message.call_args.args[0]
    assert reply.role == Role.ASSISTANT
    assert reply.content == "This is the AI response."


@pytest.mark.asyncio
async def test_model_failure_records_nothing(chat_service, mock_chat_model, model_metadata):
    mock_chat_model.ainvoke = AsyncMock(side_effect=RuntimeError("API Error"))
    memory_service = MagicMock()
    memory_service.prepare_submission = AsyncMock(return_value=generate_messages(1))

    with pytest.raises(RuntimeError, match="API Error"):
        await chat_service.send_message(model_metadata, memory_service)

    memory_service.add_message.assert_not_called()


def test_chat_models_are_cached(model_metadata):
    factory = MagicMock(spec=LLMFactory)
    factory.create_chat_model.return_value = MockChatModel()
    service = ChatService(llm_factory=factory)

    first = service.get_chat_model(model_metadata)
    second = service.get_chat_model(model_metadata)

    assert first is second
    factory.create_chat_model.assert_called_once_with("google", "gemini-2.5-flash")


@pytest.mark.asyncio
async def test_turns_with_mock_model_summarize_over_time(prompts_dir):
    app_config = load_app_config()
    memory_service = ConversationMemoryService.from_config(app_config, prompts_dir)
    chat_service = ChatService.from_config(app_config, prompts_dir)
    model_metadata = ModelMetadata(session_id="s", provider="mock", name="mock-chat-model")

    for turn in range(5):
        memory_service.add_message(role=Role.USER, content=f"Question {turn + 1}")
        await chat_service.send_message(model_metadata, memory_service)

    # 10 messages reach the trigger only on the sixth turn's submission.
    assert len(memory_service.get_working_log()) == 10
    assert memory_service.current().content == "{Question 5} mock response"

    memory_service.add_message(role=Role.USER, content="Question 6")
    await chat_service.send_message(model_metadata, memory_service)

    working_log = memory_service.get_working_log()
    assert working_log[0].is_summary is True
    # Summary + the 6 kept messages + the new reply.
    assert len(working_log) == 8
    assert len(memory_service.get_full_history()) == 12
