from .llm_factory import LLMFactory
from .prompt_manager import PromptManager
from .mock_chat_model import MockChatModel
from .messages import to_langchain_messages
from .chat_service import ChatService

__all__ = [
    "LLMFactory",
    "PromptManager",
    "MockChatModel",
    "to_langchain_messages",
    "ChatService",
]
