import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from langchain_core.language_models.chat_models import BaseChatModel
from omegaconf import DictConfig

from chatcontext.llm.llm_factory import LLMFactory
from chatcontext.memory.history import HistoryStore
from chatcontext.memory.planner import ContextWindowConfig, SubmissionPlanner
from chatcontext.memory.state import ConversationState, Message, Role
from chatcontext.memory.summarizer import LLMSummarizer, Summarizer

logger = logging.getLogger(__name__)


class ConversationMemoryService:
    """
    A stateful service that manages the memory of a single conversation using
    a checkpointed summarization strategy.

    The caller appends every user and assistant message here and asks for a
    submission window before each request to the model.
    """

    def __init__(
        self,
        summarizer: Summarizer,
        config: Optional[ContextWindowConfig] = None,
        initial_state: Optional[ConversationState] = None,
    ):
        """
        Initializes the memory service.

        Args:
            summarizer: Condenses old messages once the active history grows too long.
            config: The context window settings. Defaults to a history limit of 6.
            initial_state: A previously serialized conversation to resume.
        """
        self._store = HistoryStore(initial_state=initial_state)
        self._planner = SubmissionPlanner(self._store, summarizer, config)
        logger.info(
            f"MemoryService initialized with history limit {self._planner.history_limit} "
            f"(summarization at {self._planner.summary_trigger_count} active messages)."
        )

    @classmethod
    def from_config(
        cls,
        app_config: DictConfig,
        prompts_base_path: Path,
        initial_state: Optional[ConversationState] = None,
    ) -> "ConversationMemoryService":
        """Builds the service from the `memory` and `llms` configuration sections."""
        memory_config = app_config.get("memory") or {}
        summarizer_key = memory_config.get("summarizer_provider_key")

        # Without a dedicated key, summaries are written by the model answering the turn.
        summarizer_client = None
        if summarizer_key:
            summarizer_client = LLMFactory(app_config.llms).create_llm_client(summarizer_key)

        summarizer = LLMSummarizer.from_prompts(
            prompts_base_path=prompts_base_path,
            prompts_dir=memory_config.get("summarizer_prompts_dir", "summarizer"),
            llm_client=summarizer_client,
        )
        config = ContextWindowConfig(history_limit=memory_config.get("history_limit"))
        return cls(summarizer=summarizer, config=config, initial_state=initial_state)

    @property
    def planner(self) -> SubmissionPlanner:
        return self._planner

    def add_message(
        self,
        message: Optional[Message] = None,
        *,
        role: Optional[Union[Role, str]] = None,
        content: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Message:
        """
        Adds a message to the conversation, either prebuilt or from its parts.
        """
        if message is None:
            if role is None or content is None:
                raise ValueError("Either a message or both 'role' and 'content' are required.")
            message = Message(role=Role(role), content=content, metadata=metadata)

        self._store.append(message)
        return message

    async def prepare_submission(self, chat_model: BaseChatModel) -> List[Message]:
        return await self._planner.prepare_submission(chat_model)

    def get_full_history(self) -> List[Message]:
        return self._store.get_full_history()

    def get_working_log(self) -> List[Message]:
        return self._store.working_log

    def current(self) -> Optional[Message]:
        return self._store.current()

    def serialize(self) -> ConversationState:
        return self._store.serialize()

    def clear(self):
        """Forgets the whole conversation, e.g. when the user switches models."""
        self._store.clear()
        logger.info("Conversation memory cleared.")
