from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, TypedDict

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, SystemMessage
from langgraph.graph import StateGraph, END
from omegaconf import DictConfig

from chatcontext.llm.llm_factory import LLMFactory
from chatcontext.llm.messages import to_langchain_messages
from chatcontext.llm.prompt_manager import PromptManager
from chatcontext.memory.state import Message, ModelMetadata, Role

if TYPE_CHECKING:
    from chatcontext.memory.service import ConversationMemoryService


class ChatTurnState(TypedDict):
    """
    The temporary state of one question/answer turn.
    It is created when `send_message` starts and discarded when it returns.
    """

    # Inputs
    model_metadata: ModelMetadata
    memory_service: Any

    # Intermediate
    chat_model: Optional[BaseChatModel]
    submission: List[Message]

    # Output
    reply: Optional[Message]


logger = logging.getLogger(__name__)


class ChatService:
    """
    Answers the latest message of a conversation.

    Each turn runs as a small graph: the memory service prepares the context
    window (summarizing if needed), the chat model answers, and the reply is
    recorded back into the conversation.
    """

    def __init__(self, llm_factory: LLMFactory, system_prompt: Optional[str] = None):
        self.llm_factory = llm_factory
        self.system_prompt = system_prompt
        self._chat_models: Dict[Tuple[str, str], BaseChatModel] = {}
        self.workflow = self._build_graph()
        self.app = self.workflow.compile()

    @classmethod
    def from_config(cls, app_config: DictConfig, prompts_base_path: Path) -> ChatService:
        chat_config = app_config.get("chat") or {}
        prompt_manager = PromptManager(prompts_base_path=prompts_base_path)
        system_prompt, _ = prompt_manager.get_standard_prompts(
            chat_config.get("system_prompt_dir", "assistant")
        )
        return cls(llm_factory=LLMFactory(app_config.llms), system_prompt=system_prompt.strip())

    def get_chat_model(self, model_metadata: ModelMetadata) -> BaseChatModel:
        """Returns the client for the session's model, creating it on first use."""
        key = (model_metadata.provider, model_metadata.name)
        if key not in self._chat_models:
            self._chat_models[key] = self.llm_factory.create_chat_model(
                model_metadata.provider, model_metadata.name
            )
        return self._chat_models[key]

    def _build_graph(self) -> StateGraph:
        graph = StateGraph(ChatTurnState)
        graph.add_node("prepare_context", self.prepare_context_node)
        graph.add_node("generate", self.generate_node)
        graph.add_node("record_reply", self.record_reply_node)
        graph.set_entry_point("prepare_context")
        graph.add_edge("prepare_context", "generate")
        graph.add_edge("generate", "record_reply")
        graph.add_edge("record_reply", END)
        return graph

    async def prepare_context_node(self, state: ChatTurnState) -> Dict[str, Any]:
        """Node that asks the conversation memory for this turn's context window."""
        chat_model = self.get_chat_model(state["model_metadata"])
        submission = await state["memory_service"].prepare_submission(chat_model)
        logger.info(f"Submitting {len(submission)} messages to '{state['model_metadata'].name}'.")
        return {"chat_model": chat_model, "submission": submission}

    async def generate_node(self, state: ChatTurnState) -> Dict[str, Any]:
        """Node that sends the context window to the chat model."""
        messages: List[BaseMessage] = []
        if self.system_prompt:
            messages.append(SystemMessage(content=self.system_prompt))
        messages.extend(to_langchain_messages(state["submission"]))

        response = await state["chat_model"].ainvoke(messages)
        if not hasattr(response, "content"):
            response_type = type(response).__name__
            raise TypeError(
                f"The response from the LLM client (type: {response_type}) does not have a 'content' attribute."
            )
        return {"reply": Message(role=Role.ASSISTANT, content=str(response.content))}

    def record_reply_node(self, state: ChatTurnState) -> Dict[str, Any]:
        """Node that appends the model's answer to the conversation."""
        state["memory_service"].add_message(state["reply"])
        return {"reply": state["reply"]}

    async def send_message(
        self,
        model_metadata: ModelMetadata,
        memory_service: ConversationMemoryService,
    ) -> bool:
        """
        Answers the conversation's latest message and records the reply.

        Callers must not start another turn for the same conversation until
        this one has returned. Errors are logged and re-raised; the reply is
        only recorded when the model answered.
        """
        initial_state: ChatTurnState = {
            "model_metadata": model_metadata,
            "memory_service": memory_service,
            "chat_model": None,
            "submission": [],
            "reply": None,
        }
        try:
            await self.app.ainvoke(initial_state)
        except Exception as e:
            logger.error(f"Error sending message: {e}", exc_info=True)
            raise
        return True
