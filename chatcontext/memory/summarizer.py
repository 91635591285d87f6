import logging
from pathlib import Path
from typing import List, Optional, Protocol

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from chatcontext.llm.prompt_manager import PromptManager
from chatcontext.memory.state import SUMMARY_PREFIX, Message, Role

logger = logging.getLogger(__name__)

NO_PREVIOUS_SUMMARY = "This is the beginning of the conversation."


class Summarizer(Protocol):
    """Condenses a run of messages, plus an optional earlier summary, into one summary message."""

    async def summarize(
        self,
        messages: List[Message],
        chat_model: BaseChatModel,
        previous_summary: Optional[Message] = None,
    ) -> Message: ...


class LLMSummarizer:
    """
    Summarizes conversation messages with a LangChain chat model.

    By default the model that answers the conversation also writes the summary.
    A dedicated (usually faster, cheaper) client can be supplied instead.
    """

    def __init__(
        self,
        system_prompt_template: str,
        human_prompt_template: str,
        llm_client: Optional[BaseChatModel] = None,
    ):
        self.system_prompt_template = system_prompt_template
        self.human_prompt_template = human_prompt_template
        self.llm_client = llm_client

    @classmethod
    def from_prompts(
        cls,
        prompts_base_path: Path,
        prompts_dir: str = "summarizer",
        llm_client: Optional[BaseChatModel] = None,
    ) -> "LLMSummarizer":
        prompt_manager = PromptManager(prompts_base_path=prompts_base_path)
        system_prompt, human_prompt = prompt_manager.get_standard_prompts(prompts_dir)
        if human_prompt is None:
            raise ValueError(f"The '{prompts_dir}' prompts need a 'user.prompt' template.")
        return cls(system_prompt, human_prompt, llm_client=llm_client)

    def _build_messages(
        self, messages: List[Message], previous_summary: Optional[Message]
    ) -> List[BaseMessage]:
        conversation_text = "\n".join(
            [f"{msg.role.value}: {msg.content}" for msg in messages]
        )
        variables = {
            "previous_summary": (
                previous_summary.content if previous_summary is not None else NO_PREVIOUS_SUMMARY
            ),
            "conversation_text": conversation_text,
        }
        return [
            SystemMessage(content=self.system_prompt_template.format(**variables)),
            HumanMessage(content=self.human_prompt_template.format(**variables)),
        ]

    async def summarize(
        self,
        messages: List[Message],
        chat_model: BaseChatModel,
        previous_summary: Optional[Message] = None,
    ) -> Message:
        if not messages:
            raise ValueError("Cannot summarize an empty list of messages.")

        client = self.llm_client if self.llm_client is not None else chat_model
        logger.info(
            f"Summarizing {len(messages)} messages"
            f"{' into the previous summary' if previous_summary is not None else ''}."
        )

        response = await client.ainvoke(self._build_messages(messages, previous_summary))
        if not hasattr(response, "content"):
            response_type = type(response).__name__
            raise TypeError(
                f"The response from the LLM client (type: {response_type}) does not have a 'content' attribute. "
                "Ensure the LLM client returns a standard LangChain message object."
            )

        summary_text = str(response.content).strip()
        logger.debug(f"New summary:\n{summary_text}")
        return Message(
            role=Role.USER,
            content=f"{SUMMARY_PREFIX}: {summary_text}",
            is_summary=True,
        )
