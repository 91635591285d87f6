import time
from typing import Any, Dict, List, Optional

from langchain_core.callbacks import CallbackManagerForLLMRun
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.outputs import ChatGeneration, ChatResult


class MockChatModel(BaseChatModel):
    """
    An offline chat model that echoes the latest human message.

    Lets the chat loop and the summarizer run without any API key.
    """

    model_name: str = "mock-chat-model"
    delay: float = 0.0

    @property
    def _llm_type(self) -> str:
        return "mock-chat-model"

    @property
    def _identifying_params(self) -> Dict[str, Any]:
        return {"model_name": self.model_name}

    def _generate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Optional[CallbackManagerForLLMRun] = None,
        **kwargs: Any,
    ) -> ChatResult:
        last_human_message = next(
            (str(m.content) for m in reversed(messages) if isinstance(m, HumanMessage)),
            "your message",
        )
        if self.delay:
            time.sleep(self.delay)

        response_text = f"{{{last_human_message}}} mock response"
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content=response_text))])
