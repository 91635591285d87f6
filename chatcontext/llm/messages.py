from typing import List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from chatcontext.memory.state import Message, Role

_MESSAGE_CLASSES = {
    Role.USER: HumanMessage,
    Role.ASSISTANT: AIMessage,
    Role.SYSTEM: SystemMessage,
}


def to_langchain_messages(messages: List[Message]) -> List[BaseMessage]:
    """Converts conversation messages into LangChain messages, keeping their order."""
    return [_MESSAGE_CLASSES[message.role](content=message.content) for message in messages]
