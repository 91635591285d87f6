from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Display prefix for summary messages. The `is_summary` flag is what marks a checkpoint.
SUMMARY_PREFIX = "SUMMARY of earlier conversation"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(BaseModel):
    """A single, immutable message in the conversation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    role: Role
    content: str
    is_summary: bool = Field(
        False,
        alias="summary",
        description="True when this message condenses earlier parts of the conversation.",
    )
    metadata: Optional[Dict[str, Any]] = Field(
        None,
        description="Opaque caller data, e.g. the editor selection the message refers to.",
    )


class ConversationState(BaseModel):
    """
    The persisted shape of a conversation's memory.

    `history` is the full, display-only record. `context_window` is the working
    log submitted to the model, which may hold a summary checkpoint.
    """

    model_config = ConfigDict(populate_by_name=True)

    history: List[Message] = Field(default_factory=list)
    context_window: List[Message] = Field(default_factory=list, alias="contextWindow")


class ModelMetadata(BaseModel):
    """Identifies the model that answers the conversation, e.g. google / gemini-2.5-flash."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    provider: str
    name: str


class SessionState(BaseModel):
    """Everything needed to resume a chat session."""

    model_config = ConfigDict(populate_by_name=True)

    model_metadata: ModelMetadata = Field(..., alias="modelMetadata")
    message_context: Optional[ConversationState] = Field(None, alias="messageContext")
