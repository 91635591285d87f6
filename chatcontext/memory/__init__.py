from .state import Message, Role, ConversationState, ModelMetadata, SessionState, SUMMARY_PREFIX
from .history import HistoryStore
from .planner import SubmissionPlanner, ContextWindowConfig, EmptyContextError, find_checkpoint
from .summarizer import Summarizer, LLMSummarizer
from .service import ConversationMemoryService

__all__ = [
    "Message",
    "Role",
    "ConversationState",
    "ModelMetadata",
    "SessionState",
    "SUMMARY_PREFIX",
    "HistoryStore",
    "SubmissionPlanner",
    "ContextWindowConfig",
    "EmptyContextError",
    "find_checkpoint",
    "Summarizer",
    "LLMSummarizer",
    "ConversationMemoryService",
]
