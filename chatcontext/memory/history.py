import logging
from typing import List, Optional

from chatcontext.memory.state import ConversationState, Message

logger = logging.getLogger(__name__)


class HistoryStore:
    """
    Holds the two parallel logs of a conversation.

    The full history is append-only and only used for display. The working log
    starts out with the same messages but can have ranges replaced by a summary.
    """

    def __init__(self, initial_state: Optional[ConversationState] = None):
        self._full_history: List[Message] = []
        self._working_log: List[Message] = []
        if initial_state is not None:
            self.restore(initial_state)

    @classmethod
    def from_state(cls, state: ConversationState) -> "HistoryStore":
        return cls(initial_state=state)

    def append(self, message: Message):
        """Adds a new message to both the full history and the working log."""
        self._full_history.append(message)
        self._working_log.append(message)
        logger.debug(
            f"Appended {message.role.value} message "
            f"(full history: {len(self._full_history)}, working log: {len(self._working_log)})."
        )

    def get_full_history(self) -> List[Message]:
        """Returns the complete, unabridged history for rendering."""
        return list(self._full_history)

    def current(self) -> Optional[Message]:
        if not self._full_history:
            return None
        return self._full_history[-1]

    @property
    def working_log(self) -> List[Message]:
        return list(self._working_log)

    def replace_working_log(self, messages: List[Message]):
        """Swaps in a rewritten working log in one step. The full history is never touched."""
        self._working_log = list(messages)

    def serialize(self) -> ConversationState:
        return ConversationState(
            history=list(self._full_history),
            context_window=list(self._working_log),
        )

    def restore(self, state: ConversationState):
        """Loads both logs verbatim, including any summary checkpoint."""
        self._full_history = list(state.history)
        self._working_log = list(state.context_window)
        logger.info(
            f"Restored conversation with {len(self._full_history)} messages "
            f"({len(self._working_log)} in the working log)."
        )

    def clear(self):
        self._full_history = []
        self._working_log = []
