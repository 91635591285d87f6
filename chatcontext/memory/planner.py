import logging
from typing import Any, List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from pydantic import BaseModel, field_validator

from chatcontext.memory.history import HistoryStore
from chatcontext.memory.state import Message
from chatcontext.memory.summarizer import Summarizer
from chatcontext.utils.config_parser import DEFAULT_HISTORY_LIMIT, resolve_history_limit

logger = logging.getLogger(__name__)


class EmptyContextError(RuntimeError):
    """Raised when summarization is triggered but there is nothing to summarize."""


class ContextWindowConfig(BaseModel):
    """How many recent messages are always submitted verbatim."""

    history_limit: int = DEFAULT_HISTORY_LIMIT

    @field_validator("history_limit", mode="before")
    @classmethod
    def default_invalid_limit(cls, value: Any) -> int:
        return resolve_history_limit(value)


def find_checkpoint(log: List[Message]) -> Optional[int]:
    """Returns the index of the most recent summary message, or None."""
    for i in range(len(log) - 1, -1, -1):
        if log[i].is_summary:
            return i
    return None


class SubmissionPlanner:
    """
    Decides which messages are submitted to the model on each turn.

    Everything after the latest summary (the checkpoint) is the active history.
    Once the active history reaches the trigger count, all but the most recent
    `history_limit` messages are folded into a new summary and the working log
    is rewritten. Below the trigger, an over-long log is only truncated in the
    returned window; the stored log keeps growing towards the trigger.
    """

    def __init__(
        self,
        store: HistoryStore,
        summarizer: Summarizer,
        config: Optional[ContextWindowConfig] = None,
    ):
        self.store = store
        self.summarizer = summarizer
        self.config = config or ContextWindowConfig()

    @property
    def history_limit(self) -> int:
        return self.config.history_limit

    @property
    def summary_trigger_count(self) -> int:
        # Above the limit so that several overflow messages are batched per summarization call.
        return max(self.history_limit + 4, int(self.history_limit * 1.5))

    async def prepare_submission(self, chat_model: BaseChatModel) -> List[Message]:
        """
        Returns the ordered messages to send as context for the next turn.

        Only the summarization path changes the stored working log, and only
        after the summarizer has returned successfully.
        """
        log = self.store.working_log
        limit = self.history_limit
        trigger = self.summary_trigger_count

        checkpoint = find_checkpoint(log)
        active_history = log if checkpoint is None else log[checkpoint + 1:]
        logger.debug(
            f"Preparing submission: working log {len(log)}, active {len(active_history)}, "
            f"checkpoint {checkpoint}, limit {limit}, trigger {trigger}."
        )

        if len(active_history) >= trigger:
            return await self._summarize(log, checkpoint, active_history, chat_model)

        if len(log) > limit:
            base_context = [log[checkpoint]] if checkpoint is not None else []
            window = base_context + active_history[-limit:]
            logger.info(
                f"Working log of {len(log)} messages truncated to a window of {len(window)}."
            )
            return window

        return log

    async def _summarize(
        self,
        log: List[Message],
        checkpoint: Optional[int],
        active_history: List[Message],
        chat_model: BaseChatModel,
    ) -> List[Message]:
        limit = self.history_limit
        to_summarize = active_history[:-limit]
        to_keep = active_history[-limit:]
        if not to_summarize:
            raise EmptyContextError(
                f"Summarization triggered with {len(active_history)} active messages "
                f"but none fall outside the history limit of {limit}."
            )

        previous_summary = log[checkpoint] if checkpoint is not None else None
        logger.info(
            f"Summarization triggered for {len(active_history)} messages; "
            f"folding {len(to_summarize)} and keeping {len(to_keep)}."
        )

        # Raises before anything is committed, leaving the working log as it was.
        new_summary = await self.summarizer.summarize(to_summarize, chat_model, previous_summary)

        # The previous summary is consolidated into the new one, so it is dropped.
        base_context = log[:checkpoint] if checkpoint is not None else []
        new_log = base_context + [new_summary] + to_keep
        self.store.replace_working_log(new_log)
        logger.info(f"Working log rewritten from {len(log)} to {len(new_log)} messages.")
        return list(new_log)
