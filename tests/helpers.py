"""Message builders shared by the tests."""

from typing import List

from chatcontext.memory.state import SUMMARY_PREFIX, Message, Role


def generate_messages(count: int, start: int = 0) -> List[Message]:
    """Alternating user/assistant messages named 'Message <n>', numbered from start + 1."""
    return [
        Message(
            role=Role.USER if i % 2 == 0 else Role.ASSISTANT,
            content=f"Message {start + i + 1}",
        )
        for i in range(count)
    ]


def make_summary(text: str) -> Message:
    return Message(role=Role.USER, content=f"{SUMMARY_PREFIX}: {text}", is_summary=True)
