"""
Counselor triage ordering.

Conversations are ranked by urgency bucket first (emergency, high, medium,
low) and by creation time within a bucket, oldest first. Status and assignment
are filters applied before ranking, never sort keys.
"""

from collections.abc import Iterable
from typing import TypeVar

from counsel.db.models import Conversation, ConversationUrgency

_URGENCY_RANK: dict[ConversationUrgency, int] = {
    ConversationUrgency.EMERGENCY: 1,
    ConversationUrgency.HIGH: 2,
    ConversationUrgency.MEDIUM: 3,
    ConversationUrgency.LOW: 4,
}

# Every urgency value must have a rank.
if set(_URGENCY_RANK) != set(ConversationUrgency):
    raise RuntimeError("urgency rank table is out of sync with ConversationUrgency")

URGENCY_ORDER: list[str] = [
    urgency.value for urgency in sorted(_URGENCY_RANK, key=_URGENCY_RANK.__getitem__)
]

T = TypeVar("T", bound=Conversation)


def urgency_rank(urgency: str | ConversationUrgency) -> int:
    """Map an urgency value to its triage rank (1 = most urgent)."""
    try:
        return _URGENCY_RANK[ConversationUrgency(urgency)]
    except ValueError:
        raise ValueError(f"Unknown urgency: {urgency!r}") from None


def rank_conversations(conversations: Iterable[T]) -> list[T]:
    """
    Return conversations in triage order.

    The sort is stable, so conversations with equal urgency and equal
    creation time keep the order they came in (ties preserve storage order).
    """
    return sorted(conversations, key=lambda c: (urgency_rank(c.urgency), c.created_at))
