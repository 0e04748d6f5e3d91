"""Placing assistant responses into the message list.

Responses overwrite existing entries instead of being appended. The last
response lands on the tail slot and each earlier one two slots further back,
so with a user/placeholder pair per item every response replaces its item's
placeholder:

    index:     0     1      2     3
    before:  [milk, (..), eggs, (..)]
    after:   [milk,  r0,  eggs,  r1]
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from smartshop.chat.messages import Message

logger = structlog.get_logger(__name__)


def displacement(index: int, count: int) -> int:
    """Backward offset from the tail for response ``index`` of ``count``."""
    return (count - (index + 1)) * 2


def target_indices(count: int, tail: int) -> list[int]:
    """Target slot for each of ``count`` responses, given the tail index.

    Entries may be negative when there are too few messages.
    """
    return [tail - displacement(index, count) for index in range(count)]


def reconcile(
    messages: Sequence[Message],
    responses: Sequence[Message],
    tail: Optional[int] = None,
) -> list[Message]:
    """Return a copy of ``messages`` with ``responses`` written into place.

    Args:
        messages: Current list
        responses: Responses in the order the service returned them
        tail: Index treated as the end of the list (defaults to the last index)

    Returns:
        New list of the same length.

    Responses whose slot would fall before the head of the list are dropped
    and logged.

    Raises:
        ValueError: If ``tail`` is past the end of ``messages``.
    """
    updated = list(messages)
    if tail is None:
        tail = len(updated) - 1
    if tail >= len(updated):
        raise ValueError(f"tail {tail} outside list of length {len(updated)}")

    dropped = 0
    for response, target in zip(responses, target_indices(len(responses), tail)):
        if target < 0:
            dropped += 1
            continue
        updated[target] = response

    if dropped:
        logger.warning(
            "chat.reconcile_dropped",
            dropped=dropped,
            responses=len(responses),
            length=len(updated),
            tail=tail,
        )
    return updated
