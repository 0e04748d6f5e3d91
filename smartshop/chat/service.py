"""Result types returned by the submission service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from smartshop.chat.messages import Message
from smartshop.core.results import ResultCode


@dataclass(frozen=True)
class NewConversation:
    """Signal that the submission created a new chat."""

    chat_id: str


@dataclass
class SubmitSuccess:
    """Responses to reconcile plus a completion for the new-chat signal.

    Attributes:
        responses: Response messages in service order
        completion: Resolves to NewConversation when a chat was created,
            None otherwise
    """

    responses: list[Message]
    completion: Awaitable[Optional[NewConversation]]


@dataclass(frozen=True)
class SubmitFailure:
    """Submission rejected with a result code."""

    result_code: Union[ResultCode, str]


SubmitResult = Union[SubmitSuccess, SubmitFailure]

SubmissionService = Callable[[str], Awaitable[SubmitResult]]
