"""Chat form core: message store, splitting, debounce, reconciliation.

Main components:
- messages: Message types and the versioned MessageStore
- items: split_items for comma-separated input
- reconcile: placing responses over placeholders
- debounce: Debouncer for the submit handler
- prompt_form: PromptForm, the controller behind the chat input
"""

from smartshop.chat.debounce import Debouncer
from smartshop.chat.items import split_items
from smartshop.chat.messages import (
    BotMessage,
    ErrorMessage,
    Message,
    MessageStore,
    Snapshot,
    SpinnerMessage,
    UserMessage,
)
from smartshop.chat.navigation import EventNavigator, Navigator
from smartshop.chat.prompt_form import PromptForm
from smartshop.chat.reconcile import displacement, reconcile, target_indices
from smartshop.chat.service import (
    NewConversation,
    SubmissionService,
    SubmitFailure,
    SubmitResult,
    SubmitSuccess,
)
from smartshop.chat.state import AIState

__all__ = [
    # Messages
    "Message",
    "MessageStore",
    "Snapshot",
    "UserMessage",
    "SpinnerMessage",
    "BotMessage",
    "ErrorMessage",
    # Algorithm
    "split_items",
    "displacement",
    "target_indices",
    "reconcile",
    "Debouncer",
    # Controller
    "PromptForm",
    "Navigator",
    "EventNavigator",
    "AIState",
    # Service
    "NewConversation",
    "SubmissionService",
    "SubmitFailure",
    "SubmitResult",
    "SubmitSuccess",
]
