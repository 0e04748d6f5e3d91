"""Header state: logged-in navigation vs anonymous links."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from smartshop.assistant.repository import Chat, ChatRepository
from smartshop.auth.models import Session, SessionUser


@dataclass
class HeaderView:
    """What the header shows.

    Signed in: chat history sidebar, sidebar toggle, user menu and profile
    panel. Anonymous: a cart link to a new chat and a Login link.
    """

    user: Optional[SessionUser] = None
    chats: list[Chat] = field(default_factory=list)
    new_chat_path: str = "/new"
    login_path: str = "/login"

    @property
    def logged_in(self) -> bool:
        return self.user is not None


def build_header(
    session: Optional[Session],
    chats: ChatRepository,
    login_path: str = "/login",
) -> HeaderView:
    if session and session.user:
        history = chats.list_for_user(session.user.id) if session.user.id else []
        return HeaderView(user=session.user, chats=history, login_path=login_path)
    return HeaderView(login_path=login_path)
