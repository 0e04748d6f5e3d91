"""Auth configuration: pages and token/session callbacks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

import structlog

if TYPE_CHECKING:
    from smartshop.auth.models import Session
    from smartshop.auth.users import User

logger = structlog.get_logger(__name__)


@dataclass
class AuthPages:
    """Routing targets for the auth flows."""

    sign_in: str = "/login"
    new_user: str = "/signup"


@dataclass
class AuthConfig:
    """Secret, pages and callbacks used by the session helpers.

    Attributes:
        secret: Signing secret for session cookies (AUTH_SECRET)
        pages: Sign-in and sign-up paths
        providers: Enabled sign-in providers
    """

    secret: Optional[str] = None
    pages: AuthPages = field(default_factory=AuthPages)
    providers: list[str] = field(default_factory=lambda: ["credentials"])

    def authorized(self, auth: Optional["Session"], next_url: str) -> bool:
        """Gate for every request. All pages are public, signed in or not."""
        is_logged_in = bool(auth and auth.user)
        logger.debug("auth.authorized", path=next_url, logged_in=is_logged_in)
        return True

    def jwt(self, token: dict[str, Any], user: Optional["User"] = None) -> dict[str, Any]:
        """Add the user id to the token when signing in."""
        if user:
            token = {**token, "id": user.id}
        return token

    def session(self, session: dict[str, Any], token: Optional[dict[str, Any]]) -> dict[str, Any]:
        """Expose the token's user id on the session's user."""
        if token:
            user_id = token.get("id")
            user = session.get("user") or {}
            session = {**session, "user": {**user, "id": user_id}}
        return session
