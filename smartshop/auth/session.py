"""Session helpers on top of Flask's signed session cookie.

The token dict produced by ``AuthConfig.jwt`` is stored in the cookie;
``auth()`` turns it back into a Session through ``AuthConfig.session``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from flask import current_app, session as flask_session

from smartshop.auth.config import AuthConfig
from smartshop.auth.models import Session
from smartshop.auth.users import User

TOKEN_KEY = "auth_token"
EXTENSION_KEY = "smartshop.auth"


def init_auth(app, auth_config: AuthConfig) -> None:
    """Register ``auth_config`` on the app and use its secret for cookies."""
    if auth_config.secret:
        app.secret_key = auth_config.secret
    app.extensions[EXTENSION_KEY] = auth_config


def get_auth_config() -> AuthConfig:
    return current_app.extensions[EXTENSION_KEY]


def sign_in(user: User) -> None:
    """Store the user's token in the session cookie."""
    token = {"sub": user.email, "email": user.email, "name": user.name}
    flask_session[TOKEN_KEY] = get_auth_config().jwt(token, user)
    flask_session.permanent = True


def sign_out() -> None:
    flask_session.pop(TOKEN_KEY, None)


def auth() -> Optional[Session]:
    """Current session, or None when nobody is signed in."""
    token = flask_session.get(TOKEN_KEY)
    if not token:
        return None

    expires = datetime.now(timezone.utc) + current_app.permanent_session_lifetime
    base = {
        "user": {"email": token.get("email"), "name": token.get("name")},
        "expires": expires.isoformat(),
    }
    return Session.model_validate(get_auth_config().session(base, token))
