"""Authentication: config callbacks, user accounts and session helpers."""

from smartshop.auth.config import AuthConfig, AuthPages
from smartshop.auth.models import Session, SessionUser
from smartshop.auth.session import auth, init_auth, sign_in, sign_out
from smartshop.auth.users import Credentials, User, UserStore, authenticate, signup

__all__ = [
    "AuthConfig",
    "AuthPages",
    "Session",
    "SessionUser",
    "auth",
    "init_auth",
    "sign_in",
    "sign_out",
    "Credentials",
    "User",
    "UserStore",
    "authenticate",
    "signup",
]
