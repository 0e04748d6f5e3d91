"""Core utilities for SmartShop.

Configuration, logging, identifier generation and the result-code table
shared by the chat form and the auth pages.
"""

from smartshop.core.config import Config, get_auth_secret, get_config, load_config
from smartshop.core.ids import ALPHABET, custom_alphabet, nanoid
from smartshop.core.logging import configure_logging
from smartshop.core.results import ResultCode, get_message_from_code, is_success

__all__ = [
    # Config utilities
    "Config",
    "load_config",
    "get_config",
    "get_auth_secret",
    "configure_logging",
    # Identifiers
    "ALPHABET",
    "custom_alphabet",
    "nanoid",
    # Result codes
    "ResultCode",
    "get_message_from_code",
    "is_success",
]
