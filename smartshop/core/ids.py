"""Short random identifiers for locally generated messages and chats."""

import secrets
from typing import Callable

ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
DEFAULT_SIZE = 7


def custom_alphabet(alphabet: str, size: int) -> Callable[[], str]:
    """Build a generator of ``size``-character ids drawn from ``alphabet``.

    There is no collision detection; uniqueness relies on the entropy of
    the alphabet and length.
    """
    if not alphabet:
        raise ValueError("alphabet must not be empty")
    if size <= 0:
        raise ValueError("size must be positive")

    def generate() -> str:
        return "".join(secrets.choice(alphabet) for _ in range(size))

    return generate


nanoid = custom_alphabet(ALPHABET, DEFAULT_SIZE)  # 7-character random string
