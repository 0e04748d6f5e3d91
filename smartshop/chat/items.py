"""Splitting chat input into shopping-list items."""

import re

_SEPARATOR = re.compile(r"[,]+")


def split_items(value: str) -> list[str]:
    """Split raw input on commas into trimmed, non-empty items.

    "milk, eggs,,bread," -> ["milk", "eggs", "bread"]

    Empty segments (consecutive, leading or trailing commas, or
    whitespace-only pieces) are dropped so they never produce messages.
    """
    return [word.strip() for word in _SEPARATOR.split(value) if word.strip()]
