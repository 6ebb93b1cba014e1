"""Sender allow-list check."""

from collections.abc import Sequence


def is_username_allowed(username: str | None, allowed: Sequence[str]) -> bool:
    """Check a Telegram username against an optional allow-list.

    An empty allow-list admits everyone. With a list configured, senders
    without a username are refused. Matching is case-insensitive and ignores
    surrounding whitespace on both sides.
    """
    if not allowed:
        return True
    if not username:
        return False

    normalized = {name.strip().lower() for name in allowed if name.strip()}
    return username.strip().lower() in normalized
