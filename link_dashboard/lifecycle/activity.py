"""
Activity predicates for links.

Two rules exist and are deliberately kept apart:

    is_active(link, now)
        The dashboard's full rule. A link is active iff it is not
        soft-deleted, has not expired (`expires_at > now`, so a link whose
        expiry equals `now` is already expired) and has clicks left
        (`click_count < click_limit`).

    is_unexpired(link, now)
        The links list's expiry-only rule. A link fails only when its
        expiry is set and strictly before `now`; deletion and click limit
        are ignored.

`now` is always passed in; nothing here reads the clock. A naive `now` is
read as UTC, matching how link timestamps are normalized on ingestion.

LLM Prompt Example:
    "Explain why two differently scoped 'active' predicates should carry
    different names instead of one silently narrower copy."
"""

from datetime import datetime

from ..schemas import Link, as_utc

__all__ = ["is_active", "is_unexpired"]


def is_active(link: Link, now: datetime) -> bool:
    """
    Return True when the link can currently be used.

    Args:
        link (Link): Normalized link snapshot.
        now (datetime): Evaluation time; a naive value is read as UTC.

    Returns:
        bool: False if deleted, expired (inclusive of `now`) or exhausted.
    """
    now = as_utc(now)
    if link.deleted_at is not None:
        return False
    if link.expires_at is not None and not link.expires_at > now:
        return False
    if link.click_limit is not None and link.click_count >= link.click_limit:
        return False
    return True


def is_unexpired(link: Link, now: datetime) -> bool:
    """Expiry-only check used by the links list "active" filter."""
    return link.expires_at is None or not link.expires_at < as_utc(now)
