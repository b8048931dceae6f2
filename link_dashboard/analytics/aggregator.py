"""
Log Aggregator for the Link Dashboard.

Responsibilities:
    - Count unique visitors (distinct IP strings)
    - Find the most visited link, keyed by resolved slug
    - Summarize a link collection for the dashboard cards

Every function is pure: it reads the collections it is given and never
mutates them. IP addresses are opaque strings compared for equality only.

Summary example (dashboard_stats):
    {
        "total_links": 4,
        "total_clicks": 37,
        "active_links": 3,
        "clicks_today": 5,
        "recent_links": [Link(...), Link(...), Link(...)]
    }

LLM Prompt Example:
    "Explain how to make a 'most visited' metric reproducible when several
    links share the maximum count."
"""

from datetime import date, datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel

from ..lifecycle.activity import is_active
from ..schemas import AccessLogEntry, Link, as_utc
from ..views.collection import recent_links

__all__ = [
    "NO_DATA",
    "DashboardStats",
    "unique_visitors",
    "top_link",
    "total_clicks",
    "active_count",
    "clicks_on",
    "dashboard_stats",
]

NO_DATA = "No data"

Resolver = Callable[[Union[int, str]], str]


class DashboardStats(BaseModel):
    """Figures shown on the dashboard summary cards."""

    total_links: int
    total_clicks: int
    active_links: int
    clicks_today: int
    recent_links: List[Link]


def unique_visitors(logs: Iterable[AccessLogEntry]) -> int:
    """Number of distinct `ip_address` values; 0 for no logs."""
    return len({log.ip_address for log in logs})


def _slug_of(log: AccessLogEntry, resolver: Optional[Resolver]) -> str:
    if resolver is not None:
        return resolver(log.link_id)
    return getattr(log, "link_slug", None) or str(log.link_id)


def top_link(logs: Iterable[AccessLogEntry], resolver: Optional[Resolver] = None) -> str:
    """
    Slug with the most log entries.

    Args:
        logs (Iterable[AccessLogEntry]): Entries to tally.
        resolver (Callable, optional): Maps a link id to its slug. When
            omitted, a resolved entry's `link_slug` (or the raw id) is used.

    Returns:
        str: The winning slug, or "No data" when `logs` is empty.

    Notes:
        - Ties go to the slug seen first in input order. Counts are kept in
          an insertion-ordered dict and only a strictly greater count
          replaces the leader.
    """
    counts: Dict[str, int] = {}
    for log in logs:
        slug = _slug_of(log, resolver)
        counts[slug] = counts.get(slug, 0) + 1

    leader, best = NO_DATA, 0
    for slug, count in counts.items():
        if count > best:
            leader, best = slug, count
    return leader


def total_clicks(links: Iterable[Link]) -> int:
    return sum(link.click_count or 0 for link in links)


def active_count(links: Iterable[Link], now: datetime) -> int:
    """Links passing the full `is_active` rule."""
    return sum(1 for link in links if is_active(link, now))


def clicks_on(logs: Iterable[AccessLogEntry], day: date) -> int:
    """Log entries whose `accessed_at` falls on `day` (UTC calendar date)."""
    return sum(1 for log in logs if log.accessed_at.astimezone(timezone.utc).date() == day)


def dashboard_stats(
    links: Iterable[Link],
    logs: Iterable[AccessLogEntry],
    now: datetime,
    recent: int = 3,
) -> DashboardStats:
    """
    Reduce link and log snapshots into the dashboard summary.

    `clicks_today` counts logs on `now`'s UTC date (a naive `now` is read
    as UTC). It only reflects the logs the caller fetched, which the log
    service caps by limit.
    """
    links = list(links)
    logs = list(logs)
    now = as_utc(now)
    today = now.astimezone(timezone.utc).date()
    return DashboardStats(
        total_links=len(links),
        total_clicks=total_clicks(links),
        active_links=active_count(links, now),
        clicks_today=clicks_on(logs, today),
        recent_links=recent_links(links, recent),
    )
