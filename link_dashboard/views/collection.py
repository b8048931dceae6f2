"""
Collection View Builder.

Responsibilities:
    - Search, filter and sort a link collection for the links list
    - Filter, order and truncate resolved access logs for the log table
    - Pick the most recently created links for the dashboard summary

Ordering rules:
    - Sorts are stable (Python's `sorted`, including with reverse=True),
      so links with equal keys keep their input order.
    - The log table sorts by id BEFORE truncating to `limit`.
    - Inputs are never mutated; every builder returns a new list.

LLM Prompt Example:
    "Show how to express search/filter/sort pipelines over immutable
    snapshots so the same view can be rebuilt on every refresh."
"""

from datetime import datetime
from typing import Iterable, List

from ..lifecycle.activity import is_unexpired
from ..schemas import Link, ResolvedAccessLog, as_utc

__all__ = ["FILTERS", "SORT_KEYS", "build_view", "build_log_table", "recent_links"]

FILTERS = ("all", "active")
SORT_KEYS = ("recent", "clicks")


def _matches(link: Link, term: str) -> bool:
    return term in link.slug.lower() or term in link.target_url.lower()


def build_view(
    links: Iterable[Link],
    now: datetime,
    search_term: str = "",
    filter: str = "all",
    sort_by: str = "recent",
) -> List[Link]:
    """
    Build the ordered links list.

    Args:
        links (Iterable[Link]): Link snapshot.
        now (datetime): Evaluation time for the "active" filter (naive is read as UTC).
        search_term (str): Case-insensitive substring of slug or target URL.
        filter (str): "all", or "active" to drop links already past expiry.
        sort_by (str): "recent" (created_at desc) or "clicks" (click_count desc).

    Returns:
        List[Link]: New list in display order.

    Raises:
        ValueError: On an unknown filter or sort key.

    Notes:
        - "active" here is the expiry-only `is_unexpired` rule, not
          `is_active`; deleted or exhausted links still pass.
    """
    if filter not in FILTERS:
        raise ValueError(f"Unknown filter: {filter!r}")
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_by!r}")

    term = (search_term or "").lower()
    selected = [link for link in links if _matches(link, term)]
    if filter == "active":
        now = as_utc(now)
        selected = [link for link in selected if is_unexpired(link, now)]

    if sort_by == "recent":
        return sorted(selected, key=lambda link: link.created_at, reverse=True)
    return sorted(selected, key=lambda link: link.click_count or 0, reverse=True)


def build_log_table(
    logs: Iterable[ResolvedAccessLog], link_filter: str = "", limit: int = 50
) -> List[ResolvedAccessLog]:
    """
    Rows for the access-log table: slug filter, ascending id, first `limit`.

    A non-positive limit yields an empty table.
    """
    term = (link_filter or "").lower()
    rows = [log for log in logs if not term or term in log.link_slug.lower()]
    rows = sorted(rows, key=lambda log: log.id)
    return rows[: max(0, limit)]


def recent_links(links: Iterable[Link], count: int = 3) -> List[Link]:
    """The `count` newest links by creation time."""
    ordered = sorted(links, key=lambda link: link.created_at, reverse=True)
    return ordered[: max(0, count)]
