"""
Identity resolution: access logs carry a link's numeric id, people read slugs.

Resolution is a pure join against a link collection the caller already
holds. A miss (unknown id, non-numeric id, empty cache) degrades to the
string form of the id and never raises. Filling the cache is the caller's
job; see DashboardManager for the load-links-then-logs sequence.
"""

from typing import Callable, Dict, Iterable, List, Optional, Union

from ..schemas import AccessLogEntry, Link, ResolvedAccessLog

__all__ = ["resolve_slug", "resolve_logs", "SlugResolver"]

LinkId = Union[int, str]


def _coerce_id(link_id: LinkId) -> Optional[int]:
    try:
        return int(link_id)
    except (TypeError, ValueError):
        return None


def resolve_slug(link_id: LinkId, cache: Iterable[Link]) -> str:
    """
    Map a link id to its slug using `cache`.

    Args:
        link_id (int | str): Numeric id or a string holding one.
        cache (Iterable[Link]): Links to search; the first id match wins.

    Returns:
        str: The slug, or `str(link_id)` when no link matches.
    """
    wanted = _coerce_id(link_id)
    if wanted is not None:
        for link in cache:
            if link.id == wanted:
                return link.slug
    return str(link_id)


class SlugResolver:
    """
    Callable resolver over a fixed link snapshot.

    Indexes the snapshot once so resolving a whole log collection is linear.
    Same semantics as `resolve_slug`.
    """

    def __init__(self, cache: Iterable[Link]):
        self._slugs: Dict[int, str] = {}
        for link in cache:
            # first occurrence wins, as with resolve_slug
            self._slugs.setdefault(link.id, link.slug)

    def __call__(self, link_id: LinkId) -> str:
        wanted = _coerce_id(link_id)
        if wanted is None:
            return str(link_id)
        return self._slugs.get(wanted, str(link_id))

    def __len__(self) -> int:
        return len(self._slugs)


def resolve_logs(
    logs: Iterable[AccessLogEntry], resolver: Callable[[LinkId], str]
) -> List[ResolvedAccessLog]:
    """Attach the resolved slug to each log entry; input order is kept."""
    return [
        ResolvedAccessLog(**log.model_dump(), link_slug=resolver(log.link_id))
        for log in logs
    ]
