"""
In-memory link and log services (reference implementations).

Responsibilities:
    - Hold links and access logs in process for tests and demos
    - Mirror the HTTP service's observable rules: per-user scoping,
      soft delete, newest-first listings, log limit clamped to 1..100

Design:
    - Satisfies the BaseLinkService / BaseLogService contracts, so the
      manager and the dashboard API run unchanged against it.
    - Slugs are derived deterministically: SHA-256(target_url|counter) ->
      Base62 -> first 8 characters, rehashing with a counter on collision.
    - The clock is injectable so expiry-sensitive tests stay deterministic.

LLM Prompt Example:
    "Explain how an in-memory double that honours the same contract as the
    HTTP client keeps manager and API tests fast and offline."
"""

import hashlib
import itertools
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from ..auth.session import Session
from ..schemas import AccessLogEntry, CreateLinkRequest, Link
from .base import BaseLinkService, BaseLogService, ServiceError

__all__ = ["InMemoryLinkService", "InMemoryLogService"]

_BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
_BASE62_BASE = len(_BASE62_ALPHABET)

SLUG_LENGTH = 8
DEFAULT_LOG_LIMIT = 50
MAX_LOG_LIMIT = 100

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _base62_encode(num: int) -> str:
    """
    Convert a non-negative integer to a Base62 string.
    0 -> "0", 61 -> "Z", 62 -> "10"
    """
    if num < 0:
        raise ValueError("num must be non-negative")
    if num == 0:
        return "0"
    out = []
    while num > 0:
        num, rem = divmod(num, _BASE62_BASE)
        out.append(_BASE62_ALPHABET[rem])
    return "".join(reversed(out))


def _clamp_limit(limit: Optional[int]) -> int:
    # Out-of-range limits fall back to the default rather than the bound
    if limit is None or not 0 < limit <= MAX_LOG_LIMIT:
        return DEFAULT_LOG_LIMIT
    return limit


def _owner_id(session: Session) -> Optional[int]:
    try:
        return int(session.user_id)
    except ValueError:
        return None


class InMemoryLinkService(BaseLinkService):
    def __init__(self, links: Optional[Iterable[Link]] = None, clock: Optional[Clock] = None):
        """
        Initialize storage, optionally seeded with existing links.

        Internal schema:
            self.links = { slug: Link }
        """
        self.clock = clock or _utcnow
        self.links: Dict[str, Link] = {link.slug: link for link in links or []}
        self._ids = itertools.count(max((link.id for link in self.links.values()), default=0) + 1)

    def _visible_to(self, link: Link, session: Session) -> bool:
        return link.user_id is None or link.user_id == _owner_id(session)

    def _new_slug(self, target_url: str) -> str:
        for counter in itertools.count():
            payload = target_url if counter == 0 else f"{target_url}|{counter}"
            digest = hashlib.sha256(payload.encode("utf-8")).digest()
            slug = _base62_encode(int.from_bytes(digest, "big"))[:SLUG_LENGTH]
            if slug not in self.links:
                return slug

    def list_links(self, session: Session) -> List[Link]:
        """Live links visible to the session user, newest first."""
        live = [
            link for link in self.links.values()
            if link.deleted_at is None and self._visible_to(link, session)
        ]
        return sorted(live, key=lambda link: link.created_at, reverse=True)

    def create_link(
        self,
        session: Session,
        target_url: str,
        expires_at: Optional[datetime] = None,
        click_limit: Optional[int] = None,
    ) -> Link:
        request = CreateLinkRequest(
            target_url=target_url, expires_at=expires_at, click_limit=click_limit
        )
        link = Link(
            id=next(self._ids),
            slug=self._new_slug(request.target_url),
            target_url=request.target_url,
            created_at=self.clock(),
            expires_at=request.expires_at,
            click_limit=request.click_limit,
            click_count=0,
            user_id=_owner_id(session),
        )
        self.links[link.slug] = link
        return link

    def delete_link(self, session: Session, slug: str) -> None:
        """
        Soft-delete: the record stays, stamped with `deleted_at`.

        Raises:
            ServiceError: If the slug is unknown/already deleted (404)
                or owned by someone else (403).
        """
        link = self.links.get(slug)
        if link is None or link.deleted_at is not None:
            raise ServiceError("Link not found or already deleted", status_code=404)
        if not self._visible_to(link, session):
            raise ServiceError("You do not have permission to delete this link", status_code=403)
        self.links[slug] = link.model_copy(update={"deleted_at": self.clock()})

    def owned_ids(self, user_id: str) -> List[int]:
        """Ids of every link (deleted included) owned by `user_id`."""
        return [link.id for link in self.links.values() if str(link.user_id) == str(user_id)]


class InMemoryLogService(BaseLogService):
    def __init__(
        self,
        logs: Optional[Iterable[AccessLogEntry]] = None,
        links: Optional[InMemoryLinkService] = None,
    ):
        """
        Initialize with optional seed logs.

        Args:
            logs: Access-log entries to serve.
            links: Link service used to decide which logs belong to a user.
        """
        self.logs: List[AccessLogEntry] = list(logs or [])
        self.link_service = links

    @staticmethod
    def _newest_first(logs: Iterable[AccessLogEntry], limit: Optional[int]) -> List[AccessLogEntry]:
        ordered = sorted(logs, key=lambda entry: entry.accessed_at, reverse=True)
        return ordered[: _clamp_limit(limit)]

    def list_logs_by_user(
        self, session: Session, user_id: str, limit: Optional[int] = None
    ) -> List[AccessLogEntry]:
        try:
            int(user_id)
        except ValueError:
            raise ServiceError("Invalid user ID format", status_code=400)
        owned = set(self.link_service.owned_ids(user_id)) if self.link_service else set()
        return self._newest_first((e for e in self.logs if e.link_id in owned), limit)

    def list_logs(
        self, session: Session, link_id: Optional[int] = None, limit: Optional[int] = None
    ) -> List[AccessLogEntry]:
        selected = (e for e in self.logs if link_id is None or e.link_id == link_id)
        return self._newest_first(selected, limit)
