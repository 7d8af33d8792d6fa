"""Link resolution with click accounting."""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Tuple

from .errors import InvalidStoredUrl, NotFound
from .models import Link, utcnow
from .store.base import LinkStoreBase
from .store.cache import RedisCache
from .store.policy import StoreCallPolicy
from .common.validators import CODE_PATTERN, is_absolute_url


class ResolveStatus(str, enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"


@dataclass(frozen=True)
class ResolveOutcome:
    """Result of resolving a code.

    ``link`` is the updated record for FOUND and the stored record for
    EXPIRED; it is None for NOT_FOUND.
    """

    status: ResolveStatus
    code: str
    link: Optional[Link] = None

    @property
    def found(self) -> bool:
        return self.status is ResolveStatus.FOUND

    @property
    def target_url(self) -> Optional[str]:
        return self.link.target_url if self.found and self.link else None


class LinkResolver:
    """Resolve codes to targets and count clicks."""

    def __init__(
        self,
        store: LinkStoreBase,
        cache: Optional[RedisCache] = None,
        policy: Optional[StoreCallPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.cache = cache
        self.policy = policy or StoreCallPolicy()
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    async def resolve(self, code: str) -> ResolveOutcome:
        """Resolve a code and record a click on success.

        Expired and missing links are reported as outcomes and never touched.

        Raises:
            InvalidStoredUrl: The stored target is not a valid absolute URL
            StoreUnavailable: The store could not be reached
        """
        if not code or not CODE_PATTERN.fullmatch(code):
            return ResolveOutcome(ResolveStatus.NOT_FOUND, code)

        link, cached = await self._lookup(code)
        if link is None:
            self.logger.debug(f"Code not found: {code}")
            return ResolveOutcome(ResolveStatus.NOT_FOUND, code)

        now = self.clock()
        if link.is_expired(now) and cached:
            # A claim may have made the link permanent since it was cached
            return await self._recheck(code, now)
        if link.is_expired(now):
            self.logger.info(f"Code expired: {code} (expired at {link.expires_at.isoformat()})")
            return ResolveOutcome(ResolveStatus.EXPIRED, code, link)

        if not is_absolute_url(link.target_url):
            self.logger.error(f"Invalid target URL stored for {code}: {link.target_url!r}")
            raise InvalidStoredUrl("Invalid target URL stored", code=code)

        updated = await self.policy.call(
            "increment_clicks", self.store.increment_clicks, code, now
        )
        if updated is None:
            # Deleted or expired between lookup and increment
            return await self._recheck(code, now)

        self.logger.debug(f"Resolved {code} -> {updated.target_url} (clicks={updated.total_clicks})")
        return ResolveOutcome(ResolveStatus.FOUND, code, updated)

    async def inspect(self, code: str) -> Link:
        """Read a link without touching its counters.

        Raises:
            NotFound: The code does not exist
            StoreUnavailable: The store could not be reached
        """
        link = await self.policy.call("get_by_code", self.store.get_by_code, code, retry=True)
        if link is None:
            raise NotFound(f"Code '{code}' not found", code=code)
        return link

    async def _lookup(self, code: str) -> Tuple[Optional[Link], bool]:
        """Read a link, preferring the cache. The flag is True for cache hits."""
        if self.cache:
            cached = await self.cache.get_link(code)
            if cached is not None:
                self.logger.debug(f"Cache hit for {code}")
                return cached, True

        link = await self.policy.call("get_by_code", self.store.get_by_code, code, retry=True)
        if link is not None and self.cache:
            await self.cache.set_link(link)
        return link, False

    async def _recheck(self, code: str, now: datetime) -> ResolveOutcome:
        if self.cache:
            await self.cache.invalidate(code)
        link = await self.policy.call("get_by_code", self.store.get_by_code, code, retry=True)
        if link is None:
            return ResolveOutcome(ResolveStatus.NOT_FOUND, code)
        if link.is_expired(now):
            self.logger.info(f"Code expired: {code} (expired at {link.expires_at.isoformat()})")
            return ResolveOutcome(ResolveStatus.EXPIRED, code, link)
        # Claimed or recreated since the first lookup
        if not is_absolute_url(link.target_url):
            self.logger.error(f"Invalid target URL stored for {code}: {link.target_url!r}")
            raise InvalidStoredUrl("Invalid target URL stored", code=code)
        updated = await self.policy.call(
            "increment_clicks", self.store.increment_clicks, code, now
        )
        if updated is None:
            self.logger.warning(f"Click not recorded for {code}: link changed during resolution")
            return ResolveOutcome(ResolveStatus.NOT_FOUND, code)
        return ResolveOutcome(ResolveStatus.FOUND, code, updated)
