"""Service facade for the link core."""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional

from .allocator import CodeAllocator
from .errors import InvalidTargetUrl, NotFound, NotLinkOwner
from .models import Link, utcnow
from .ownership import OwnershipTransfer
from .resolver import LinkResolver, ResolveOutcome
from .shortcode import ShortCodeGenerator
from .store.base import LinkStoreBase
from .store.cache import RedisCache
from .store.memory import InMemoryLinkStore
from .store.policy import StoreCallPolicy
from .store.postgres import PostgresLinkStore
from .common.validators import is_valid_url


class LinkService:
    """Entry point used by the web app, the CLI and the scripts.

    The store and cache are injected; the service owns no other state.
    """

    def __init__(
        self,
        store: LinkStoreBase,
        cache: Optional[RedisCache] = None,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 5,
        anonymous_ttl_days: int = 30,
        policy: Optional[StoreCallPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize link service.

        Args:
            store: Link store instance
            cache: Optional cache instance
            short_code_generator: Optional short code generator
            logger: Optional logger
            max_collision_retries: Attempts for generated codes before giving up
            anonymous_ttl_days: Lifetime of anonymous links
            policy: Timeout/retry policy for store calls
            clock: Source of the current UTC time
        """
        self.store = store
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self.policy = policy or StoreCallPolicy(logger=self.logger)
        self.clock = clock
        self.anonymous_ttl = timedelta(days=anonymous_ttl_days)

        self.allocator = CodeAllocator(
            store,
            generator=short_code_generator,
            policy=self.policy,
            max_collision_retries=max_collision_retries,
            logger=self.logger,
        )
        self.resolver = LinkResolver(store, cache=cache, policy=self.policy, clock=clock, logger=self.logger)
        self.ownership = OwnershipTransfer(store, cache=cache, policy=self.policy, clock=clock, logger=self.logger)

    async def create_link(
        self,
        target_url: str,
        code: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> Link:
        """Create a new short link.

        Anonymous links (no ``owner_id``) expire after ``anonymous_ttl_days``;
        owned links are permanent.

        Raises:
            InvalidTargetUrl: Target is not an http(s) URL
            InvalidCodeFormat: Requested code is malformed
            CodeAlreadyExists: Requested code is taken
            AllocationExhausted: No free generated code was found
            StoreUnavailable: The store could not be reached
        """
        is_valid, error = is_valid_url(target_url)
        if not is_valid:
            raise InvalidTargetUrl(error)

        requested = code.strip() if code else None
        now = self.clock()

        def build(candidate: str) -> Link:
            return Link.new(
                candidate,
                target_url,
                owner_id=owner_id or None,
                now=now,
                anonymous_ttl=self.anonymous_ttl,
            )

        link = await self.allocator.create(build, requested_code=requested)

        kind = f"owner {owner_id}" if owner_id else "anonymous"
        self.logger.info(f"Created link ({kind}): {link.code} -> {link.target_url}")
        return link

    async def resolve(self, code: str) -> ResolveOutcome:
        """Resolve a code, counting a click when it is live."""
        return await self.resolver.resolve(code)

    async def inspect(self, code: str) -> Link:
        """Diagnostic read. Never changes counters."""
        return await self.resolver.inspect(code)

    async def claim_links(self, codes: Iterable[str], owner_id: str) -> int:
        """Move anonymous links into ``owner_id``'s account."""
        return await self.ownership.claim(codes, owner_id)

    async def delete_link(self, code: str, requester_owner_id: Optional[str]) -> None:
        """Delete a link on behalf of its owner.

        Raises:
            NotFound: The code does not exist
            NotLinkOwner: The requester does not own the link
        """
        link = await self.policy.call("get_by_code", self.store.get_by_code, code, retry=True)
        if link is None:
            raise NotFound(f"Code '{code}' not found", code=code)
        if not requester_owner_id or link.owner_id != requester_owner_id:
            raise NotLinkOwner("Only the owner can delete this link", code=code)

        deleted = await self.policy.call("delete_by_code", self.store.delete_by_code, code, retry=True)
        if self.cache:
            await self.cache.invalidate(code)
        if not deleted:
            raise NotFound(f"Code '{code}' not found", code=code)

        self.logger.info(f"Deleted link: {code}")

    async def list_links(self, owner_id: Optional[str]) -> List[Link]:
        """List an owner's links, newest first. Anonymous callers get nothing."""
        if not owner_id:
            return []
        return await self.policy.call("list_by_owner", self.store.list_by_owner, owner_id, retry=True)

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        store_healthy = await self.store.health_check()

        cache_healthy = True
        if self.cache and self.cache.enabled:
            cache_healthy = await self.cache.ping()

        return {
            "store": store_healthy,
            "cache": cache_healthy,
            "overall": store_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Close store and cache connections."""
        await self.store.close()
        if self.cache:
            await self.cache.close()


def create_store(config: Any, logger: Optional[logging.Logger] = None) -> LinkStoreBase:
    """Build the store selected by ``config.store_backend``."""
    if config.store_backend == "memory":
        return InMemoryLinkStore(logger=logger)
    return PostgresLinkStore(
        db_config=config.database_url,
        pool_max_size=config.database_pool_max_size,
        connection_timeout_seconds=config.store_timeout_seconds,
        create_tables=config.database_create_tables,
        logger=logger,
    )


async def build_service(config: Any, logger: Optional[logging.Logger] = None) -> LinkService:
    """Construct store, optional cache and service from configuration."""
    logger = logger or logging.getLogger("tinylink")

    store = create_store(config, logger=logger)

    cache = None
    if config.redis_url:
        logger.info(f"Connecting to Redis at {config.redis_url}")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")

    policy = StoreCallPolicy(
        timeout_seconds=config.store_timeout_seconds,
        retry_attempts=config.store_retry_attempts,
        retry_backoff_seconds=config.store_retry_backoff_seconds,
        logger=logger,
    )

    return LinkService(
        store=store,
        cache=cache,
        short_code_generator=ShortCodeGenerator(default_length=config.short_code_length),
        logger=logger,
        max_collision_retries=config.max_collision_retries,
        anonymous_ttl_days=config.anonymous_ttl_days,
        policy=policy,
    )
