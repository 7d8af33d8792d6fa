"""Code allocation: pick a unique code and reserve it in the store."""

import logging
from typing import Callable, Optional

from .errors import AllocationExhausted, CodeAlreadyExists, InvalidCodeFormat
from .models import Link
from .shortcode import ShortCodeGenerator
from .store.base import LinkStoreBase
from .store.policy import StoreCallPolicy
from .common.validators import RESERVED_CODES, is_valid_short_code


class CodeAllocator:
    """Allocate unique short codes.

    Reservation and record creation are one step: a candidate is only ever
    claimed through the store's atomic ``insert_if_absent``, so two concurrent
    requests for the same code cannot both succeed.
    """

    def __init__(
        self,
        store: LinkStoreBase,
        generator: Optional[ShortCodeGenerator] = None,
        policy: Optional[StoreCallPolicy] = None,
        max_collision_retries: int = 5,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.generator = generator or ShortCodeGenerator()
        self.policy = policy or StoreCallPolicy()
        self.max_collision_retries = max(1, max_collision_retries)
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def validate_requested(code: str) -> str:
        """Validate a user-supplied code.

        Raises:
            InvalidCodeFormat: If the code is not 6-8 alphanumerics or is reserved
        """
        is_valid, error = is_valid_short_code(code)
        if not is_valid:
            raise InvalidCodeFormat(error, code=code)
        return code

    async def allocate(self, requested_code: Optional[str] = None) -> str:
        """Pick a code that is free right now, without reserving it.

        Useful for previews and tooling; ``create`` is the race-free path.

        Raises:
            InvalidCodeFormat: Requested code is malformed
            CodeAlreadyExists: Requested code is taken
            AllocationExhausted: Every generated candidate collided
        """
        if requested_code:
            code = self.validate_requested(requested_code)
            if await self.policy.call("exists_by_code", self.store.exists_by_code, code, retry=True):
                raise CodeAlreadyExists(f"Code '{code}' already exists, please choose another.", code=code)
            return code

        for _ in range(self.max_collision_retries):
            code = self._draw()
            if not await self.policy.call("exists_by_code", self.store.exists_by_code, code, retry=True):
                return code
        raise AllocationExhausted(
            f"Unable to allocate a unique code after {self.max_collision_retries} attempts"
        )

    async def create(
        self,
        link_factory: Callable[[str], Link],
        requested_code: Optional[str] = None,
    ) -> Link:
        """Reserve a code and persist the link built for it.

        Args:
            link_factory: Builds the link record for a candidate code
            requested_code: Optional user-supplied code

        Returns:
            The persisted link

        Raises:
            InvalidCodeFormat: Requested code is malformed
            CodeAlreadyExists: Requested code is taken
            AllocationExhausted: Every generated candidate collided
        """
        if requested_code:
            code = self.validate_requested(requested_code)
            link = link_factory(code)
            inserted = await self.policy.call(
                "insert_if_absent", self.store.insert_if_absent, link, retry=True
            )
            if inserted:
                return link
            # A retried insert may conflict with its own earlier, timed-out attempt
            existing = await self.policy.call("get_by_code", self.store.get_by_code, code, retry=True)
            if existing is not None and self._same_record(existing, link):
                return existing
            raise CodeAlreadyExists(f"Code '{code}' already exists, please choose another.", code=code)

        for attempt in range(self.max_collision_retries):
            code = self._draw()
            link = link_factory(code)
            if await self.policy.call("insert_if_absent", self.store.insert_if_absent, link):
                if attempt:
                    self.logger.debug(f"Generated code after {attempt + 1} attempts: {code}")
                return link
            self.logger.info(f"Generated code collided: {code} (attempt {attempt + 1}/{self.max_collision_retries})")

        raise AllocationExhausted(
            f"Unable to allocate a unique code after {self.max_collision_retries} attempts"
        )

    @staticmethod
    def _same_record(existing: Link, candidate: Link) -> bool:
        return (
            existing.target_url == candidate.target_url
            and existing.owner_id == candidate.owner_id
            and existing.created_at == candidate.created_at
        )

    def _draw(self) -> str:
        code = self.generator.generate_random()
        while code.lower() in RESERVED_CODES:
            code = self.generator.generate_random()
        return code
