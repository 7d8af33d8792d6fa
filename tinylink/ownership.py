"""Ownership transfer from anonymous to authenticated identities."""

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from .errors import InvalidRequest
from .models import utcnow
from .store.base import LinkStoreBase
from .store.cache import RedisCache
from .store.policy import StoreCallPolicy


class OwnershipTransfer:
    """Claim anonymous links for an authenticated identity.

    Claiming is bulk and best effort. Unknown codes and links that already
    have an owner are skipped, so repeating a claim is a no-op.
    """

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

    @staticmethod
    def normalize_codes(codes: Optional[Iterable[str]]) -> List[str]:
        """Strip and de-duplicate codes, keeping first-seen order.

        Raises:
            InvalidRequest: No usable code was supplied
        """
        if codes is None or isinstance(codes, str):
            raise InvalidRequest("No codes provided")
        seen = []
        for code in codes:
            if not isinstance(code, str):
                raise InvalidRequest("Codes must be strings")
            code = code.strip()
            if code and code not in seen:
                seen.append(code)
        if not seen:
            raise InvalidRequest("No codes provided")
        return seen

    async def claim(self, codes: Iterable[str], owner_id: str) -> int:
        """Transfer the anonymous links among ``codes`` to ``owner_id``.

        Args:
            codes: Codes previously created by the anonymous caller
            owner_id: Authenticated identity

        Returns:
            Number of links transferred (possibly zero)

        Raises:
            InvalidRequest: Empty code list or missing owner
            StoreUnavailable: The store could not be reached
        """
        if not owner_id:
            raise InvalidRequest("An authenticated owner is required to claim links")
        code_list = self.normalize_codes(codes)

        transferred = await self.policy.call(
            "update_ownership",
            self.store.update_ownership,
            code_list,
            owner_id,
            self.clock(),
            retry=True,
        )

        if self.cache:
            await self.cache.invalidate(*code_list)

        self.logger.info(f"Claimed {transferred} of {len(code_list)} link(s) for owner {owner_id}")
        return transferred
