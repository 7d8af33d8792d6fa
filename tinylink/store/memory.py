"""In-process link store, for development and tests."""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .base import LinkStoreBase
from ..models import Link, claim_ownership


class InMemoryLinkStore(LinkStoreBase):
    """Dictionary-backed store.

    A single ``asyncio.Lock`` serializes every mutation, which gives the same
    atomicity the PostgreSQL store gets from single-statement updates. Records
    are copied on the way in and out so callers never alias stored state.
    """

    def __init__(self, db_config: str = "memory://", logger: Optional[logging.Logger] = None):
        super().__init__(db_config)
        self.logger = logger or logging.getLogger(__name__)
        self._links: Dict[str, Link] = {}
        self._lock = asyncio.Lock()

    async def get_by_code(self, code: str) -> Optional[Link]:
        link = self._links.get(code)
        return replace(link) if link else None

    async def exists_by_code(self, code: str) -> bool:
        return code in self._links

    async def insert_if_absent(self, link: Link) -> bool:
        async with self._lock:
            if link.code in self._links:
                self.logger.debug(f"Code already taken: {link.code}")
                return False
            self._links[link.code] = replace(link)
        return True

    async def increment_clicks(self, code: str, clicked_at: datetime) -> Optional[Link]:
        async with self._lock:
            link = self._links.get(code)
            if link is None or link.is_expired(clicked_at):
                return None
            updated = replace(
                link,
                total_clicks=link.total_clicks + 1,
                last_clicked_at=clicked_at,
                updated_at=clicked_at,
            )
            self._links[code] = updated
        return replace(updated)

    async def update_ownership(self, codes: Iterable[str], owner_id: str, updated_at: datetime) -> int:
        transferred = 0
        async with self._lock:
            for code in set(codes):
                link = self._links.get(code)
                if link is None:
                    continue
                new_ownership = claim_ownership(link.ownership, owner_id)
                if new_ownership is None:
                    continue
                self._links[code] = replace(link.with_ownership(new_ownership), updated_at=updated_at)
                transferred += 1
        return transferred

    async def delete_by_code(self, code: str) -> bool:
        async with self._lock:
            return self._links.pop(code, None) is not None

    async def list_by_owner(self, owner_id: str) -> List[Link]:
        owned = [replace(link) for link in self._links.values() if link.owner_id == owner_id]
        owned.sort(key=lambda link: link.created_at, reverse=True)
        return owned

    async def close(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True
