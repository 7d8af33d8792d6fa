"""Abstract base class for link store implementations."""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from datetime import datetime

from ..models import Link


class LinkStoreBase(ABC):
    """Access contract for the durable code -> link collection.

    Implementations must make ``insert_if_absent``, ``increment_clicks`` and
    ``update_ownership`` atomic with respect to concurrent callers, and raise
    ``StoreUnavailable`` for connection or timeout failures.
    """

    def __init__(self, db_config: str):
        """Initialize store.

        Args:
            db_config: Connection string
        """
        self.db_config = db_config

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[Link]:
        """Get the link for a code.

        Args:
            code: The short code to lookup

        Returns:
            The link if found, None otherwise
        """
        pass

    @abstractmethod
    async def exists_by_code(self, code: str) -> bool:
        """Check if a code is already taken.

        Args:
            code: The short code to check

        Returns:
            True if exists, False otherwise
        """
        pass

    @abstractmethod
    async def insert_if_absent(self, link: Link) -> bool:
        """Atomically create a link unless its code is taken.

        Args:
            link: The link to persist

        Returns:
            True if created, False if the code already exists
        """
        pass

    @abstractmethod
    async def increment_clicks(self, code: str, clicked_at: datetime) -> Optional[Link]:
        """Atomically add one click to a live link.

        Increments ``total_clicks`` and sets ``last_clicked_at`` in a single
        step, only if the link exists and is not expired at ``clicked_at``.

        Args:
            code: The short code to update
            clicked_at: Resolution timestamp

        Returns:
            The updated link, or None if missing or expired
        """
        pass

    @abstractmethod
    async def update_ownership(self, codes: Iterable[str], owner_id: str, updated_at: datetime) -> int:
        """Transfer anonymous links among ``codes`` to ``owner_id``.

        Owned links are skipped. Matching links become permanent
        (``expires_at`` cleared).

        Args:
            codes: Candidate short codes
            owner_id: Authenticated identity taking ownership
            updated_at: Mutation timestamp

        Returns:
            Number of links transferred
        """
        pass

    @abstractmethod
    async def delete_by_code(self, code: str) -> bool:
        """Delete a link.

        Ownership checks are the caller's responsibility.

        Args:
            code: The short code to delete

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> List[Link]:
        """List links owned by an identity, most recently created first."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        pass
