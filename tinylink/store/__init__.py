"""Link store layer."""

from .base import LinkStoreBase
from .memory import InMemoryLinkStore
from .postgres import PostgresLinkStore
from .cache import RedisCache

__all__ = ["LinkStoreBase", "InMemoryLinkStore", "PostgresLinkStore", "RedisCache"]
