"""Core link service: code allocation, resolution and ownership transfer."""

from .shortcode import ShortCodeGenerator
from .models import Link, Anonymous, Owned
from .allocator import CodeAllocator
from .resolver import LinkResolver, ResolveOutcome, ResolveStatus
from .ownership import OwnershipTransfer
from .service import LinkService, build_service

__all__ = [
    "ShortCodeGenerator",
    "Link",
    "Anonymous",
    "Owned",
    "CodeAllocator",
    "LinkResolver",
    "ResolveOutcome",
    "ResolveStatus",
    "OwnershipTransfer",
    "LinkService",
    "build_service",
]
