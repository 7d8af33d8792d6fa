"""Data models for the link service."""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Optional, Union


@dataclass(frozen=True)
class Anonymous:
    """Ownership state of a guest link. Always time-bounded."""

    expires_at: datetime


@dataclass(frozen=True)
class Owned:
    """Ownership state of a link held by an authenticated identity. Permanent."""

    owner_id: str


Ownership = Union[Anonymous, Owned]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return _as_utc(value)
    return _as_utc(datetime.fromisoformat(value))


@dataclass
class Link:
    """Represents a short link record in the store."""

    code: str
    target_url: str
    created_at: datetime
    updated_at: datetime
    owner_id: Optional[str] = None
    is_anonymous: bool = True
    expires_at: Optional[datetime] = None
    total_clicks: int = 0
    last_clicked_at: Optional[datetime] = None

    @classmethod
    def new(
        cls,
        code: str,
        target_url: str,
        owner_id: Optional[str] = None,
        now: Optional[datetime] = None,
        anonymous_ttl: timedelta = timedelta(days=30),
    ) -> "Link":
        """Build a fresh link.

        Anonymous links (no owner) expire ``anonymous_ttl`` after creation;
        owned links never expire.
        """
        now = _as_utc(now) or utcnow()
        if owner_id:
            ownership: Ownership = Owned(owner_id=owner_id)
        else:
            ownership = Anonymous(expires_at=now + anonymous_ttl)
        return cls(code=code, target_url=target_url, created_at=now, updated_at=now).with_ownership(ownership)

    @property
    def ownership(self) -> Ownership:
        if self.is_anonymous:
            return Anonymous(expires_at=self.expires_at)
        return Owned(owner_id=self.owner_id)

    def with_ownership(self, ownership: Ownership) -> "Link":
        """Return a copy with ownership columns set from ``ownership``."""
        if isinstance(ownership, Anonymous):
            return replace(self, owner_id=None, is_anonymous=True, expires_at=ownership.expires_at)
        if isinstance(ownership, Owned):
            return replace(self, owner_id=ownership.owner_id, is_anonymous=False, expires_at=None)
        raise TypeError(f"Unknown ownership state: {ownership!r}")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True when ``expires_at`` is set and strictly in the past."""
        if self.expires_at is None:
            return False
        return self.expires_at < (_as_utc(now) or utcnow())

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "code": self.code,
            "target_url": self.target_url,
            "owner_id": self.owner_id,
            "is_anonymous": self.is_anonymous,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "total_clicks": self.total_clicks,
            "last_clicked_at": self.last_clicked_at.isoformat() if self.last_clicked_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Link":
        """Create from dictionary (database row or serialized form)."""
        return cls(
            code=data["code"],
            target_url=data["target_url"],
            owner_id=data.get("owner_id"),
            is_anonymous=bool(data.get("is_anonymous", data.get("owner_id") is None)),
            expires_at=_parse_datetime(data.get("expires_at")),
            total_clicks=int(data.get("total_clicks") or 0),
            last_clicked_at=_parse_datetime(data.get("last_clicked_at")),
            created_at=_parse_datetime(data["created_at"]),
            updated_at=_parse_datetime(data.get("updated_at") or data["created_at"]),
        )


def claim_ownership(ownership: Ownership, owner_id: str) -> Optional[Ownership]:
    """Claim transition.

    Anonymous links become permanently owned by ``owner_id``. Owned links are
    not transferable and yield ``None`` (skipped).
    """
    if isinstance(ownership, Anonymous):
        return Owned(owner_id=owner_id)
    if isinstance(ownership, Owned):
        return None
    raise TypeError(f"Unknown ownership state: {ownership!r}")
