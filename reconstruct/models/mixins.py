"""Shared columns for the task and counter tables."""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    # created_at is set once; updated_at is refreshed on every mutation
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class OwnedMixin:
    """Rows owned by a (user_name, email) identity rather than a user id."""

    user_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)

    def to_dict(self) -> dict:
        return {c.name: getattr(self, c.key) for c in self.__table__.columns}


class IdMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)
