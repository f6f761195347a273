from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, text
from sqlalchemy.types import TypeDecorator

from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes, also on backends that store them naive (SQLite)."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class ShortLink(Base):
    __tablename__ = "short_links"
    __table_args__ = (
        # codes are unique among live rows only; soft-deleted codes can be reused
        Index(
            "uq_short_links_active_code",
            "code",
            unique=True,
            sqlite_where=text("is_deleted = 0"),
            postgresql_where=text("is_deleted = false"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(8), nullable=False)
    target_url = Column(String(2048), nullable=False)
    click_count = Column(Integer, nullable=False, default=0)
    last_clicked_at = Column(UTCDateTime(timezone=True), nullable=True)
    created_at = Column(UTCDateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime(timezone=True), nullable=False, default=utcnow)
    is_deleted = Column(Boolean, nullable=False, default=False)
