"""SQLAlchemy ORM models for the kiosk CMS.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Column types are portable so the same models run on PostgreSQL in
production and SQLite in tests; ids and timestamps are assigned by the
application rather than by server defaults.
"""

from datetime import UTC, datetime
from enum import Enum as PyEnum
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, validates


def _utcnow() -> datetime:
    return datetime.now(UTC)


def title_lookup_key(title: str | None) -> str:
    """Fold a title for case-insensitive matching.

    SQL LOWER() only folds ASCII on SQLite, so the folded form is stored.
    """
    return (title or "").strip().casefold()


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Enums
# =============================================================================


class MediaKind(str, PyEnum):
    """Types of media a bubble can open on the kiosk screen."""

    image = "image"
    video = "video"
    pdf = "pdf"
    qr = "qr"
    website = "website"


# Kinds whose payload is a file pushed to the asset host
UPLOAD_KINDS = frozenset({MediaKind.image, MediaKind.video, MediaKind.pdf, MediaKind.qr})


# =============================================================================
# Models
# =============================================================================


class Media(Base):
    """An uploaded asset or website link.

    `url` is authoritative for upload kinds, `website_url` for kind=website.
    `title_key` is the casefolded title used for case-insensitive lookup; it is
    kept in step with `title` on assignment.
    """

    __tablename__ = "media"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    title_key: Mapped[str] = mapped_column(Text, nullable=False)
    kind: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    website_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    asset_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "kind IN ('image', 'video', 'pdf', 'qr', 'website')",
            name="ck_media_kind",
        ),
        Index("ix_media_title_key", "title_key"),
    )

    @validates("title")
    def _sync_title_key(self, key: str, value: str) -> str:
        self.title_key = title_lookup_key(value)
        return value


class Bubble(Base):
    """A node in the kiosk navigation forest.

    `media_id` is deliberately not a foreign key: deleting media leaves
    referencing bubbles with a dangling id that resolves to no media.
    """

    __tablename__ = "bubbles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    parent_bubble_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("bubbles.id"), nullable=True
    )
    media_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "parent_bubble_id IS NULL OR parent_bubble_id <> id",
            name="ck_bubbles_not_self_parent",
        ),
        Index("ix_bubbles_parent_bubble_id", "parent_bubble_id"),
    )


class Speaker(Base):
    """A scheduled speaker shown in the kiosk carousel.

    Times are zero-padded HH:MM strings in venue-local wall-clock time, so
    lexical order equals chronological order.
    """

    __tablename__ = "speakers"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    designation: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    popup_image_url: Mapped[str] = mapped_column(Text, nullable=False)
    start_time: Mapped[str] = mapped_column(Text, nullable=False)
    end_time: Mapped[str] = mapped_column(Text, nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_speakers_window"),
    )


class KioskHome(Base):
    """Singleton row with the kiosk home screen configuration.

    Schedule writers also lock this row to serialize overlap checks.
    """

    __tablename__ = "kiosk_home"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    video_url: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    __table_args__ = (CheckConstraint("id = 1", name="ck_kiosk_home_singleton"),)
