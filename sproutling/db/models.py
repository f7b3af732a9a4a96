"""
Mastery Persistence Models.

SQLAlchemy model for per-item review state. Timestamps are stored as naive
UTC and re-attached to UTC when converted back to a MasteryRecord.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Float, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from sproutling.core.cards import ItemId
from sproutling.core.mastery import MasteryRecord


class Base(DeclarativeBase):
    pass


def to_naive_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def from_naive_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class ItemMasteryRow(Base):
    """One row per (profile, item)."""

    __tablename__ = "item_mastery"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    profile_id: Mapped[str] = mapped_column(Text, nullable=False)
    item_id: Mapped[str] = mapped_column(Text, nullable=False)
    subject: Mapped[str] = mapped_column(Text, nullable=False)
    level_id: Mapped[int] = mapped_column(Integer, default=0)
    activity_type: Mapped[str] = mapped_column(Text, default="")

    interval: Mapped[int] = mapped_column(Integer, default=1)
    ease_factor: Mapped[float] = mapped_column(Float, default=2.0)
    repetitions: Mapped[int] = mapped_column(Integer, default=0)
    last_quality: Mapped[int] = mapped_column(Integer, default=0)

    last_review_date: Mapped[datetime | None] = mapped_column(DateTime)
    next_review_date: Mapped[datetime | None] = mapped_column(DateTime)

    total_attempts: Mapped[int] = mapped_column(Integer, default=0)
    correct_attempts: Mapped[int] = mapped_column(Integer, default=0)
    average_response_time: Mapped[float] = mapped_column(Float, default=0.0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint("profile_id", "item_id", name="uq_profile_item"),
        Index("idx_mastery_due", "profile_id", "subject", "next_review_date"),
    )

    def __repr__(self) -> str:
        return f"<ItemMasteryRow profile={self.profile_id} item={self.item_id} interval={self.interval}>"

    @classmethod
    def from_record(cls, record: MasteryRecord) -> ItemMasteryRow:
        row = cls(profile_id=record.profile_id, item_id=record.item_id)
        row.apply(record)
        return row

    def apply(self, record: MasteryRecord) -> None:
        """Copy every mutable field of the record onto this row."""
        self.subject = record.subject
        self.level_id = record.level_id
        self.activity_type = record.activity_type
        self.interval = record.interval
        self.ease_factor = record.ease_factor
        self.repetitions = record.repetitions
        self.last_quality = record.last_quality
        self.last_review_date = to_naive_utc(record.last_review_date)
        self.next_review_date = to_naive_utc(record.next_review_date)
        self.total_attempts = record.total_attempts
        self.correct_attempts = record.correct_attempts
        self.average_response_time = record.average_response_time
        self.created_at = to_naive_utc(record.created_at)
        self.updated_at = to_naive_utc(record.updated_at)

    def to_record(self) -> MasteryRecord:
        return MasteryRecord(
            profile_id=self.profile_id,
            item_id=ItemId(self.item_id),
            subject=self.subject,
            level_id=self.level_id or 0,
            activity_type=self.activity_type or "",
            interval=self.interval or 1,
            ease_factor=self.ease_factor if self.ease_factor is not None else 2.0,
            repetitions=self.repetitions or 0,
            last_quality=self.last_quality or 0,
            last_review_date=from_naive_utc(self.last_review_date),
            next_review_date=from_naive_utc(self.next_review_date),
            total_attempts=self.total_attempts or 0,
            correct_attempts=self.correct_attempts or 0,
            average_response_time=self.average_response_time or 0.0,
            created_at=from_naive_utc(self.created_at),
            updated_at=from_naive_utc(self.updated_at),
        )
