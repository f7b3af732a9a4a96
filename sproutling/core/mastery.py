"""
Core Mastery Module.

Per-item mastery state and the derived garden stage.

Design:
- GrowthStage: Enum for the garden metaphor (seed -> bloomed, plus wilting)
- MasteryRecord: Immutable per-(profile, item) review state
- classify_growth_stage: Pure mapping from a record to its GrowthStage
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from sproutling.core.cards import ItemId

INITIAL_EASE_FACTOR = 2.0


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(UTC)


def calendar_days_between(start: datetime, end: datetime) -> int:
    """
    Whole UTC calendar days from start to end.

    Negative when end falls on an earlier UTC date than start.
    """
    return (end.astimezone(UTC).date() - start.astimezone(UTC).date()).days


class GrowthStage(str, Enum):
    """
    Visual growth stage of a learning item in the garden.

    Stages progress as the child practices; wilting marks an item that was
    doing well but has gone unreviewed for too long.
    """

    SEED = "seed"  # no attempts
    PLANTED = "planted"  # < 50% accuracy
    GROWING = "growing"  # 50-79% accuracy
    BUDDING = "budding"  # 80-89% accuracy
    BLOOMED = "bloomed"  # 90%+ accuracy, retained
    WILTING = "wilting"  # was doing well, now overdue

    @property
    def emoji(self) -> str:
        return {
            GrowthStage.SEED: "🌰",
            GrowthStage.PLANTED: "🌱",
            GrowthStage.GROWING: "🌿",
            GrowthStage.BUDDING: "🌷",
            GrowthStage.BLOOMED: "🌸",
            GrowthStage.WILTING: "🥀",
        }[self]

    @property
    def display_name(self) -> str:
        if self is GrowthStage.WILTING:
            return "Needs Water"
        return self.value.title()

    @property
    def short_label(self) -> str:
        """Compact label shown next to the emoji."""
        return {
            GrowthStage.SEED: "new",
            GrowthStage.WILTING: "thirsty",
        }.get(self, self.value)

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            GrowthStage.SEED: "yellow4",
            GrowthStage.PLANTED: "pale_green3",
            GrowthStage.GROWING: "green",
            GrowthStage.BUDDING: "hot_pink",
            GrowthStage.BLOOMED: "magenta",
            GrowthStage.WILTING: "dark_orange",
        }[self]

    @property
    def sort_order(self) -> int:
        """Lower is earlier; wilting sorts last so it stands out."""
        return list(GrowthStage).index(self)

    @property
    def is_mastered(self) -> bool:
        return self is GrowthStage.BLOOMED

    @property
    def needs_attention(self) -> bool:
        return self in (GrowthStage.WILTING, GrowthStage.SEED)


@dataclass(frozen=True)
class MasteryRecord:
    """
    Mastery state for one learning item of one profile.

    Identity is (profile_id, item_id). Records are values: the update engine
    returns a new record instead of mutating this one.
    """

    profile_id: str
    item_id: ItemId
    subject: str
    level_id: int
    activity_type: str

    # Spaced repetition metrics
    interval: int = 1  # days, 1..30
    ease_factor: float = INITIAL_EASE_FACTOR  # 1.3..2.5
    repetitions: int = 0
    last_quality: int = 0

    # Scheduling
    last_review_date: datetime | None = None
    next_review_date: datetime | None = None

    # Performance history
    total_attempts: int = 0
    correct_attempts: int = 0
    average_response_time: float = 0.0

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def new(
        cls,
        profile_id: str,
        item_id: ItemId,
        subject: str,
        level_id: int,
        activity_type: str,
        now: datetime | None = None,
    ) -> MasteryRecord:
        """Create a fresh record that is due immediately."""
        now = now or utcnow()
        return cls(
            profile_id=str(profile_id),
            item_id=item_id,
            subject=str(subject),
            level_id=level_id,
            activity_type=str(activity_type),
            next_review_date=now,
            created_at=now,
            updated_at=now,
        )

    @property
    def key(self) -> tuple[str, str]:
        return (self.profile_id, self.item_id)

    @property
    def accuracy(self) -> float:
        """Accuracy as a percentage (0-100)."""
        if self.total_attempts <= 0:
            return 0.0
        return self.correct_attempts / self.total_attempts * 100

    @property
    def is_mastered(self) -> bool:
        """At least 2 passing reviews in a row with high accuracy."""
        return self.repetitions >= 2 and self.accuracy >= 90 and self.last_quality >= 3

    @property
    def is_struggling(self) -> bool:
        return self.ease_factor < 1.5 or (self.total_attempts >= 3 and self.accuracy < 50)

    @property
    def mastery_level(self) -> int:
        """Mastery on a 0-3 scale for compact displays."""
        if self.is_mastered:
            return 3
        if self.repetitions >= 2 and self.ease_factor >= 1.8:
            return 2
        if self.repetitions >= 1:
            return 1
        return 0

    def is_due(self, now: datetime | None = None) -> bool:
        """A record without a scheduled review is always due."""
        if self.next_review_date is None:
            return True
        return self.next_review_date <= (now or utcnow())

    def growth_stage(self, now: datetime | None = None) -> GrowthStage:
        return classify_growth_stage(self, now)


def classify_growth_stage(record: MasteryRecord, now: datetime | None = None) -> GrowthStage:
    """
    Classify a record into its garden stage.

    Checks run in order and the first match wins, so a record that qualifies
    as both wilting and bloomed is wilting.
    """
    now = now or utcnow()
    accuracy = record.accuracy

    was_doing_well = record.is_mastered or (record.repetitions >= 2 and accuracy >= 80)
    if (
        was_doing_well
        and record.last_review_date is not None
        and record.next_review_date is not None
    ):
        days_since_review = calendar_days_between(record.last_review_date, now)
        days_overdue = calendar_days_between(record.next_review_date, now)
        if days_overdue > 3 and days_since_review > 7:
            return GrowthStage.WILTING

    if record.total_attempts == 0:
        return GrowthStage.SEED

    if accuracy >= 90 and record.repetitions >= 2:
        return GrowthStage.BLOOMED

    if accuracy >= 80 or (accuracy >= 90 and record.repetitions == 1):
        return GrowthStage.BUDDING

    if accuracy >= 50:
        return GrowthStage.GROWING

    return GrowthStage.PLANTED
