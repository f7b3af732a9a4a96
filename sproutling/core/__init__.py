"""
Core Module - Shared domain models.

Components:
- cards: LessonCard, ActivityType, Subject and item id derivation
- mastery: MasteryRecord, GrowthStage and the growth stage classifier

Design Principle:
The delivery and study packages import from sproutling.core rather than
redefining the record or the item id format.
"""

from sproutling.core.cards import ActivityType, ItemId, LessonCard, Subject, derive_item_id
from sproutling.core.mastery import (
    GrowthStage,
    MasteryRecord,
    calendar_days_between,
    classify_growth_stage,
    utcnow,
)

__all__ = [
    # Cards
    "ActivityType",
    "ItemId",
    "LessonCard",
    "Subject",
    "derive_item_id",
    # Mastery
    "GrowthStage",
    "MasteryRecord",
    "calendar_days_between",
    "classify_growth_stage",
    "utcnow",
]
