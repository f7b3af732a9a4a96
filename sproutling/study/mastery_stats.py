"""
Mastery Statistics.

Read-only rollups over a profile's records for one subject:
- mastered: 2+ consecutive passes, 90%+ accuracy, last answer passing
- struggling: ease below 1.5, or under 50% accuracy after 3+ attempts
- due: next review reached (or never scheduled)
- overall accuracy: plain mean of per-item accuracy (not attempt-weighted)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from sproutling.core.mastery import GrowthStage, MasteryRecord, utcnow
from sproutling.delivery.state_store import MasteryStore


@dataclass(frozen=True)
class MasteryStats:
    """Mastery progress for a profile and subject."""

    total_items: int = 0
    mastered_items: int = 0
    struggling_items: int = 0
    due_for_review: int = 0
    overall_accuracy: float = 0.0

    @property
    def mastery_percentage(self) -> float:
        if self.total_items <= 0:
            return 0.0
        return self.mastered_items / self.total_items * 100


@dataclass(frozen=True)
class GardenItem:
    """One plant in the garden view."""

    item_id: str
    stage: GrowthStage
    level_id: int
    label: str = ""


class MasteryStatsAggregator:
    """Computes MasteryStats and garden projections from a MasteryStore."""

    def __init__(self, store: MasteryStore):
        self.store = store

    def _records(self, profile_id: str, subject: str) -> list[MasteryRecord]:
        try:
            return self.store.list_all(str(profile_id), subject)
        except Exception as e:
            logger.warning(f"Mastery lookup failed for {profile_id}/{subject}: {e}")
            return []

    @staticmethod
    def summarize(records: list[MasteryRecord], as_of: datetime | None = None) -> MasteryStats:
        """Compute stats over an already-fetched list of records."""
        if not records:
            return MasteryStats()

        as_of = as_of or utcnow()
        return MasteryStats(
            total_items=len(records),
            mastered_items=sum(1 for r in records if r.is_mastered),
            struggling_items=sum(1 for r in records if r.is_struggling),
            due_for_review=sum(1 for r in records if r.is_due(as_of)),
            overall_accuracy=sum(r.accuracy for r in records) / len(records),
        )

    def stats(
        self,
        profile_id: str,
        subject: str,
        as_of: datetime | None = None,
    ) -> MasteryStats:
        """
        Get mastery statistics for a profile.

        Returns:
            MasteryStats (all zeros when the profile has no records or the store fails)
        """
        return self.summarize(self._records(profile_id, subject), as_of)

    def garden_items(
        self,
        profile_id: str,
        subject: str,
        as_of: datetime | None = None,
        labeler: Callable[[str, str], str] | None = None,
    ) -> list[GardenItem]:
        """
        Records as garden plants, sorted by item id.

        Args:
            labeler: Maps (item_id, subject) to a display label; labels stay blank if None
        """
        as_of = as_of or utcnow()
        records = sorted(self._records(profile_id, subject), key=lambda r: r.item_id)
        return [
            GardenItem(
                item_id=r.item_id,
                stage=r.growth_stage(as_of),
                level_id=r.level_id,
                label=labeler(r.item_id, subject) if labeler else "",
            )
            for r in records
        ]

    def plants_needing_water(
        self,
        profile_id: str,
        subject: str,
        as_of: datetime | None = None,
    ) -> int:
        return sum(
            1
            for item in self.garden_items(profile_id, subject, as_of)
            if item.stage is GrowthStage.WILTING
        )
