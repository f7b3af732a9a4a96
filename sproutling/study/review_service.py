"""
Review Service.

Single entry point for the presentation layer:
- record_answer: grade an answer and reschedule the item
- compose_lesson: level cards with due reviews blended in
- stats / garden_items: mastery rollups
- growth_stage: garden stage for a single record
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from config import Settings
from sproutling.content.curriculum import CurriculumProvider, JsonCurriculumLoader
from sproutling.core.cards import LessonCard
from sproutling.core.mastery import GrowthStage, MasteryRecord, classify_growth_stage
from sproutling.delivery.scheduler import ReviewScheduler
from sproutling.delivery.state_store import MasteryStore, SqlMasteryStore
from sproutling.study.interleaver import LessonComposer, LessonPlan
from sproutling.study.mastery_stats import GardenItem, MasteryStats, MasteryStatsAggregator


class ReviewService:
    """Wires the scheduler, composer and stats around one store and curriculum."""

    def __init__(self, store: MasteryStore, curriculum: CurriculumProvider):
        self.store = store
        self.curriculum = curriculum
        self.scheduler = ReviewScheduler(store)
        self.composer = LessonComposer(self.scheduler, curriculum)
        self.aggregator = MasteryStatsAggregator(store)

    @classmethod
    def from_settings(cls, settings: Settings) -> ReviewService:
        """Build a service backed by the configured database and curriculum."""
        return cls(
            store=SqlMasteryStore(settings.database_url),
            curriculum=JsonCurriculumLoader(settings.curriculum_dir),
        )

    def record_answer(
        self,
        profile_id: str,
        card: LessonCard,
        subject: str,
        level: int,
        is_correct: bool,
        attempts: int = 1,
        response_time: float = 0.0,
        now: datetime | None = None,
    ) -> MasteryRecord | None:
        return self.scheduler.record_answer(
            profile_id,
            card,
            subject,
            level,
            is_correct,
            attempts=attempts,
            response_time=response_time,
            now=now,
        )

    def compose_lesson(
        self,
        profile_id: str,
        subject: str,
        level: int,
        as_of: datetime | None = None,
    ) -> list[LessonCard]:
        return self.plan_lesson(profile_id, subject, level, as_of).sequence

    def plan_lesson(
        self,
        profile_id: str,
        subject: str,
        level: int,
        as_of: datetime | None = None,
    ) -> LessonPlan:
        return self.composer.compose_lesson(profile_id, subject, level, as_of)

    def stats(self, profile_id: str, subject: str, as_of: datetime | None = None) -> MasteryStats:
        return self.aggregator.stats(profile_id, subject, as_of)

    def garden_items(
        self,
        profile_id: str,
        subject: str,
        as_of: datetime | None = None,
        labeler: Callable[[str, str], str] | None = None,
    ) -> list[GardenItem]:
        return self.aggregator.garden_items(profile_id, subject, as_of, labeler)

    def plants_needing_water(
        self, profile_id: str, subject: str, as_of: datetime | None = None
    ) -> int:
        return self.aggregator.plants_needing_water(profile_id, subject, as_of)

    @staticmethod
    def growth_stage(record: MasteryRecord, now: datetime | None = None) -> GrowthStage:
        return classify_growth_stage(record, now)
