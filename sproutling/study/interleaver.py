"""
Lesson Composer.

Blends due review items into a level's lesson:
- Due records are matched to the level's cards by item id
- Review share targets 20% of the lesson (at least one card)
- Struggling items go first, then the most overdue
- Review cards are spread through the lesson, not grouped at the end
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from loguru import logger

from sproutling.content.curriculum import CurriculumProvider
from sproutling.core.cards import LessonCard, derive_item_id
from sproutling.core.mastery import MasteryRecord
from sproutling.delivery.scheduler import ReviewScheduler

REVIEW_RATIO = 0.2

_NEVER = datetime.max.replace(tzinfo=UTC)


@dataclass
class LessonPlan:
    """A composed lesson."""
    new_cards: list[LessonCard] = field(default_factory=list)
    review_cards: list[LessonCard] = field(default_factory=list)
    sequence: list[LessonCard] = field(default_factory=list)
    matched_reviews: int = 0

    @property
    def total_cards(self) -> int:
        return len(self.sequence)


def review_priority(record: MasteryRecord) -> tuple[bool, datetime]:
    """Sort key: struggling first, then earliest next review (unscheduled last)."""
    return (not record.is_struggling, record.next_review_date or _NEVER)


def interleave(new_cards: list[LessonCard], review_cards: list[LessonCard]) -> list[LessonCard]:
    """
    Insert review cards at roughly even positions.

    Positions are computed from the input lengths and inserted one at a
    time, so later insertions land on already-shifted indices.
    """
    if not review_cards:
        return list(new_cards)

    result = list(new_cards)
    spacing = (len(new_cards) + len(review_cards)) // (len(review_cards) + 1)

    for index, card in enumerate(review_cards, start=1):
        position = min(index * spacing, len(result))
        result.insert(position, card)

    return result


class LessonComposer:
    """
    Builds the final card sequence for a lesson.

    The algorithm:
    1. Match due records to the current curriculum (drop the rest)
    2. Budget reviews at 20% of the lesson, minimum one
    3. Order candidates by priority and keep the budgeted number
    4. Interleave them into the new-card sequence
    """

    def __init__(
        self,
        scheduler: ReviewScheduler | None = None,
        curriculum: CurriculumProvider | None = None,
    ):
        """
        Initialize composer.

        Args:
            scheduler: Source of due items (needed for compose_lesson)
            curriculum: Source of level cards (needed for compose_lesson)
        """
        self.scheduler = scheduler
        self.curriculum = curriculum

    @staticmethod
    def review_budget(card_count: int) -> int:
        return max(1, int(card_count * REVIEW_RATIO))

    def plan(
        self,
        subject_cards: list[LessonCard],
        due_records: list[MasteryRecord],
    ) -> LessonPlan:
        """
        Compose a lesson and keep the breakdown.

        Args:
            subject_cards: Cards for the level, in curriculum order
            due_records: Records due for review

        Returns:
            LessonPlan whose sequence is the lesson order
        """
        plan = LessonPlan(new_cards=list(subject_cards))

        cards_by_id: dict[str, LessonCard] = {}
        for card in subject_cards:
            item_id = derive_item_id(card)
            if item_id is not None:
                cards_by_id.setdefault(item_id, card)

        matched: list[tuple[MasteryRecord, LessonCard]] = [
            (record, cards_by_id[record.item_id])
            for record in due_records
            if record.item_id in cards_by_id
        ]
        plan.matched_reviews = len(matched)

        if not matched:
            plan.sequence = list(subject_cards)
            return plan

        budget = self.review_budget(len(subject_cards))
        matched.sort(key=lambda pair: review_priority(pair[0]))

        plan.review_cards = [
            replace(card, card_id=f"review:{card.card_id}", source="review")
            for _, card in matched[:budget]
        ]
        plan.sequence = interleave(plan.new_cards, plan.review_cards)
        return plan

    def compose(
        self,
        subject_cards: list[LessonCard],
        due_records: list[MasteryRecord],
    ) -> list[LessonCard]:
        """Final ordered cards for a lesson."""
        return self.plan(subject_cards, due_records).sequence

    def compose_lesson(
        self,
        profile_id: str,
        subject: str,
        level: int,
        as_of: datetime | None = None,
    ) -> LessonPlan:
        """
        Compose a lesson for a profile from the curriculum and its due items.

        Returns:
            LessonPlan (empty when no scheduler or curriculum is configured)
        """
        if self.scheduler is None or self.curriculum is None:
            logger.warning("LessonComposer needs a scheduler and a curriculum to compose lessons")
            return LessonPlan()

        try:
            cards = self.curriculum.cards_for(subject, level)
        except Exception as e:
            logger.warning(f"Curriculum lookup failed for {subject} level {level}: {e}")
            cards = []

        due = self.scheduler.due_items(profile_id, subject, as_of)
        plan = self.plan(cards, due)

        logger.info(
            f"Composed lesson for {profile_id} {subject} L{level}: "
            f"{len(plan.new_cards)} new + {len(plan.review_cards)} review "
            f"({plan.matched_reviews} due matched, {len(due)} due total)"
        )

        return plan
