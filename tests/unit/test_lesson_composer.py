"""
Unit tests for the LessonComposer.

Tests:
- Review budget (20% of the lesson, at least one)
- Priority ordering (struggling first, then most overdue)
- Interleaving positions
- Degenerate inputs (no cards, no due records, unmatched records)
"""

import json
from datetime import timedelta

import pytest

from sproutling.content.curriculum import JsonCurriculumLoader, StaticCurriculum
from sproutling.core.cards import LessonCard, derive_item_id
from sproutling.delivery.scheduler import ReviewScheduler
from sproutling.study.interleaver import LessonComposer, interleave, review_priority


@pytest.fixture
def composer():
    return LessonComposer()


def _ids(cards):
    return [derive_item_id(c) for c in cards]


class TestReviewBudget:
    @pytest.mark.parametrize("count,budget", [(0, 1), (3, 1), (5, 1), (8, 1), (10, 2), (15, 3), (20, 4)])
    def test_budget(self, count, budget):
        assert LessonComposer.review_budget(count) == budget


class TestInterleave:
    def test_no_reviews_returns_copy(self, math_cards):
        result = interleave(math_cards, [])
        assert result == math_cards
        assert result is not math_cards

    def test_single_review_in_middle(self, math_cards):
        review = LessonCard("countingTouch", number=9, source="review")
        result = interleave(math_cards, [review])
        # spacing = (8 + 1) // 2 = 4
        assert result.index(review) == 4
        assert len(result) == 9

    def test_two_reviews_spread_out(self):
        new = [LessonCard("numberMatching", number=n) for n in range(10)]
        reviews = [LessonCard("subitizing", number=n, source="review") for n in (1, 2)]
        result = interleave(new, reviews)
        # spacing = 12 // 3 = 4, second insert lands on the shifted list
        assert [i for i, c in enumerate(result) if c.is_review] == [4, 8]

    def test_position_clamped_to_end(self):
        new = [LessonCard("numberMatching", number=1)]
        reviews = [LessonCard("subitizing", number=n, source="review") for n in (1, 2, 3)]
        result = interleave(new, reviews)
        assert len(result) == 4
        assert result[0] == new[0]


class TestCompose:
    def test_no_cards(self, composer, math_cards, record_factory):
        due = [record_factory(math_cards[0])]
        assert composer.compose([], due) == []

    def test_no_due_records(self, composer, math_cards):
        result = composer.compose(math_cards, [])
        assert result == math_cards
        assert not any(c.is_review for c in result)

    def test_unmatched_due_records_are_dropped(self, composer, math_cards, record_factory):
        other = record_factory(LessonCard("letterCard", letter="Z", word="Zebra"), subject="reading")
        plan = composer.plan(math_cards, [other])
        assert plan.matched_reviews == 0
        assert plan.sequence == math_cards

    def test_struggling_item_chosen_first(self, composer, math_cards, record_factory, now):
        overdue = record_factory(math_cards[2], next_review_date=now - timedelta(days=5))
        struggling = record_factory(
            math_cards[6], ease_factor=1.4, next_review_date=now - timedelta(days=1)
        )

        plan = composer.plan(math_cards, [overdue, struggling])

        assert plan.matched_reviews == 2
        assert len(plan.review_cards) == 1
        assert derive_item_id(plan.review_cards[0]) == derive_item_id(math_cards[6])
        assert plan.total_cards == 9
        assert plan.sequence[4].is_review

    def test_most_overdue_first_among_equals(self, composer, record_factory, now):
        cards = [LessonCard("numberMatching", number=n) for n in range(10)]
        due = [
            record_factory(cards[1], next_review_date=now - timedelta(days=1)),
            record_factory(cards[2], next_review_date=now - timedelta(days=4)),
            record_factory(cards[3], next_review_date=now - timedelta(days=2)),
        ]
        plan = composer.plan(cards, due)
        assert _ids(plan.review_cards) == ["match_2", "match_3"]

    def test_review_cards_are_marked_copies(self, composer, math_cards, record_factory):
        plan = composer.plan(math_cards, [record_factory(math_cards[0])])
        review = plan.review_cards[0]
        original = math_cards[0]

        assert review.source == "review"
        assert review.card_id == f"review:{original.card_id}"
        assert derive_item_id(review) == derive_item_id(original)
        assert original.source == "new"

    def test_new_cards_keep_order(self, composer, math_cards, record_factory):
        plan = composer.plan(math_cards, [record_factory(math_cards[3])])
        assert [c for c in plan.sequence if not c.is_review] == math_cards

    def test_priority_puts_unscheduled_last(self, record_factory, math_cards, now):
        scheduled = record_factory(math_cards[0], next_review_date=now)
        unscheduled = record_factory(math_cards[1], next_review_date=None)
        ordered = sorted([unscheduled, scheduled], key=review_priority)
        assert ordered == [scheduled, unscheduled]


class TestComposeLesson:
    def test_uses_scheduler_and_curriculum(self, store, math_cards, now):
        scheduler = ReviewScheduler(store)
        curriculum = StaticCurriculum({("math", 1): math_cards})
        composer = LessonComposer(scheduler, curriculum)

        scheduler.record_answer("kid-1", math_cards[5], "math", 1, False, now=now - timedelta(days=2))
        plan = composer.compose_lesson("kid-1", "math", 1, as_of=now)

        assert len(plan.new_cards) == 8
        assert _ids(plan.review_cards) == [derive_item_id(math_cards[5])]

    def test_without_collaborators_returns_empty_plan(self, composer, log_messages):
        plan = composer.compose_lesson("kid-1", "math", 1)
        assert plan.sequence == []
        assert any("needs a scheduler" in m for m in log_messages)


class TestMalformedCards:
    """Cards without a derivable item id stay in the lesson but never match reviews."""

    def test_compose_keeps_bad_card_out_of_matching(self, composer, record_factory):
        good = LessonCard("vocabularyCard", word="Dog")
        bad = LessonCard("vocabularyCard", word=7)
        due = [record_factory(good, subject="reading")]

        plan = composer.plan([bad, good], due)

        assert plan.matched_reviews == 1
        assert _ids(plan.review_cards) == ["vocab_dog"]
        assert bad in plan.sequence

    def test_compose_with_only_bad_cards(self, composer, record_factory):
        bad = LessonCard("letterCard", letter=5)
        due = [record_factory(LessonCard("letterCard", letter="A", word="Apple"), subject="reading")]

        assert composer.compose([bad], due) == [bad]

    def test_compose_lesson_from_json_with_bad_card(self, tmp_path, store, now):
        curriculum = {
            "subject": "reading",
            "levels": [
                {
                    "id": 1,
                    "cards": [
                        {"type": "vocabularyCard", "word": "Dog"},
                        {"type": "vocabularyCard", "word": 7},
                    ],
                }
            ],
        }
        (tmp_path / "reading.json").write_text(json.dumps(curriculum), encoding="utf-8")
        scheduler = ReviewScheduler(store)
        composer = LessonComposer(scheduler, JsonCurriculumLoader(tmp_path))

        dog = LessonCard("vocabularyCard", word="Dog")
        scheduler.record_answer("kid-1", dog, "reading", 1, False, now=now - timedelta(days=2))
        plan = composer.compose_lesson("kid-1", "reading", 1, as_of=now)

        assert _ids(plan.new_cards) == ["vocab_dog"]
        assert _ids(plan.review_cards) == ["vocab_dog"]
        assert plan.total_cards == 2
