"""
Integration tests for SqlMasteryStore on SQLite.

Each test gets a fresh in-memory database sharing one connection.
"""

from datetime import timedelta

import pytest

from sproutling.cli.main import extract_label
from sproutling.content.curriculum import StaticCurriculum
from sproutling.core.cards import LessonCard
from sproutling.core.mastery import GrowthStage
from sproutling.db.database import make_engine
from sproutling.delivery.state_store import SqlMasteryStore
from sproutling.study.review_service import ReviewService


@pytest.fixture
def sql_store():
    return SqlMasteryStore(engine=make_engine("sqlite://"))


@pytest.fixture
def cards():
    return [LessonCard("letterCard", letter=letter, word=word) for letter, word in
            [("A", "Apple"), ("B", "Ball"), ("C", "Cat"), ("D", "Dog"), ("E", "Egg")]]


class TestSqlMasteryStore:
    def test_put_and_get_roundtrip(self, sql_store, cards, record_factory, now):
        record = record_factory(
            cards[0],
            subject="reading",
            interval=3,
            ease_factor=2.07,
            repetitions=2,
            last_quality=5,
            last_review_date=now,
            next_review_date=now + timedelta(days=3),
            total_attempts=2,
            correct_attempts=2,
            average_response_time=2.5,
        )
        assert sql_store.put(record) is True

        loaded = sql_store.get("kid-1", "letter_A_apple")
        assert loaded == record
        assert loaded.next_review_date.tzinfo is not None

    def test_get_missing(self, sql_store):
        assert sql_store.get("kid-1", "letter_Z_zebra") is None

    def test_put_replaces_existing(self, sql_store, cards, record_factory):
        sql_store.put(record_factory(cards[0], subject="reading"))
        sql_store.put(record_factory(cards[0], subject="reading", repetitions=4))

        records = sql_store.list_all("kid-1", "reading")
        assert len(records) == 1
        assert records[0].repetitions == 4

    def test_list_due_order_and_filter(self, sql_store, cards, record_factory, now):
        sql_store.put(record_factory(cards[0], subject="reading", next_review_date=now - timedelta(days=1)))
        sql_store.put(record_factory(cards[1], subject="reading", next_review_date=now + timedelta(days=2)))
        sql_store.put(record_factory(cards[2], subject="reading", next_review_date=None))
        sql_store.put(record_factory(cards[3], subject="reading", next_review_date=now - timedelta(days=3)))
        sql_store.put(record_factory(cards[4], subject="math", next_review_date=now - timedelta(days=9)))

        due = sql_store.list_due("kid-1", "reading", as_of=now)
        assert [r.item_id for r in due] == ["letter_C_cat", "letter_D_dog", "letter_A_apple"]

    def test_list_due_boundary_is_inclusive(self, sql_store, cards, record_factory, now):
        sql_store.put(record_factory(cards[0], subject="reading", next_review_date=now))
        assert len(sql_store.list_due("kid-1", "reading", as_of=now)) == 1

    def test_delete_profile(self, sql_store, cards, record_factory):
        sql_store.put(record_factory(cards[0], subject="reading"))
        sql_store.put(record_factory(cards[1], subject="reading"))
        sql_store.put(record_factory(cards[0], subject="reading", profile_id="kid-2"))

        assert sql_store.delete_profile("kid-1") == 2
        assert sql_store.list_all("kid-1", "reading") == []
        assert len(sql_store.list_all("kid-2", "reading")) == 1

    def test_file_database_created(self, tmp_path):
        db_path = tmp_path / "nested" / "mastery.db"
        SqlMasteryStore(f"sqlite:///{db_path}")
        assert db_path.exists()


class TestReviewServiceWithSql:
    """End-to-end flow through the service on a SQL store."""

    def test_lesson_flow(self, sql_store, cards, now):
        lesson_cards = cards * 2
        service = ReviewService(sql_store, StaticCurriculum({("reading", 1): lesson_cards}))

        first = service.compose_lesson("kid-1", "reading", 1, as_of=now)
        assert first == lesson_cards

        service.record_answer("kid-1", cards[2], "reading", 1, False, attempts=3, now=now)
        apple = service.record_answer("kid-1", cards[0], "reading", 1, True, response_time=1.0, now=now)
        assert service.growth_stage(apple, now) is GrowthStage.BUDDING

        later = now + timedelta(days=1)
        plan = service.plan_lesson("kid-1", "reading", 1, as_of=later)

        # 10 cards: budget 2, struggling/failed item first
        assert plan.matched_reviews == 2
        assert [c.word for c in plan.review_cards] == ["Cat", "Apple"]
        assert plan.total_cards == 12

        stats = service.stats("kid-1", "reading", as_of=later)
        assert stats.total_items == 2
        assert stats.due_for_review == 2
        assert stats.overall_accuracy == pytest.approx(50.0)

        garden = service.garden_items("kid-1", "reading", as_of=later, labeler=extract_label)
        assert [(g.item_id, g.label) for g in garden] == [
            ("letter_A_apple", "A"),
            ("letter_C_cat", "C"),
        ]
        assert service.plants_needing_water("kid-1", "reading", as_of=later) == 0
