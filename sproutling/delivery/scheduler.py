"""
Child-Friendly SM-2 Review Scheduler.

Implements:
- A dampened SM-2 update for young learners (ReviewUpdateEngine)
- Mapping of raw answers to SM-2 quality scores
- Get-or-create / update / persist of mastery records (ReviewScheduler)

Differences from classic SM-2:
- Shorter early intervals (1 then 3 days instead of 1 then 6)
- Ease factor starts at 2.0 and moves at 70% of the classic adjustment
- Ease factor capped at 2.5 and intervals capped at 30 days

Quality Scale:
0 - Incorrect after 3+ attempts
1 - Incorrect, still trying
2 - Correct after 3+ attempts
3 - Correct on the second attempt
4 - Correct on the first attempt
5 - Correct on the first attempt in under 3 seconds
"""

from __future__ import annotations

import math
import threading
import weakref
from dataclasses import replace
from datetime import datetime, timedelta

from loguru import logger

from sproutling.core.cards import ItemId, LessonCard, derive_item_id
from sproutling.core.mastery import MasteryRecord, utcnow
from sproutling.delivery.state_store import MasteryStore

# =============================================================================
# Quality Mapping
# =============================================================================


def quality_from_answer(
    is_correct: bool,
    attempts: int = 1,
    response_time: float = 0.0,
) -> int:
    """
    Convert a correct/incorrect answer into a quality score.

    Args:
        is_correct: Whether the answer was correct
        attempts: Attempts taken (1 = first try)
        response_time: Seconds to answer (0 when unknown)

    Returns:
        Quality 0-5
    """
    if not is_correct:
        return 0 if attempts >= 3 else 1

    if attempts == 1:
        if 0 < response_time < 3:
            return 5
        return 4
    if attempts == 2:
        return 3
    return 2


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# =============================================================================
# Update Engine
# =============================================================================


class ReviewUpdateEngine:
    """
    Pure review update: (record, quality) -> new record.

    The constants are fixed rules for young learners, not tuning knobs.
    """

    MIN_EASE_FACTOR = 1.3
    MAX_EASE_FACTOR = 2.5
    MAX_INTERVAL = 30
    PASSING_QUALITY = 3
    EASE_DAMPENING = 0.7

    def update(
        self,
        record: MasteryRecord,
        quality: int,
        now: datetime | None = None,
        response_time: float = 0.0,
    ) -> MasteryRecord:
        """
        Apply one review to a record.

        Args:
            record: Current state (left untouched)
            quality: Quality score, clamped to 0-5
            now: Review timestamp (defaults to current UTC time)
            response_time: Seconds to answer, folded into the running average when positive

        Returns:
            Updated MasteryRecord
        """
        now = now or utcnow()
        q = min(5, max(0, int(quality)))
        passed = q >= self.PASSING_QUALITY

        total_attempts = record.total_attempts + 1
        correct_attempts = record.correct_attempts + (1 if passed else 0)

        if passed:
            if record.repetitions == 0:
                interval = 1
            elif record.repetitions == 1:
                interval = 3  # gentler than SM-2's 6
            else:
                grown = _round_half_up(record.interval * record.ease_factor)
                interval = min(self.MAX_INTERVAL, max(1, grown))
            repetitions = record.repetitions + 1
        else:
            repetitions = 0
            interval = 1

        # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), dampened
        adjustment = 0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)
        ease_factor = min(
            self.MAX_EASE_FACTOR,
            max(self.MIN_EASE_FACTOR, record.ease_factor + adjustment * self.EASE_DAMPENING),
        )

        average_response_time = record.average_response_time
        if response_time > 0:
            average_response_time += (response_time - average_response_time) / total_attempts

        return replace(
            record,
            interval=interval,
            ease_factor=ease_factor,
            repetitions=repetitions,
            last_quality=q,
            last_review_date=now,
            next_review_date=now + timedelta(days=interval),
            total_attempts=total_attempts,
            correct_attempts=correct_attempts,
            average_response_time=average_response_time,
            updated_at=now,
        )


# =============================================================================
# Review Scheduler
# =============================================================================


class ReviewScheduler:
    """
    Records answers and serves due items for a profile.

    Key principles:
    1. Records are created lazily on first exposure to an item
    2. Each get-or-create-update-persist runs under a per-(profile, item) lock
    3. Storage failures degrade to empty results and never raise
    """

    derive_item_id = staticmethod(derive_item_id)

    def __init__(
        self,
        store: MasteryStore,
        engine: ReviewUpdateEngine | None = None,
    ):
        """
        Initialize the scheduler.

        Args:
            store: MasteryStore used for every read and write
            engine: ReviewUpdateEngine (creates default if None)
        """
        self.store = store
        self.engine = engine or ReviewUpdateEngine()
        # Entries vanish once no caller holds the lock
        self._locks: weakref.WeakValueDictionary[tuple[str, str], threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    def _lock_for(self, profile_id: str, item_id: ItemId) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get((profile_id, item_id))
            if lock is None:
                lock = threading.Lock()
                self._locks[(profile_id, item_id)] = lock
            return lock

    # -------------------------------------------------------------------------
    # Store access
    # -------------------------------------------------------------------------

    def _fetch(self, profile_id: str, item_id: ItemId) -> MasteryRecord | None:
        try:
            return self.store.get(profile_id, item_id)
        except Exception as e:
            logger.warning(f"Mastery lookup failed for {profile_id}/{item_id}: {e}")
            return None

    def _save(self, record: MasteryRecord) -> bool:
        try:
            saved = self.store.put(record)
        except Exception as e:
            logger.warning(f"Mastery save failed for {record.profile_id}/{record.item_id}: {e}")
            return False
        if saved is False:
            logger.warning(
                f"Mastery for {record.profile_id}/{record.item_id} was not persisted; "
                "continuing with in-memory state"
            )
            return False
        return True

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def get_or_create(
        self,
        profile_id: str,
        card: LessonCard,
        subject: str,
        level: int,
        now: datetime | None = None,
    ) -> MasteryRecord | None:
        """
        Fetch the record for a card, or build a new unsaved one.

        Returns:
            MasteryRecord, or None if the card has no item id
        """
        item_id = derive_item_id(card)
        if item_id is None:
            logger.warning(f"Cannot derive item id for {card.activity_type!r} card")
            return None

        existing = self._fetch(str(profile_id), item_id)
        if existing is not None:
            return existing

        return MasteryRecord.new(
            profile_id=str(profile_id),
            item_id=item_id,
            subject=subject,
            level_id=level,
            activity_type=card.activity_type,
            now=now,
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
        """
        Record an answer and reschedule the item.

        Args:
            profile_id: Learner profile
            card: The card that was answered
            subject: Subject of the lesson
            level: Level of the lesson
            is_correct: Whether the final answer was correct
            attempts: Attempts taken (1 = first try)
            response_time: Seconds to answer (0 when unknown)
            now: Review timestamp (defaults to current UTC time)

        Returns:
            Updated MasteryRecord (even if persisting it failed), or None for
            cards whose activity type is unknown
        """
        now = now or utcnow()
        profile_id = str(profile_id)
        quality = quality_from_answer(is_correct, attempts, response_time)

        item_id = derive_item_id(card)
        if item_id is None:
            logger.warning(
                f"Skipping answer for {card.activity_type!r} card: "
                "unknown activity type or malformed content"
            )
            return None

        with self._lock_for(profile_id, item_id):
            current = self.get_or_create(profile_id, card, subject, level, now=now)
            if current is None:
                return None
            updated = self.engine.update(current, quality, now=now, response_time=response_time)
            self._save(updated)

        logger.debug(
            f"Recorded answer for {item_id}: quality={quality}, "
            f"interval={updated.interval}d, ease={updated.ease_factor:.2f}, "
            f"repetitions={updated.repetitions}"
        )

        return updated

    def due_items(
        self,
        profile_id: str,
        subject: str,
        as_of: datetime | None = None,
    ) -> list[MasteryRecord]:
        """
        Records due for review, most overdue first.

        Records with no scheduled review count as due.
        """
        as_of = as_of or utcnow()
        try:
            records = self.store.list_due(str(profile_id), subject, as_of)
        except Exception as e:
            logger.warning(f"Due item lookup failed for {profile_id}/{subject}: {e}")
            return []

        return [r for r in records if r.is_due(as_of)]
