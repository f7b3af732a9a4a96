"""
Lesson cards and item identity.

A LessonCard is one activity shown to the child (count the apples, trace the
letter B). Cards come from the curriculum and are never mutated here.

Review history is keyed by an ItemId derived from the card's content fields
only, so that two cards teaching the same fact always share a history even
when the curriculum is reshuffled or reloaded.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, NewType

ItemId = NewType("ItemId", str)


class Subject(StrEnum):
    """Curriculum subjects."""

    MATH = "math"
    READING = "reading"

    @property
    def display_name(self) -> str:
        return {
            Subject.MATH: "Numbers & Counting",
            Subject.READING: "Letters & Phonics",
        }[self]


class ActivityType(StrEnum):
    """Activity kinds understood by the scheduler."""

    # Math
    NUMBER_WITH_OBJECTS = "numberWithObjects"
    NUMBER_MATCHING = "numberMatching"
    COUNTING_TOUCH = "countingTouch"
    SUBITIZING = "subitizing"  # quick recognition of 1-5
    COMPARISON = "comparison"

    # Reading
    LETTER_CARD = "letterCard"
    LETTER_MATCHING = "letterMatching"
    PHONICS_BLENDING = "phonicsBlending"
    VOCABULARY_CARD = "vocabularyCard"

    @classmethod
    def parse(cls, value: str | ActivityType | None) -> ActivityType | None:
        """Return the matching type, or None for unknown strings."""
        if isinstance(value, ActivityType):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class LessonCard:
    """
    A single activity card.

    Only the content fields feed into the item id. ``card_id`` is a random
    per-instance identifier and ``source`` records whether the card was placed
    in the lesson as new content or as a review.
    """

    activity_type: str

    # Number activities
    number: int | None = None
    objects: str | None = None
    number_options: tuple[int, ...] | None = None

    # Comparison activities
    left_count: int | None = None
    right_count: int | None = None
    left_objects: str | None = None
    right_objects: str | None = None

    # Letter activities
    letter: str | None = None
    word: str | None = None
    emoji: str | None = None
    sound: str | None = None
    letter_options: tuple[str, ...] | None = None
    letters: tuple[str, ...] | None = None

    # Vocabulary activities
    category: str | None = None

    card_id: str = field(default_factory=lambda: str(uuid.uuid4()), compare=False)
    source: str = field(default="new", compare=False)  # 'new' or 'review'

    @property
    def kind(self) -> ActivityType | None:
        return ActivityType.parse(self.activity_type)

    @property
    def is_review(self) -> bool:
        return self.source == "review"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LessonCard:
        """Build a card from a curriculum JSON object (camelCase keys)."""

        def _tuple(key: str) -> tuple | None:
            value = data.get(key)
            return tuple(value) if isinstance(value, (list, tuple)) else None

        return cls(
            activity_type=data["type"],
            number=data.get("number"),
            objects=data.get("objects"),
            number_options=_tuple("numberOptions"),
            left_count=data.get("leftCount"),
            right_count=data.get("rightCount"),
            left_objects=data.get("leftObjects"),
            right_objects=data.get("rightObjects"),
            letter=data.get("letter"),
            word=data.get("word"),
            emoji=data.get("emoji"),
            sound=data.get("sound"),
            letter_options=_tuple("letterOptions"),
            letters=_tuple("letters"),
            category=data.get("category"),
        )


_NUMBER_FIELDS = ("number", "left_count", "right_count")
_TEXT_FIELDS = ("objects", "letter", "word")


def has_valid_content(card: LessonCard) -> bool:
    """True when the fields used for the item id have the expected types."""
    for name in _NUMBER_FIELDS:
        value = getattr(card, name)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            return False
    for name in _TEXT_FIELDS:
        value = getattr(card, name)
        if value is not None and not isinstance(value, str):
            return False
    return True


def derive_item_id(card: LessonCard) -> ItemId | None:
    """
    Derive the stable item id for a card.

    Format varies by activity type:
    - Numbers: "num_3_stars", "match_5", "count_10", "subit_3", "cmp_3_5"
    - Letters: "letter_A_apple", "letmatch_B", "blend_cat", "vocab_dog"

    Returns:
        The item id, or None when the activity type is unknown or the
        content fields are malformed
    """
    kind = card.kind
    if kind is None:
        return None
    if not has_valid_content(card):
        return None

    number = card.number if card.number is not None else 0

    if kind is ActivityType.NUMBER_WITH_OBJECTS:
        objects = card.objects if card.objects is not None else "items"
        item_id = f"num_{number}_{objects}"
    elif kind is ActivityType.NUMBER_MATCHING:
        item_id = f"match_{number}"
    elif kind is ActivityType.COUNTING_TOUCH:
        item_id = f"count_{number}"
    elif kind is ActivityType.SUBITIZING:
        item_id = f"subit_{number}"
    elif kind is ActivityType.COMPARISON:
        left = card.left_count if card.left_count is not None else 0
        right = card.right_count if card.right_count is not None else 0
        item_id = f"cmp_{left}_{right}"
    elif kind is ActivityType.LETTER_CARD:
        letter = card.letter if card.letter is not None else "?"
        word = card.word if card.word is not None else ""
        item_id = f"letter_{letter}_{word.lower()}"
    elif kind is ActivityType.LETTER_MATCHING:
        letter = card.letter if card.letter is not None else "?"
        item_id = f"letmatch_{letter}"
    elif kind is ActivityType.PHONICS_BLENDING:
        word = card.word if card.word is not None else "word"
        item_id = f"blend_{word.lower()}"
    else:
        word = card.word if card.word is not None else "word"
        item_id = f"vocab_{word.lower()}"

    return ItemId(item_id)
