"""
Curriculum: Lesson Card Loader.

Loads lesson cards per (subject, level) from:
- JSON files named {subject}.json (bundled data or a configured directory)
- A small built-in fallback set when a file or level is missing

Features:
- Validates files with pydantic before building cards
- Skips cards whose activity type is unknown
- Shuffles answer options so the right answer is not always in the same place
"""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sproutling.core.cards import ActivityType, LessonCard, Subject

BUNDLED_DATA_DIR = Path(__file__).parent / "data"


@runtime_checkable
class CurriculumProvider(Protocol):
    """Source of lesson cards for a subject and level."""

    def cards_for(self, subject: str, level: int) -> list[LessonCard]: ...


# =============================================================================
# File Schema
# =============================================================================


class CardData(BaseModel):
    """
    A card as stored in curriculum JSON (camelCase keys are kept as-is).

    Validated one card at a time so a malformed card is skipped without
    losing the rest of its level. Unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    type: str

    number: int | None = None
    objects: str | None = None
    numberOptions: list[int] | None = None

    leftCount: int | None = None
    rightCount: int | None = None
    leftObjects: str | None = None
    rightObjects: str | None = None

    letter: str | None = None
    word: str | None = None
    emoji: str | None = None
    sound: str | None = None
    letterOptions: list[str] | None = None
    letters: list[str] | None = None

    category: str | None = None


class LevelData(BaseModel):
    id: int
    title: str = ""
    subtitle: str = ""
    cards: list[dict[str, Any]] = Field(default_factory=list)


class CurriculumData(BaseModel):
    subject: str
    levels: list[LevelData] = Field(default_factory=list)


# =============================================================================
# Providers
# =============================================================================


class StaticCurriculum:
    """In-memory provider keyed by (subject, level)."""

    def __init__(self, cards: dict[tuple[str, int], list[LessonCard]] | None = None):
        self._cards = {(str(s), lvl): list(c) for (s, lvl), c in (cards or {}).items()}

    def add(self, subject: str, level: int, cards: list[LessonCard]) -> None:
        self._cards[(str(subject), level)] = list(cards)

    def cards_for(self, subject: str, level: int) -> list[LessonCard]:
        return list(self._cards.get((str(subject), level), []))


def fallback_cards(subject: str) -> list[LessonCard]:
    """Minimal cards used when curriculum data cannot be loaded."""
    if str(subject) == Subject.MATH:
        return [
            LessonCard(ActivityType.NUMBER_WITH_OBJECTS, number=1, objects="apples"),
            LessonCard(ActivityType.NUMBER_WITH_OBJECTS, number=2, objects="stars"),
            LessonCard(ActivityType.COUNTING_TOUCH, number=3),
        ]
    return [
        LessonCard(ActivityType.LETTER_CARD, letter="A", word="Apple", emoji="🍎", sound="ah"),
        LessonCard(ActivityType.LETTER_CARD, letter="B", word="Ball", emoji="⚽", sound="buh"),
        LessonCard(ActivityType.LETTER_CARD, letter="C", word="Cat", emoji="🐱", sound="kuh"),
    ]


class JsonCurriculumLoader:
    """
    Loads and caches curriculum JSON per subject.

    File layout: {"subject": ..., "levels": [{"id", "title", "subtitle", "cards": [...]}]}
    """

    def __init__(
        self,
        data_dir: Path | str | None = None,
        shuffle_options: bool = True,
        rng: random.Random | None = None,
    ):
        """
        Initialize loader.

        Args:
            data_dir: Directory with {subject}.json files (bundled data if None)
            shuffle_options: Shuffle number/letter answer options on load
            rng: Random source for shuffling
        """
        self.data_dir = Path(data_dir) if data_dir is not None else BUNDLED_DATA_DIR
        self.shuffle_options = shuffle_options
        self._rng = rng or random.Random()
        self._cache: dict[str, CurriculumData | None] = {}

    def _load(self, subject: str) -> CurriculumData | None:
        subject = str(subject)
        if subject in self._cache:
            return self._cache[subject]

        path = self.data_dir / f"{subject}.json"
        data: CurriculumData | None = None
        try:
            with open(path, encoding="utf-8") as f:
                data = CurriculumData.model_validate(json.load(f))
        except FileNotFoundError:
            logger.warning(f"Curriculum file not found: {path}")
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Error loading curriculum {path}: {e}")

        self._cache[subject] = data
        return data

    def levels_for(self, subject: str) -> list[LevelData]:
        """Level metadata for a subject (empty if the file is unavailable)."""
        data = self._load(subject)
        return list(data.levels) if data else []

    def cards_for(self, subject: str, level: int) -> list[LessonCard]:
        """
        Get lesson cards for a subject and level.

        Returns:
            Cards in curriculum order, or fallback cards when no data exists
        """
        data = self._load(subject)
        level_data = None
        if data is not None:
            level_data = next((lvl for lvl in data.levels if lvl.id == level), None)

        if level_data is None:
            logger.warning(f"No curriculum data for {subject} level {level}, using fallback cards")
            return fallback_cards(subject)

        cards = []
        for position, raw in enumerate(level_data.cards):
            try:
                card_data = CardData.model_validate(raw)
            except ValidationError as e:
                logger.warning(
                    f"Skipping malformed card {position} in {subject} level {level}: {e.error_count()} errors"
                )
                logger.debug(str(e))
                continue
            if ActivityType.parse(card_data.type) is None:
                logger.debug(f"Skipping card with unknown type {card_data.type!r}")
                continue
            cards.append(self._to_card(card_data.model_dump()))
        return cards

    def _to_card(self, raw: dict) -> LessonCard:
        if self.shuffle_options:
            for key in ("numberOptions", "letterOptions"):
                if raw.get(key):
                    options = list(raw[key])
                    self._rng.shuffle(options)
                    raw[key] = options
        return LessonCard.from_dict(raw)
