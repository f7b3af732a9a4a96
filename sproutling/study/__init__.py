"""
Study Module.

Provides lesson-level services on top of the scheduler:
- Lesson composition with interleaved reviews
- Mastery statistics and garden projection
- ReviewService facade for the presentation layer
"""

from sproutling.study.interleaver import LessonComposer, LessonPlan, interleave
from sproutling.study.mastery_stats import GardenItem, MasteryStats, MasteryStatsAggregator
from sproutling.study.review_service import ReviewService

__all__ = [
    "LessonComposer",
    "LessonPlan",
    "interleave",
    "MasteryStats",
    "MasteryStatsAggregator",
    "GardenItem",
    "ReviewService",
]
