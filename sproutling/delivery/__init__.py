"""
Delivery: review scheduling and persistence.

Components:
- ReviewUpdateEngine: Dampened SM-2 update for young learners
- ReviewScheduler: Answer recording and due-item lookup
- MasteryStore: Storage protocol, with in-memory and SQLAlchemy implementations
"""

from .scheduler import ReviewScheduler, ReviewUpdateEngine, quality_from_answer
from .state_store import InMemoryMasteryStore, MasteryStore, SqlMasteryStore

__all__ = [
    # Scheduling
    "ReviewScheduler",
    "ReviewUpdateEngine",
    "quality_from_answer",
    # Persistence
    "MasteryStore",
    "InMemoryMasteryStore",
    "SqlMasteryStore",
]
