"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

import pytest
from loguru import logger

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sproutling.core.cards import ActivityType, LessonCard, derive_item_id  # noqa: E402
from sproutling.core.mastery import MasteryRecord  # noqa: E402
from sproutling.delivery.state_store import InMemoryMasteryStore  # noqa: E402

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed reference time for deterministic scheduling."""
    return NOW


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def store():
    """Empty in-memory mastery store."""
    return InMemoryMasteryStore()


@pytest.fixture
def math_cards():
    """Eight math cards with distinct item ids."""
    return [
        LessonCard(ActivityType.NUMBER_WITH_OBJECTS, number=n, objects="apples")
        for n in range(1, 9)
    ]


def make_record(card: LessonCard, profile_id: str = "kid-1", subject: str = "math", **fields):
    """Build a MasteryRecord for a card with overridden fields."""
    record = MasteryRecord.new(
        profile_id=profile_id,
        item_id=derive_item_id(card),
        subject=subject,
        level_id=1,
        activity_type=card.activity_type,
        now=fields.pop("created", NOW),
    )
    if fields:
        record = replace(record, **fields)
    return record


@pytest.fixture
def record_factory():
    """Factory fixture wrapping make_record."""
    return make_record
