"""
Mastery State Store.

Persistence boundary for MasteryRecord values:
- MasteryStore: the protocol the scheduler depends on
- InMemoryMasteryStore: dict-backed store (tests, offline use)
- SqlMasteryStore: SQLAlchemy-backed store (default: ~/.sproutling/mastery.db)

Stores are best-effort. Read failures are logged and surface as None or an
empty list, and write failures are logged and surface as False. Nothing
raises into the scheduling code.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from loguru import logger
from sqlalchemy import Engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from sproutling.core.mastery import MasteryRecord, utcnow
from sproutling.db.database import init_db, make_engine, make_session_factory, session_scope
from sproutling.db.models import ItemMasteryRow, to_naive_utc

_FAR_FUTURE = datetime.max.replace(tzinfo=UTC)


def _due_sort_key(record: MasteryRecord) -> tuple[int, datetime]:
    # Unscheduled records sort first
    if record.next_review_date is None:
        return (0, _FAR_FUTURE)
    return (1, record.next_review_date)


@runtime_checkable
class MasteryStore(Protocol):
    """Storage operations consumed by the scheduler."""

    def get(self, profile_id: str, item_id: str) -> MasteryRecord | None: ...

    def put(self, record: MasteryRecord) -> bool: ...

    def list_due(
        self, profile_id: str, subject: str, as_of: datetime | None = None
    ) -> list[MasteryRecord]: ...

    def list_all(self, profile_id: str, subject: str) -> list[MasteryRecord]: ...


# =============================================================================
# In-Memory Store
# =============================================================================


class InMemoryMasteryStore:
    """Dictionary-backed MasteryStore keyed by (profile_id, item_id)."""

    def __init__(self, records: list[MasteryRecord] | None = None):
        self._records: dict[tuple[str, str], MasteryRecord] = {}
        for record in records or []:
            self._records[record.key] = record

    def __len__(self) -> int:
        return len(self._records)

    def get(self, profile_id: str, item_id: str) -> MasteryRecord | None:
        return self._records.get((str(profile_id), item_id))

    def put(self, record: MasteryRecord) -> bool:
        self._records[record.key] = record
        return True

    def list_due(
        self, profile_id: str, subject: str, as_of: datetime | None = None
    ) -> list[MasteryRecord]:
        as_of = as_of or utcnow()
        due = [r for r in self.list_all(profile_id, subject) if r.is_due(as_of)]
        return sorted(due, key=_due_sort_key)

    def list_all(self, profile_id: str, subject: str) -> list[MasteryRecord]:
        profile_id = str(profile_id)
        subject = str(subject)
        return [
            r
            for r in self._records.values()
            if r.profile_id == profile_id and r.subject == subject
        ]

    def delete_profile(self, profile_id: str) -> int:
        """Remove every record owned by a profile."""
        keys = [k for k in self._records if k[0] == str(profile_id)]
        for key in keys:
            del self._records[key]
        return len(keys)


# =============================================================================
# SQL Store
# =============================================================================


class SqlMasteryStore:
    """
    SQLAlchemy-backed MasteryStore.

    Handles:
    - insert-or-replace by (profile_id, item_id)
    - due queries ordered by next_review_date (unscheduled first)
    - whole-profile deletion
    """

    def __init__(
        self,
        database_url: str | None = None,
        engine: Engine | None = None,
    ):
        """
        Initialize the store.

        Args:
            database_url: Connection string (ignored when engine is given)
            engine: Pre-built engine, e.g. shared in-memory SQLite in tests
        """
        if engine is None:
            if database_url is None:
                from config import get_settings

                database_url = get_settings().database_url
            engine = make_engine(database_url)

        self.engine = engine
        self._session_factory: sessionmaker[Session] = make_session_factory(engine)
        init_db(engine)

        logger.info(f"SqlMasteryStore initialized at {engine.url}")

    def get(self, profile_id: str, item_id: str) -> MasteryRecord | None:
        try:
            with session_scope(self._session_factory) as session:
                row = session.scalars(
                    select(ItemMasteryRow).where(
                        ItemMasteryRow.profile_id == str(profile_id),
                        ItemMasteryRow.item_id == item_id,
                    )
                ).first()
                return row.to_record() if row is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Error fetching mastery {profile_id}/{item_id}: {e}")
            return None

    def put(self, record: MasteryRecord) -> bool:
        try:
            with session_scope(self._session_factory) as session:
                row = session.scalars(
                    select(ItemMasteryRow).where(
                        ItemMasteryRow.profile_id == record.profile_id,
                        ItemMasteryRow.item_id == record.item_id,
                    )
                ).first()
                if row is None:
                    session.add(ItemMasteryRow.from_record(record))
                else:
                    row.apply(record)
            return True
        except SQLAlchemyError as e:
            logger.error(f"Error saving mastery {record.profile_id}/{record.item_id}: {e}")
            return False

    def list_due(
        self, profile_id: str, subject: str, as_of: datetime | None = None
    ) -> list[MasteryRecord]:
        as_of = as_of or utcnow()
        column = ItemMasteryRow.next_review_date
        try:
            with session_scope(self._session_factory) as session:
                rows = session.scalars(
                    select(ItemMasteryRow)
                    .where(
                        ItemMasteryRow.profile_id == str(profile_id),
                        ItemMasteryRow.subject == str(subject),
                        column.is_(None) | (column <= to_naive_utc(as_of)),
                    )
                    .order_by(column.is_not(None), column.asc())
                ).all()
                return [row.to_record() for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error fetching due items for {profile_id}/{subject}: {e}")
            return []

    def list_all(self, profile_id: str, subject: str) -> list[MasteryRecord]:
        try:
            with session_scope(self._session_factory) as session:
                rows = session.scalars(
                    select(ItemMasteryRow)
                    .where(
                        ItemMasteryRow.profile_id == str(profile_id),
                        ItemMasteryRow.subject == str(subject),
                    )
                    .order_by(ItemMasteryRow.item_id)
                ).all()
                return [row.to_record() for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error fetching mastery records for {profile_id}/{subject}: {e}")
            return []

    def delete_profile(self, profile_id: str) -> int:
        """Remove every record owned by a profile. Returns rows deleted."""
        try:
            with session_scope(self._session_factory) as session:
                rows = session.scalars(
                    select(ItemMasteryRow).where(ItemMasteryRow.profile_id == str(profile_id))
                ).all()
                for row in rows:
                    session.delete(row)
                return len(rows)
        except SQLAlchemyError as e:
            logger.error(f"Error deleting records for profile {profile_id}: {e}")
            return 0
