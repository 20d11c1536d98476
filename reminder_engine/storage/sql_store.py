"""SQL storage for the reminder collection, built on SQLModel.

``save()`` replaces the whole table inside one transaction, which keeps the
same whole-collection semantics as the JSON store. Row order is preserved
through an autoincrement ``position`` column.
"""

import logging

from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from reminder_engine.db.session import build_engine, init_db
from reminder_engine.exceptions import ReminderStoreError
from reminder_engine.models.reminder import Reminder, ReminderRecord
from reminder_engine.storage.base import ReminderStore

logger = logging.getLogger(__name__)


class SqlReminderStore(ReminderStore):
    """Reminder storage backed by any SQLAlchemy database URL."""

    def __init__(self, database_url: str | None = None, engine: Engine | None = None) -> None:
        """Initialize the store.

        Args:
            database_url: Database URL, used when no engine is given
            engine: Pre-built engine (tests share an in-memory SQLite one)
        """
        if engine is None:
            if not database_url:
                raise ValueError("SqlReminderStore needs a database_url or an engine")
            engine = build_engine(database_url)

        self.engine = engine
        init_db(self.engine)

        logger.info(f"SqlReminderStore initialized: {self.engine.url}")

    @property
    def store_name(self) -> str:
        return f"sql:{self.engine.url.render_as_string(hide_password=True)}"

    def load(self) -> list[Reminder]:
        try:
            with Session(self.engine) as session:
                rows = session.exec(
                    select(ReminderRecord).order_by(ReminderRecord.position)
                ).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load reminders: {e}", exc_info=True)
            raise ReminderStoreError(f"Cannot load reminders: {e}") from e

        reminders: list[Reminder] = []
        for row in rows:
            try:
                reminders.append(row.to_reminder())
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid reminder row {row.id}",
                    extra={"source": self.store_name, "error": str(e)[:500]},
                )

        return reminders

    def save(self, reminders: list[Reminder]) -> None:
        try:
            with Session(self.engine) as session:
                for row in session.exec(select(ReminderRecord)).all():
                    session.delete(row)
                # Deletes must hit the table before re-inserting the same ids
                session.flush()
                session.add_all([ReminderRecord.from_reminder(r) for r in reminders])
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save reminders: {e}", exc_info=True)
            raise ReminderStoreError(f"Cannot save reminders: {e}") from e

        logger.debug(f"Saved {len(reminders)} reminders")
