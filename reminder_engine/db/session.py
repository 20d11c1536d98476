"""Database engine helpers for the SQL reminder store."""

from pathlib import Path

from sqlalchemy.engine import Engine, make_url
from sqlmodel import SQLModel, create_engine


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``.

    SQLite files get their parent directory created and are opened with
    ``check_same_thread=False`` because the scheduler thread and user actions
    share one engine.
    """
    url = make_url(database_url)
    connect_args: dict = {}

    if url.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def init_db(engine: Engine) -> None:
    """Create the reminder tables if they do not exist."""
    # Import models to register them with SQLModel
    from reminder_engine.models.reminder import ReminderRecord  # noqa: F401

    SQLModel.metadata.create_all(engine)
