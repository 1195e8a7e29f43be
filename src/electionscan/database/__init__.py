from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from electionscan.config import settings
from electionscan.database.operations import (
    create_new_sqlite_database,
    get_alembic_config,
    get_scoped_sqlite_session,
)
from electionscan.database.store import DepositStore
from electionscan.logging import logger
from electionscan.version import __version__

# The engine connects lazily, so the database file is only created by `ensure_database`
db_session = get_scoped_sqlite_session(database_path=settings.database.path)


def get_current_database_version() -> str | None:
    with db_session() as session:
        return MigrationContext.configure(
            connection=session.connection()
        ).get_current_revision()


def get_latest_database_version() -> str | None:
    return ScriptDirectory.from_config(config=get_alembic_config()).get_current_head()


def ensure_database() -> None:
    """
    Create the configured database if it does not exist, or warn if its schema is out of date.
    """

    if not settings.database.path.exists():
        create_new_sqlite_database(db_path=settings.database.path)
        return

    current_database_version = get_current_database_version()
    latest_database_version = get_latest_database_version()
    if current_database_version is not None and current_database_version != latest_database_version:
        logger.warning(
            f"The current database revision ({current_database_version}) does not match the "
            f"latest ({latest_database_version}) for electionscan version {__version__}!"
            "\n"
            "Database-related features may raise exceptions if you continue. Perform database "
            "migrations with 'electionscan database upgrade'."
        )


__all__ = (
    "DepositStore",
    "db_session",
    "ensure_database",
    "get_current_database_version",
    "get_latest_database_version",
)
