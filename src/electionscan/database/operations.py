import pathlib

from alembic import command
from alembic.config import Config
from sqlalchemy import URL, create_engine, text
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from electionscan.config import settings
from electionscan.database.models import Base
from electionscan.logging import logger


def create_new_sqlite_database(db_path: pathlib.Path) -> None:
    """
    Create the deposit and cursor tables in a new SQLite file and stamp it with the latest
    migration revision.
    """

    engine = create_engine(
        f"sqlite:///{db_path.absolute()}",
    )
    with engine.connect() as connection:
        assert (
            connection.execute(
                text("PRAGMA journal_mode=WAL;"),
            ).scalar()
            == "wal"
        )

    Base.metadata.create_all(bind=engine)
    command.stamp(get_alembic_config(db_path), "head")
    logger.info(f"Initialized new deposit database at {db_path}")


def upgrade_existing_sqlite_database(db_path: pathlib.Path | None = None) -> None:
    command.upgrade(get_alembic_config(db_path), "head")
    logger.info("Upgraded the deposit database schema.")


def get_scoped_sqlite_session(database_path: pathlib.Path) -> scoped_session[Session]:
    return scoped_session(
        session_factory=sessionmaker(
            bind=create_engine(
                URL.create(
                    drivername="sqlite",
                    database=str(database_path.absolute()),
                )
            )
        )
    )


def get_alembic_config(db_path: pathlib.Path | None = None) -> Config:
    if db_path is None:
        db_path = settings.database.path

    cfg = Config()
    cfg.set_main_option("sqlalchemy.url", f"sqlite:///{db_path.absolute()}")
    cfg.set_main_option("script_location", "electionscan:migrations")

    return cfg
