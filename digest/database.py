"""Database engine factory for the host storage."""

from pathlib import Path

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from digest.log import get_logger
from digest.models.rows import StoredValue  # noqa: F401
from digest.types import Environment

logger = get_logger(__name__)


def setup_database_url(environment: Environment, db_path: Path | None = None) -> str:
    """Construct the database URL.

    Args:
        environment: Environment type
        db_path: Database file; an in-memory database is used when None

    Returns:
        Database connection URL
    """
    if environment == Environment.TESTING or db_path is None:
        return "sqlite://"

    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


def create_database_engine(
    environment: Environment,
    db_path: Path | None = None,
    echo: bool = False,
) -> Engine:
    """Create an engine and make sure the tables exist.

    Args:
        environment: Environment type
        db_path: Optional database file
        echo: Enable SQL echo for debugging

    Returns:
        Configured SQLModel engine
    """
    database_url = setup_database_url(environment, db_path)
    logger.info(f"Creating database engine for: {database_url}")

    if database_url == "sqlite://":
        from sqlalchemy.pool import StaticPool

        # One shared connection, otherwise each session sees an empty database
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            database_url, echo=echo, connect_args={"check_same_thread": False}
        )

    SQLModel.metadata.create_all(engine)
    return engine
