from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from storefront.core.config import get_settings

settings = get_settings()


def _with_sslmode(url: str) -> str:
    if "sslmode=" in url:
        return url
    return url + ("&" if "?" in url else "?") + "sslmode=require"


def _build_engine(url: str):
    """
    Engine for DATABASE_URL.

    sqlite (local runs, tests): one shared connection, usable from the
    threadpool FastAPI runs sync endpoints in.

    Postgres (behind a session-mode pooler): SSL required, a single pooled
    connection per process, pre-ping to drop connections the pooler closed.
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        _with_sslmode(url),
        echo=False,
        pool_pre_ping=True,
        pool_size=1,
        max_overflow=0,
    )


engine = _build_engine(settings.DATABASE_URL)


def create_db_and_tables() -> None:
    """Create missing tables for every imported table model."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency yielding one Session per request.

    Services commit; the session is closed when the request ends.
    """
    with Session(engine) as session:
        yield session
