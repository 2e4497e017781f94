from typing import AsyncGenerator, Optional, Union

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from shikshan.core.config import Settings, get_settings

Base = declarative_base()


def _on_sqlite_connect(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # Let SQLAlchemy emit BEGIN itself so DDL and SAVEPOINTs are transactional.
    dbapi_connection.isolation_level = None


def _on_sqlite_begin(conn) -> None:
    conn.exec_driver_sql("BEGIN")


def create_engine(
    url: Optional[Union[str, URL]] = None,
    *,
    settings: Optional[Settings] = None,
    echo: Optional[bool] = None,
) -> AsyncEngine:
    """Build an async engine for the configured database.

    PostgreSQL gets pre-ping/recycle pooling and optional TLS. SQLite gets
    foreign-key enforcement and transactional DDL on every connection, and a
    single shared connection when the database is in memory.
    """
    settings = settings or get_settings()
    url = make_url(url) if url is not None else settings.database_url
    if echo is None:
        echo = settings.db_echo

    if url.get_backend_name() == "sqlite":
        kwargs = {}
        if url.database in (None, "", ":memory:"):
            kwargs = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
        engine = create_async_engine(url, echo=echo, **kwargs)
        event.listen(engine.sync_engine, "connect", _on_sqlite_connect)
        event.listen(engine.sync_engine, "begin", _on_sqlite_begin)
        return engine

    connect_args = {"ssl": "require"} if settings.db_ssl else {}
    # pool_pre_ping: drop connections the server or network closed while idle.
    # pool_recycle: discard connections after this many seconds.
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=300,
        connect_args=connect_args,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.session_factory() as session:
        yield session
